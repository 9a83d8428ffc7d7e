from typing import Any, Optional

from fastapi import APIRouter, Depends, HTTPException, Response

from recipe_browser.core.dependencies import (
    get_cache_store,
    get_image_service,
    get_recipe_catalog,
)
from recipe_browser.models import Recipe, SearchScope
from recipe_browser.services.cache_store import DiskCacheStore
from recipe_browser.services.catalog import RecipeCatalog
from recipe_browser.services.images import ImageCacheService
from recipe_browser.services.metrics import (
    aggregate_metrics,
    current_metrics,
    start_request_metrics,
)
from recipe_browser.services.prometheus_metrics import record_recipe_search

router = APIRouter(prefix="/api")


def _recipe_to_response(recipe: Recipe) -> dict[str, Any]:
    """Convert Recipe to its wire-format dict (uuid, photo_url_large, ...)."""
    return recipe.model_dump(mode="json", by_alias=True)


def _build_response(data: dict, include_metrics: bool = True) -> dict:
    """Build response dict, optionally including request metrics."""
    if include_metrics:
        m = current_metrics()
        if m is not None:
            aggregate_metrics.record(m)
            data = {**data, "_metrics": m.to_dict()}
    return data


def _page_info(catalog: RecipeCatalog) -> dict:
    return {
        "current_page": catalog.current_page,
        "total_pages": catalog.total_pages(),
        "page_length": catalog.page_length,
        "filtered_count": len(catalog.filtered()),
    }


@router.get("/recipes")
def get_recipes(
    search: Optional[str] = None,
    scope: SearchScope = SearchScope.ALL,
    page: Optional[int] = None,
    catalog: RecipeCatalog = Depends(get_recipe_catalog),
):
    """
    Displayed recipes for the given search. Changing the search does not move
    back to page 1; pass page=1 for that.
    """
    start_request_metrics()
    if search is not None:
        record_recipe_search(scope.value)
        catalog.set_search(search, scope)
    if page is not None:
        if page < 1:
            raise HTTPException(status_code=400, detail="page must be >= 1")
        catalog.reset_page()
        while catalog.current_page < page and catalog.current_page < catalog.total_pages():
            catalog.load_next_page_if_needed()
    recipes = [_recipe_to_response(r) for r in catalog.displayed()]
    return _build_response({"recipes": recipes, **_page_info(catalog)})


@router.post("/recipes/next-page")
def next_page(catalog: RecipeCatalog = Depends(get_recipe_catalog)):
    """Widen the displayed recipes by one page."""
    start_request_metrics()
    catalog.load_next_page_if_needed()
    recipes = [_recipe_to_response(r) for r in catalog.displayed()]
    return _build_response({"recipes": recipes, **_page_info(catalog)})


@router.post("/recipes/refresh")
def refresh_recipes(catalog: RecipeCatalog = Depends(get_recipe_catalog)):
    """Re-fetch the recipe list. Fetch errors are returned with their HTTP mapping."""
    start_request_metrics()
    catalog.refresh()
    catalog.reset_page()
    return _build_response({"count": len(catalog.recipes), **_page_info(catalog)})


@router.get("/recipes/pages/{page}")
def get_recipe_page(page: int, catalog: RecipeCatalog = Depends(get_recipe_catalog)):
    """Discrete page of the unfiltered list."""
    recipes = [_recipe_to_response(r) for r in catalog.page_slice(page)]
    return {"page": page, "recipes": recipes}


@router.get("/recipes/{recipe_id}")
def get_recipe(recipe_id: str, catalog: RecipeCatalog = Depends(get_recipe_catalog)):
    recipe = catalog.get_recipe(recipe_id)
    if recipe is None:
        raise HTTPException(status_code=404, detail="Recipe not found")
    return _recipe_to_response(recipe)


@router.get("/cuisines")
def get_cuisines(catalog: RecipeCatalog = Depends(get_recipe_catalog)):
    return {"cuisines": catalog.cuisines()}


@router.get("/images")
def get_image(url: str, images: ImageCacheService = Depends(get_image_service)):
    """Image bytes for url, served from the disk cache when present."""
    start_request_metrics()
    data = images.fetch_image(url)
    m = current_metrics()
    if m is not None:
        aggregate_metrics.record(m)
    return Response(content=data, media_type="application/octet-stream")


@router.delete("/images/cache")
def clear_image_cache(cache: DiskCacheStore = Depends(get_cache_store)):
    cache.reset()
    return {"message": "Image cache cleared", "status": "success"}


@router.get("/images/cache")
def image_cache_status(cache: DiskCacheStore = Depends(get_cache_store)):
    return {
        "total_bytes": cache.total_bytes,
        "entry_count": cache.entry_count,
        "byte_limit": cache.byte_limit,
        "count_limit": cache.count_limit,
        "available": cache.directory is not None,
    }


@router.get("/metrics")
def get_metrics():
    """Return aggregate fetch and image cache metrics."""
    return aggregate_metrics.to_dict()
