"""
FastAPI dependency injection providers.
Use Depends(get_recipe_catalog), etc. in route handlers.
"""

import os
from typing import Optional

from recipe_browser.adapters.remote import HttpFetcher
from recipe_browser.core.abstractions import BlobCache, RemoteSource
from recipe_browser.models import RECIPES_URL
from recipe_browser.services import metrics, prometheus_metrics
from recipe_browser.services.cache_store import DEFAULT_CACHE_DIR, DiskCacheStore
from recipe_browser.services.catalog import RecipeCatalog
from recipe_browser.services.images import ImageCacheService

# --- Singletons (lazy-initialized) ---

_remote_source: Optional[HttpFetcher] = None
_cache_store: Optional[DiskCacheStore] = None
_recipe_catalog: Optional[RecipeCatalog] = None
_image_service: Optional[ImageCacheService] = None


def _record_request_timing(elapsed_ms: float) -> None:
    metrics.record_fetch(elapsed_ms)
    prometheus_metrics.record_fetch_duration(elapsed_ms / 1000)


def get_remote_source() -> RemoteSource:
    """Provide the HTTP fetcher shared by the catalog and the image service."""
    global _remote_source
    if _remote_source is None:
        _remote_source = HttpFetcher(on_request_done=_record_request_timing)
    return _remote_source


def get_cache_store() -> DiskCacheStore:
    """Provide the image disk cache. RECIPE_IMAGE_CACHE_DIR overrides its location."""
    global _cache_store
    if _cache_store is None:
        directory = os.environ.get("RECIPE_IMAGE_CACHE_DIR") or DEFAULT_CACHE_DIR
        _cache_store = DiskCacheStore(directory=directory)
    return _cache_store


def get_recipe_catalog() -> RecipeCatalog:
    """Provide the recipe catalog. RECIPES_URL overrides the list endpoint."""
    global _recipe_catalog
    if _recipe_catalog is None:
        url = os.environ.get("RECIPES_URL") or RECIPES_URL
        _recipe_catalog = RecipeCatalog(get_remote_source(), url=url)
    return _recipe_catalog


def get_image_service() -> ImageCacheService:
    """Provide ImageCacheService. Used as Depends(get_image_service)."""
    global _image_service
    if _image_service is None:
        _image_service = ImageCacheService(get_cache_store(), get_remote_source())
    return _image_service


# --- Factories for test overrides ---


def create_recipe_catalog(source: RemoteSource) -> RecipeCatalog:
    """Create a RecipeCatalog over the given source. Use in tests with a fake source."""
    return RecipeCatalog(source)


def create_image_service(cache: BlobCache, source: RemoteSource) -> ImageCacheService:
    """Create an ImageCacheService from explicit collaborators."""
    return ImageCacheService(cache, source)
