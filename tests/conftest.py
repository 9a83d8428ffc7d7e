"""
Test fixtures for Recipe Browser tests.
Uses FastAPI dependency overrides for testable, isolated components.
"""

from typing import Dict, List, Optional, Type

import pytest
from fastapi.testclient import TestClient

from recipe_browser.core.dependencies import (
    create_image_service,
    create_recipe_catalog,
    get_cache_store,
    get_image_service,
    get_recipe_catalog,
)
from recipe_browser.errors import NetworkError
from recipe_browser.main import app
from recipe_browser.models import Recipe, RecipeList
from recipe_browser.services.cache_store import DiskCacheStore
from recipe_browser.services.metrics import aggregate_metrics

CUISINES = ["Malaysian", "British", "American", "Canadian", "Tunisian"]


def make_recipes(count: int) -> List[Recipe]:
    """Recipes named 'Recipe 0'..'Recipe N-1' with ids '0'..'N-1'."""
    return [
        Recipe(
            cuisine=CUISINES[i % len(CUISINES)],
            name=f"Recipe {i}",
            id=str(i),
            photo_url_large=f"https://test.com/recipe{i}/large.jpg",
            photo_url_small=f"https://test.com/recipe{i}/small.jpg",
            source_url=f"https://test.com/recipe{i}",
            youtube_url=f"https://youtube.com/watch?v={i}",
        )
        for i in range(count)
    ]


class FakeRemoteSource:
    """In-memory RemoteSource. Records every URL requested."""

    def __init__(
        self,
        recipes: Optional[List[Recipe]] = None,
        images: Optional[Dict[str, bytes]] = None,
        error: Optional[NetworkError] = None,
    ) -> None:
        self.recipes = recipes if recipes is not None else []
        self.images = images if images is not None else {}
        self.error = error
        self.byte_requests: List[str] = []
        self.json_requests: List[str] = []

    def fetch_bytes(self, url: str) -> bytes:
        self.byte_requests.append(url)
        if self.error is not None:
            raise self.error
        return self.images.get(url, b"mock image data")

    def fetch_json(self, url: str, model: Type):
        self.json_requests.append(url)
        if self.error is not None:
            raise self.error
        payload = RecipeList(recipes=self.recipes).model_dump(mode="json", by_alias=True)
        return model.model_validate(payload)


@pytest.fixture
def sample_recipes():
    """The two sample recipes from the public recipe list."""
    return [
        Recipe(
            cuisine="Malaysian",
            name="Apam Balik",
            id="0c6ca6e7-e32a-4053-b824-1dbf749910d8",
            photo_url_large="https://d3jbb8n5wk0qxi.cloudfront.net/photos/b9ab0071-b281-4bee-b361-ec340d405320/large.jpg",
            photo_url_small="https://d3jbb8n5wk0qxi.cloudfront.net/photos/b9ab0071-b281-4bee-b361-ec340d405320/small.jpg",
            source_url="https://www.nyonyacooking.com/recipes/apam-balik~SJ5WuvsDf9WQ",
            youtube_url="https://www.youtube.com/watch?v=6R8ffRRJcrg",
        ),
        Recipe(
            cuisine="British",
            name="Apple & Blackberry Crumble",
            id="599344f4-3c5c-4cca-b914-2210e3b3312f",
            photo_url_large="https://d3jbb8n5wk0qxi.cloudfront.net/photos/535dfe4e-5d61-4db6-ba8f-7a27b1214f5d/large.jpg",
            photo_url_small="https://d3jbb8n5wk0qxi.cloudfront.net/photos/535dfe4e-5d61-4db6-ba8f-7a27b1214f5d/small.jpg",
            source_url="https://www.bbcgoodfood.com/recipes/778642/apple-and-blackberry-crumble",
            youtube_url="https://www.youtube.com/watch?v=4vhcOwVBDO4",
        ),
    ]


@pytest.fixture
def fake_source():
    """Fake remote source serving 25 recipes and mock image bytes."""
    return FakeRemoteSource(recipes=make_recipes(25))


@pytest.fixture
def cache_store(tmp_path):
    """Fresh DiskCacheStore in a temporary directory."""
    return DiskCacheStore(directory=tmp_path / "ImageCache")


@pytest.fixture
def catalog(fake_source):
    """RecipeCatalog over the fake source, already refreshed."""
    c = create_recipe_catalog(fake_source)
    c.refresh()
    return c


@pytest.fixture
def image_service(cache_store, fake_source):
    return create_image_service(cache_store, fake_source)


@pytest.fixture
def client(catalog, cache_store, image_service):
    """Test client with dependency overrides for catalog, cache and image service."""
    app.dependency_overrides[get_recipe_catalog] = lambda: catalog
    app.dependency_overrides[get_cache_store] = lambda: cache_store
    app.dependency_overrides[get_image_service] = lambda: image_service

    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_aggregate_metrics():
    """Reset aggregate metrics before each test for consistent assertions."""
    aggregate_metrics.reset()
    yield
