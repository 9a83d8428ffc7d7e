"""
In-memory recipe catalog with search filtering and cumulative pagination.
The whole list is fetched up front; paging only widens the displayed prefix.
"""

import logging
import threading
from typing import Iterable, List, Optional, Tuple

from recipe_browser.core.abstractions import RemoteSource
from recipe_browser.errors import BadRequest, NetworkError
from recipe_browser.models import PAGE_LENGTH, RECIPES_URL, Recipe, RecipeList, SearchScope
from recipe_browser.services import prometheus_metrics

logger = logging.getLogger(__name__)


def _matches(recipe: Recipe, needle: str, scope: SearchScope) -> bool:
    if scope == SearchScope.CUISINE:
        return needle in recipe.cuisine.lower()
    if scope == SearchScope.NAME:
        return needle in recipe.name.lower()
    return needle in recipe.name.lower() or needle in recipe.cuisine.lower()


class RecipeCatalog:
    """Holds the fetched recipe list and the search/paging state over it."""

    def __init__(
        self,
        source: RemoteSource,
        url: str = RECIPES_URL,
        page_length: int = PAGE_LENGTH,
    ) -> None:
        self._source = source
        self.url = url
        self.page_length = page_length
        self._recipes: Tuple[Recipe, ...] = ()
        self.search_text = ""
        self.search_scope = SearchScope.ALL
        self.current_page = 1
        self.is_loading = False
        self.last_error: Optional[NetworkError] = None
        self.show_alert = False
        self._lock = threading.RLock()

    @property
    def recipes(self) -> Tuple[Recipe, ...]:
        return self._recipes

    def set_recipes(self, recipes: Iterable[Recipe]) -> None:
        """Replace the recipe list in one step, keeping the given order."""
        new_recipes = tuple(recipes)
        with self._lock:
            self._recipes = new_recipes
            self._clamp_page()

    def _clamp_page(self) -> None:
        # Keeps current_page within [1, total_pages()]; never rewinds otherwise.
        self.current_page = max(1, min(self.current_page, self.total_pages()))

    def refresh(self) -> None:
        """Fetch the recipe list and replace the current one. Errors propagate."""
        try:
            recipe_list = self._source.fetch_json(self.url, RecipeList)
        except NetworkError:
            prometheus_metrics.record_remote_fetch("recipes", success=False)
            raise
        prometheus_metrics.record_remote_fetch("recipes", success=True)
        self.set_recipes(recipe_list.recipes)
        logger.info("Loaded %d recipes from %s", len(recipe_list.recipes), self.url)

    def refresh_safely(self) -> bool:
        """
        Refresh and record any failure in last_error/show_alert instead of raising.
        Errors outside the network taxonomy are recorded as BadRequest.
        Returns True on success.
        """
        try:
            self.refresh()
        except NetworkError as e:
            logger.warning("Recipe refresh failed: %s", e)
            self.last_error = e
            self.show_alert = True
            return False
        except Exception as e:
            logger.warning("Recipe refresh failed unexpectedly: %s", e)
            self.last_error = BadRequest()
            self.show_alert = True
            return False
        self.last_error = None
        self.show_alert = False
        return True

    def set_search(self, text: str, scope: SearchScope = SearchScope.ALL) -> None:
        """Update filter criteria. Call reset_page() to go back to page 1."""
        with self._lock:
            self.search_text = text or ""
            self.search_scope = SearchScope(scope)
            self._clamp_page()

    def filtered(self) -> List[Recipe]:
        recipes = self._recipes
        if not self.search_text:
            return list(recipes)
        needle = self.search_text.lower()
        scope = self.search_scope
        return [r for r in recipes if _matches(r, needle, scope)]

    def total_pages(self) -> int:
        count = len(self.filtered())
        return (count + self.page_length - 1) // self.page_length

    def displayed(self) -> List[Recipe]:
        """Prefix of filtered() covering every page up to current_page."""
        filtered = self.filtered()
        end = min(self.current_page * self.page_length, len(filtered))
        return filtered[:end]

    def reset_page(self) -> None:
        with self._lock:
            self.current_page = 1
            self.is_loading = False

    def load_next_page_if_needed(self) -> None:
        """Widen the displayed prefix by one page, unless busy or on the last page."""
        with self._lock:
            if self.is_loading or self.current_page >= self.total_pages():
                return
            self.is_loading = True
            try:
                self.current_page += 1
            finally:
                self.is_loading = False

    def page_slice(self, page: int) -> List[Recipe]:
        """Discrete page of the unfiltered list, 1-based. Empty when out of range."""
        if page <= 0:
            return []
        recipes = self._recipes
        start = (page - 1) * self.page_length
        if start >= len(recipes):
            return []
        end = min(start + self.page_length, len(recipes))
        return list(recipes[start:end])

    def cuisines(self) -> List[str]:
        return sorted({r.cuisine for r in self._recipes})

    def get_recipe(self, recipe_id: str) -> Optional[Recipe]:
        for recipe in self._recipes:
            if recipe.id == recipe_id:
                return recipe
        return None
