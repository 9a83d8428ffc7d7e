from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Constants
RECIPES_URL = "https://d3jbb8n5wk0qxi.cloudfront.net/recipes.json"
PAGE_LENGTH = 10


class SearchScope(str, Enum):
    ALL = "All"
    CUISINE = "Cuisine"
    NAME = "Name"


class Recipe(BaseModel):
    """A recipe as served by the recipe list endpoint. Immutable."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    cuisine: str
    name: str
    id: str = Field(alias="uuid")
    photo_url_large: Optional[str] = None
    photo_url_small: Optional[str] = None
    source_url: Optional[str] = None
    youtube_url: Optional[str] = None


class RecipeList(BaseModel):
    recipes: List[Recipe]
