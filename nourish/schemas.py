"""Shapes we ask the model for, and the checks we run on what it sends back.

The schema goes out with the request so the model is constrained. The
pydantic models check the reply anyway; constrained output is still text.
"""

import json
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from nourish.models import Ingredient


RECIPE_SCHEMA: dict[str, Any] = {
    "type": "object",
    "properties": {
        "recipeName": {"type": "string"},
        "description": {
            "type": "string",
            "description": (
                "A description of the dish, focusing on the health benefits and "
                "vitamins of its main ingredients. For example, if the dish "
                "contains carrots, mention that they are a good source of "
                "Vitamin A, which is beneficial for eye health."
            ),
        },
        "ingredients": {
            "type": "array",
            "items": {
                "type": "object",
                "properties": {
                    "name": {"type": "string"},
                    "amount": {"type": "string"},
                },
                "required": ["name", "amount"],
            },
        },
        "instructions": {
            "type": "array",
            "items": {"type": "string"},
        },
    },
    "required": ["recipeName", "description", "ingredients", "instructions"],
}


DISH_SUGGESTIONS_SCHEMA: dict[str, Any] = {
    "type": "array",
    "items": {
        "type": "object",
        "properties": {
            "dishName": {"type": "string"},
            "description": {
                "type": "string",
                "description": "A brief, enticing description of the dish.",
            },
        },
        "required": ["dishName", "description"],
    },
}


class IngredientDraft(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    amount: str

    def to_ingredient(self) -> Ingredient:
        return Ingredient(name=self.name, amount=self.amount)


class RecipeDraft(BaseModel):
    """A recipe as the model wrote it. No id and no image yet."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    recipe_name: str = Field(alias="recipeName", min_length=1)
    description: str
    ingredients: list[IngredientDraft] = Field(min_length=1)
    instructions: list[str] = Field(min_length=1)


class DishIdea(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    dish_name: str = Field(alias="dishName", min_length=1)
    description: str


DishIdeas = TypeAdapter(list[DishIdea])


def parse_recipe(text: str) -> RecipeDraft:
    """Raises `pydantic.ValidationError` (a `ValueError`) on anything but a recipe."""
    return RecipeDraft.model_validate_json(text)


def parse_dish_ideas(text: str, *, limit: int = 5) -> list[DishIdea]:
    """At most `limit` ideas, in the order the model gave them.

    Raises `ValueError` when the reply is not a non-empty array of ideas.
    """
    parsed = json.loads(text)
    if not isinstance(parsed, list) or not parsed:
        raise ValueError("The model did not provide valid dish suggestions.")
    return DishIdeas.validate_python(parsed[:limit])
