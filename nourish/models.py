from enum import Enum
import re
import time
from typing import Any, Iterable, Self

from markdown2 import (  # pyright: ignore[reportMissingTypeStubs]
    markdown,  # pyright: ignore[reportUnknownVariableType]
)


class RequestType(Enum):
    ingredients = "ingredients"
    dish = "dish"


class GenerationRequest:
    def __init__(self, type: RequestType | str, value: str) -> None:
        self.type = RequestType(type)
        self.value = value

    def __repr__(self) -> str:
        return f"<GenerationRequest(type={self.type.value}, value={self.value!r})>"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(type=data["type"], value=data["value"])


class Ingredient:
    def __init__(self, name: str, amount: str) -> None:
        self.name = name
        self.amount = amount

    def __repr__(self) -> str:
        return f"<Ingredient(name={self.name}, amount={self.amount})>"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ingredient):
            return NotImplemented
        return (self.name, self.amount) == (other.name, other.amount)

    def to_dict(self) -> dict[str, str]:
        return {"name": self.name, "amount": self.amount}


class InlineImage:
    """Image bytes as returned by the model, still base64 encoded."""

    def __init__(self, mime_type: str, data: str) -> None:
        self.mime_type = mime_type
        self.data = data

    def __repr__(self) -> str:
        return f"<InlineImage(mime_type={self.mime_type}, size={len(self.data)})>"

    @property
    def data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.data}"


def recipe_id(recipe_name: str, timestamp_ms: int | None = None) -> str:
    """`Carrot Rice` made at 1700000000000 becomes `Carrot-Rice-1700000000000`.

    Two recipes with the same name made in the same millisecond share an id.
    """
    timestamp_ms = time.time_ns() // 1_000_000 if timestamp_ms is None else timestamp_ms
    slug = re.sub(r"\s+", "-", recipe_name)
    return f"{slug}-{timestamp_ms}"


class Recipe:
    def __init__(
        self,
        *,
        id: str,
        recipe_name: str,
        description: str,
        ingredients: Iterable[Ingredient],
        instructions: Iterable[str],
        image_url: str | None = None,
    ) -> None:
        self.id = id
        self.recipe_name = recipe_name
        self.description = description
        self.ingredients = tuple(ingredients)
        self.instructions = tuple(instructions)
        self.image_url = image_url

    def __repr__(self) -> str:
        return f"<Recipe(id={self.id}, name={self.recipe_name})>"

    def __str__(self) -> str:
        return self.markdown

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            id=data["id"],
            recipe_name=data["recipeName"],
            description=data["description"],
            ingredients=[
                Ingredient(name=i["name"], amount=i["amount"])
                for i in data["ingredients"]
            ],
            instructions=data["instructions"],
            image_url=data.get("imageUrl"),
        )

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "id": self.id,
            "recipeName": self.recipe_name,
            "description": self.description,
            "ingredients": [i.to_dict() for i in self.ingredients],
            "instructions": list(self.instructions),
        }
        if self.image_url is not None:
            data["imageUrl"] = self.image_url
        return data

    def to_markdown(self, *, image: bool = True) -> str:
        lines = [f"### {self.recipe_name}", "", self.description, ""]
        if image and self.image_url:
            lines += [f"![{self.recipe_name}]({self.image_url})", ""]
        lines += ["#### Ingredients", ""]
        lines += [f"- {i.name} ({i.amount})" for i in self.ingredients]
        lines += ["", "#### Instructions", ""]
        lines += [f"{n}. {step}" for n, step in enumerate(self.instructions, 1)]
        return "\n".join(lines)

    @property
    def markdown(self) -> str:
        return self.to_markdown()

    @property
    def html(self) -> str:
        return markdown(  # pyright: ignore[reportUnknownVariableType]
            self.markdown, extras=["fences", "tables"]
        )


class DishSuggestion:
    def __init__(self, *, dish_name: str, description: str, image_url: str) -> None:
        self.dish_name = dish_name
        self.description = description
        self.image_url = image_url

    def __repr__(self) -> str:
        return f"<DishSuggestion(name={self.dish_name})>"

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        return cls(
            dish_name=data["dishName"],
            description=data["description"],
            image_url=data.get("imageUrl", ""),
        )

    def to_dict(self) -> dict[str, str]:
        return {
            "dishName": self.dish_name,
            "description": self.description,
            "imageUrl": self.image_url,
        }

    def as_request(self) -> GenerationRequest:
        """The request that turns this idea into a full recipe."""
        return GenerationRequest(type=RequestType.dish, value=self.dish_name)
