import asyncio
import json
from typing import Any, Callable

import pytest

from nourish.models import InlineImage


PNG = "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNk+M9QDwADhgGAWjR9awAAAABJRU5ErkJggg=="


CARROT_RICE = {
    "recipeName": "Carrot Rice",
    "description": "Rich in Vitamin A from carrots, which is great for eye health.",
    "ingredients": [
        {"name": "carrot", "amount": "1 cup"},
        {"name": "rice", "amount": "2 cups"},
    ],
    "instructions": ["Boil rice", "Add carrot"],
}


def dish_ideas(n: int) -> list[dict[str, str]]:
    return [
        {"dishName": f"Dish {i}", "description": f"Tasty dish number {i}."}
        for i in range(1, n + 1)
    ]


ImageResult = InlineImage | None | Exception


class FakeClient:
    """Stands in for the model. Replies are queued, images are looked up by dish name."""

    def __init__(
        self,
        texts: list[str | Exception] | str | Exception,
        *,
        images: dict[str, ImageResult] | None = None,
        default_image: ImageResult = InlineImage(mime_type="image/png", data=PNG),
        delay: Callable[[str], float] | None = None,
    ) -> None:
        self.texts = list(texts) if isinstance(texts, list) else [texts]
        self.images = {} if images is None else images
        self.default_image = default_image
        self.delay = delay
        self.json_calls: list[tuple[str, dict[str, Any]]] = []
        self.image_prompts: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self.closed = False

    async def generate_json(self, prompt: str, schema: dict[str, Any]) -> str:
        self.json_calls.append((prompt, schema))
        text = self.texts.pop(0)
        if isinstance(text, Exception):
            raise text
        return text

    async def generate_image(self, prompt: str) -> InlineImage | None:
        self.image_prompts.append(prompt)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay is not None:
                await asyncio.sleep(self.delay(prompt))
            result = next(
                (v for k, v in self.images.items() if f'"{k}"' in prompt),
                self.default_image,
            )
        finally:
            self.in_flight -= 1
        if isinstance(result, Exception):
            raise result
        return result

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def carrot_rice_client() -> FakeClient:
    return FakeClient(json.dumps(CARROT_RICE))
