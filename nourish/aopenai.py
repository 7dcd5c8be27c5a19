import json
import logging
from typing import Any, Self

import openai

from nourish.config import Config
from nourish.llm_service import GenerationError
from nourish.models import InlineImage


logger = logging.getLogger(__name__)


DEFAULT_TEXT_MODEL = "gpt-4o-mini"
DEFAULT_IMAGE_MODEL = "gpt-image-1"
WRAPPER_KEY = "items"


def strict_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Structured outputs want every object closed and every property required."""
    converted = dict(schema)
    if "properties" in schema:
        converted["properties"] = {
            k: strict_schema(v) for k, v in schema["properties"].items()
        }
        converted["required"] = list(schema["properties"])
        converted["additionalProperties"] = False
    if "items" in schema:
        converted["items"] = strict_schema(schema["items"])
    return converted


def wrap_schema(schema: dict[str, Any]) -> dict[str, Any]:
    # The root has to be an object.
    if schema.get("type") != "array":
        return schema
    return {
        "type": "object",
        "properties": {WRAPPER_KEY: schema},
        "required": [WRAPPER_KEY],
    }


def unwrap_content(content: str) -> str:
    data = json.loads(content)
    if not isinstance(data, dict) or WRAPPER_KEY not in data:
        raise ValueError(f"Expecting an '{WRAPPER_KEY}' key. {content}")
    return json.dumps(data[WRAPPER_KEY])


class OpenAIClient:
    def __init__(
        self,
        *,
        text_model: str = DEFAULT_TEXT_MODEL,
        image_model: str = DEFAULT_IMAGE_MODEL,
        openai_client: openai.AsyncClient | None = None,
    ) -> None:
        self.text_model = text_model
        self.image_model = image_model
        self.openai_client = (
            openai.AsyncClient() if openai_client is None else openai_client
        )

    @classmethod
    def from_config(cls, config: Config) -> Self:
        return cls(
            text_model=config.openai_text_model,
            image_model=config.openai_image_model,
            openai_client=openai.AsyncClient(
                api_key=config.openai_api_key, timeout=config.timeout
            ),
        )

    async def generate_json(self, prompt: str, schema: dict[str, Any]) -> str:
        wrapped = schema.get("type") == "array"
        try:
            resp = await self.openai_client.chat.completions.create(
                model=self.text_model,
                messages=[{"role": "user", "content": prompt}],
                response_format={
                    "type": "json_schema",
                    "json_schema": {
                        "name": "response",
                        "schema": strict_schema(wrap_schema(schema)),
                        "strict": True,
                    },
                },
            )
        except openai.OpenAIError as e:
            raise GenerationError(f"Problem creating completion. {e!r}") from e
        if not resp.choices:
            raise GenerationError(f"No choices in completion. {resp}")
        content = resp.choices[0].message.content or ""
        return unwrap_content(content) if wrapped else content

    async def generate_image(self, prompt: str) -> InlineImage | None:
        try:
            resp = await self.openai_client.images.generate(
                model=self.image_model,
                prompt=prompt,
                n=1,
            )
        except openai.OpenAIError as e:
            raise GenerationError(f"Problem creating image. {e!r}") from e
        if not resp.data or not resp.data[0].b64_json:
            logger.warning("No image data from %s.", self.image_model)
            return None
        return InlineImage(mime_type="image/png", data=resp.data[0].b64_json)

    async def close(self) -> None:
        await self.openai_client.close()
