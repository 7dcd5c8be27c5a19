import logging
from typing import Any, Self

import httpx

from nourish.config import Config
from nourish.llm_service import GenerationError
from nourish.models import InlineImage


logger = logging.getLogger(__name__)


DEFAULT_TEXT_MODEL = "gemini-2.5-flash"
DEFAULT_IMAGE_MODEL = "gemini-2.5-flash-image"


def gemini_client_factory(config: Config | None = None) -> httpx.AsyncClient:
    config = Config() if config is None else config
    return httpx.AsyncClient(
        base_url=config.gemini_base_url,
        headers={
            "x-goog-api-key": config.gemini_api_key or "",
            "Content-Type": "application/json",
        },
        timeout=config.timeout,
    )


def gemini_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """JSON schema in the dialect of `responseSchema`. Types are upper case there."""
    converted: dict[str, Any] = {}
    for key, value in schema.items():
        if key == "type":
            converted[key] = value.upper()
        elif key == "properties":
            converted[key] = {k: gemini_schema(v) for k, v in value.items()}
        elif key == "items":
            converted[key] = gemini_schema(value)
        else:
            converted[key] = value
    return converted


def candidate_parts(data: dict[str, Any]) -> list[dict[str, Any]]:
    candidates = data.get("candidates") or []
    if not isinstance(candidates, list) or not candidates:
        return []
    candidate = candidates[0]
    if not isinstance(candidate, dict):
        raise GenerationError(f"Malformed candidate. {candidate}")
    content = candidate.get("content") or {}
    if not isinstance(content, dict):
        raise GenerationError(f"Malformed content. {content}")
    parts = content.get("parts") or []
    if not isinstance(parts, list):
        raise GenerationError(f"Malformed parts. {parts}")
    return [p for p in parts if isinstance(p, dict)]


def first_inline_image(data: dict[str, Any]) -> InlineImage | None:
    for part in candidate_parts(data):
        inline = part.get("inlineData")
        if not isinstance(inline, dict):
            continue
        if isinstance(inline.get("data"), str) and inline["data"]:
            return InlineImage(
                mime_type=inline.get("mimeType") or "image/png",
                data=inline["data"],
            )
    return None


def response_text(data: dict[str, Any]) -> str:
    parts = candidate_parts(data)
    texts = [p["text"] for p in parts if isinstance(p.get("text"), str)]
    if not texts:
        raise GenerationError(f"No text in response. {data}")
    return "".join(texts)


class GeminiClient:
    def __init__(
        self,
        *,
        text_model: str = DEFAULT_TEXT_MODEL,
        image_model: str = DEFAULT_IMAGE_MODEL,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.text_model = text_model
        self.image_model = image_model
        self._client = gemini_client_factory() if client is None else client

    @classmethod
    def from_config(cls, config: Config) -> Self:
        return cls(
            text_model=config.text_model,
            image_model=config.image_model,
            client=gemini_client_factory(config),
        )

    async def _generate_raw(self, model: str, body: dict[str, Any]) -> dict[str, Any]:
        try:
            resp = await self._client.post(
                f"models/{model}:generateContent", json=body
            )
        except httpx.HTTPError as e:
            raise GenerationError(f"Problem calling {model}. {e!r}") from e
        if resp.is_error:
            raise GenerationError(
                f"Problem calling {model}. {resp.status_code} {resp.text}"
            )
        data = resp.json()
        if not isinstance(data, dict):
            raise GenerationError(f"Expecting a JSON object from {model}. {data}")
        if "error" in data:
            raise GenerationError(f"Problem generating content. {data}")
        return data

    async def generate_json(self, prompt: str, schema: dict[str, Any]) -> str:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {
                "responseMimeType": "application/json",
                "responseSchema": gemini_schema(schema),
            },
        }
        data = await self._generate_raw(self.text_model, body)
        return response_text(data)

    async def generate_image(self, prompt: str) -> InlineImage | None:
        body = {
            "contents": [{"parts": [{"text": prompt}]}],
            "generationConfig": {"responseModalities": ["IMAGE"]},
        }
        data = await self._generate_raw(self.image_model, body)
        image = first_inline_image(data)
        if image is None:
            logger.warning("No inline image from %s.", self.image_model)
        return image

    async def close(self) -> None:
        await self._client.aclose()
