import json
from typing import Any

import httpx
import openai
import pytest

from conftest import CARROT_RICE, PNG, dish_ideas
from nourish.aopenai import OpenAIClient, strict_schema, unwrap_content, wrap_schema
from nourish import services
from nourish.llm_service import GenerationError
from nourish.models import GenerationRequest
from nourish.schemas import DISH_SUGGESTIONS_SCHEMA, RECIPE_SCHEMA


def completion(content: str) -> dict[str, Any]:
    return {
        "id": "chatcmpl-1",
        "object": "chat.completion",
        "created": 0,
        "model": "gpt-test",
        "choices": [
            {
                "index": 0,
                "finish_reason": "stop",
                "message": {"role": "assistant", "content": content},
            }
        ],
    }


def mock_client(handler: Any, requests: list[httpx.Request]) -> OpenAIClient:
    def record(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        return handler(request)

    oai = openai.AsyncClient(
        api_key="test",
        base_url="https://openai.test/v1",
        max_retries=0,
        http_client=httpx.AsyncClient(transport=httpx.MockTransport(record)),
    )
    return OpenAIClient(text_model="gpt-test", image_model="img-test", openai_client=oai)


def test_strict_schema() -> None:
    schema = strict_schema(RECIPE_SCHEMA)
    assert schema["additionalProperties"] is False
    items = schema["properties"]["ingredients"]["items"]
    assert items["additionalProperties"] is False
    assert items["required"] == ["name", "amount"]
    assert "additionalProperties" not in RECIPE_SCHEMA


def test_wrap_schema() -> None:
    assert wrap_schema(RECIPE_SCHEMA) is RECIPE_SCHEMA
    wrapped = wrap_schema(DISH_SUGGESTIONS_SCHEMA)
    assert wrapped["type"] == "object"
    assert wrapped["properties"]["items"] is DISH_SUGGESTIONS_SCHEMA


def test_unwrap_content() -> None:
    ideas = dish_ideas(2)
    assert json.loads(unwrap_content(json.dumps({"items": ideas}))) == ideas
    with pytest.raises(ValueError):
        unwrap_content("[]")
    with pytest.raises(ValueError):
        unwrap_content("nope")


@pytest.mark.asyncio
async def test_generate_json_object() -> None:
    requests: list[httpx.Request] = []
    client = mock_client(
        lambda r: httpx.Response(200, json=completion(json.dumps(CARROT_RICE))),
        requests,
    )

    got = await client.generate_json("Carrot rice please.", RECIPE_SCHEMA)

    assert json.loads(got) == CARROT_RICE
    body = json.loads(requests[0].content)
    assert body["model"] == "gpt-test"
    assert body["response_format"]["type"] == "json_schema"
    assert body["response_format"]["json_schema"]["strict"] is True


@pytest.mark.asyncio
async def test_generate_json_array() -> None:
    requests: list[httpx.Request] = []
    ideas = dish_ideas(5)
    client = mock_client(
        lambda r: httpx.Response(200, json=completion(json.dumps({"items": ideas}))),
        requests,
    )

    got = await client.generate_json("Ideas please.", DISH_SUGGESTIONS_SCHEMA)

    assert json.loads(got) == ideas
    schema = json.loads(requests[0].content)["response_format"]["json_schema"]["schema"]
    assert schema["type"] == "object"
    assert schema["properties"]["items"]["type"] == "array"


@pytest.mark.asyncio
async def test_generate_json_error() -> None:
    client = mock_client(
        lambda r: httpx.Response(401, json={"error": {"message": "bad key"}}), []
    )
    with pytest.raises(GenerationError):
        await client.generate_json("Hello", RECIPE_SCHEMA)


@pytest.mark.asyncio
async def test_generate_image() -> None:
    requests: list[httpx.Request] = []
    client = mock_client(
        lambda r: httpx.Response(200, json={"created": 0, "data": [{"b64_json": PNG}]}),
        requests,
    )

    image = await client.generate_image("A bowl of pho.")

    assert image is not None
    assert image.data_uri == f"data:image/png;base64,{PNG}"
    assert requests[0].url.path == "/v1/images/generations"


@pytest.mark.asyncio
async def test_generate_image_empty() -> None:
    client = mock_client(
        lambda r: httpx.Response(200, json={"created": 0, "data": []}), []
    )
    assert await client.generate_image("A bowl of pho.") is None


@pytest.mark.asyncio
async def test_generate_json_without_choices() -> None:
    body = {**completion("{}"), "choices": []}
    client = mock_client(lambda r: httpx.Response(200, json=body), [])

    with pytest.raises(GenerationError):
        await client.generate_json("Hello", RECIPE_SCHEMA)

    request = GenerationRequest(type="dish", value="pho")
    assert await services.generate_recipe(request, "en", client=client) is None
