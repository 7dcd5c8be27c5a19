"""Functionality behind the routes.

`create_*` raise. `generate_*` are the flows: they never raise for a failed
generation, they log it and return `None`.
"""

import asyncio
import logging

from nourish.agemini import GeminiClient
from nourish.aopenai import OpenAIClient
from nourish.config import Config, Provider
from nourish.llm_service import GenerationClient, GenerationError, MissingImageError
from nourish.models import (
    DishSuggestion,
    GenerationRequest,
    InlineImage,
    Recipe,
    recipe_id,
)
from nourish.prompts import RecipePrompt, dish_image_prompt, suggestions_prompt
from nourish.schemas import (
    DISH_SUGGESTIONS_SCHEMA,
    RECIPE_SCHEMA,
    DishIdea,
    parse_dish_ideas,
    parse_recipe,
)


logger = logging.getLogger(__name__)


# ValueError covers malformed JSON and pydantic validation errors. The rest come
# from replies whose shape is not what the provider documents.
FAILURES = (
    GenerationError,
    MissingImageError,
    ValueError,
    KeyError,
    TypeError,
    AttributeError,
    IndexError,
)

SUGGESTION_COUNT = 5


def client_factory(config: Config | None = None) -> GenerationClient:
    config = Config() if config is None else config
    if config.provider is Provider.openai:
        return OpenAIClient.from_config(config)
    return GeminiClient.from_config(config)


async def create_recipe(
    request: GenerationRequest,
    language: str,
    *,
    client: GenerationClient,
) -> Recipe:
    if not request.value.strip():
        raise ValueError("Provide some ingredients or a dish.")

    text = await client.generate_json(
        str(RecipePrompt(request, language)), RECIPE_SCHEMA
    )
    try:
        draft = parse_recipe(text)
    except ValueError:
        logger.error("Failed to parse recipe JSON. Response text: %s", text)
        raise

    image = await client.generate_image(
        dish_image_prompt(draft.recipe_name, draft.description)
    )
    if image is None:
        raise MissingImageError(f"No image for {draft.recipe_name}.")

    return Recipe(
        id=recipe_id(draft.recipe_name),
        recipe_name=draft.recipe_name,
        description=draft.description,
        ingredients=[i.to_ingredient() for i in draft.ingredients],
        instructions=draft.instructions,
        image_url=image.data_uri,
    )


async def generate_recipe(
    request: GenerationRequest,
    language: str,
    *,
    client: GenerationClient,
) -> Recipe | None:
    try:
        return await create_recipe(request, language, client=client)
    except FAILURES:
        logger.exception("Error in generate_recipe flow.")
        return None


async def image_for(idea: DishIdea, *, client: GenerationClient) -> InlineImage | None:
    return await client.generate_image(
        dish_image_prompt(idea.dish_name, idea.description)
    )


def image_url(idea: DishIdea, result: InlineImage | BaseException | None) -> str:
    if isinstance(result, InlineImage):
        return result.data_uri
    if isinstance(result, Exception):
        logger.warning("Image for %s failed.", idea.dish_name, exc_info=result)
    elif isinstance(result, BaseException):
        raise result
    return ""


async def create_dish_suggestions(
    request: str,
    language: str,
    *,
    client: GenerationClient,
    n: int = SUGGESTION_COUNT,
) -> list[DishSuggestion]:
    """Ideas that came back with an image. Possibly none of them."""
    if not request.strip():
        raise ValueError("Provide a dish request.")

    text = await client.generate_json(
        suggestions_prompt(request, language, n=n), DISH_SUGGESTIONS_SCHEMA
    )
    try:
        ideas = parse_dish_ideas(text, limit=n)
    except ValueError:
        logger.error("Failed to parse dish suggestions JSON. Response text: %s", text)
        raise

    coros = [image_for(idea, client=client) for idea in ideas]
    images = await asyncio.gather(*coros, return_exceptions=True)

    suggestions = [
        DishSuggestion(
            dish_name=idea.dish_name,
            description=idea.description,
            image_url=image_url(idea, result),
        )
        for idea, result in zip(ideas, images)
    ]
    return [s for s in suggestions if s.image_url]


async def generate_dish_suggestions(
    request: str,
    language: str,
    *,
    client: GenerationClient,
    n: int = SUGGESTION_COUNT,
) -> list[DishSuggestion] | None:
    try:
        return await create_dish_suggestions(request, language, client=client, n=n)
    except FAILURES:
        logger.exception("Error in generate_dish_suggestions flow.")
        return None


async def recipe_from_suggestion(
    suggestion: DishSuggestion,
    language: str,
    *,
    client: GenerationClient,
) -> Recipe | None:
    return await generate_recipe(suggestion.as_request(), language, client=client)
