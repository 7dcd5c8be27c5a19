import contextlib
import json
import logging
from typing import Any

from databases import Database
from starlette.applications import Starlette
from starlette.requests import Request
from starlette.responses import HTMLResponse, JSONResponse
from starlette.routing import Route

from nourish import db as recipes_db
from nourish import services
from nourish.config import Config
from nourish.llm_service import GenerationClient
from nourish.models import DishSuggestion, GenerationRequest, Recipe


logger = logging.getLogger(__name__)


class BadRequest(Exception):
    pass


async def read_json(request: Request) -> dict[str, Any]:
    try:
        data = await request.json()
    except json.JSONDecodeError as e:
        raise BadRequest("Body is not JSON.") from e
    if not isinstance(data, dict):
        raise BadRequest("Body must be a JSON object.")
    return data


def text_field(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise BadRequest(f"'{key}' must be a non-empty string.")
    return value


def language(request: Request, data: dict[str, Any]) -> str:
    lang = data.get("language")
    if isinstance(lang, str) and lang:
        return lang
    return request.app.state.config.default_language


def error(msg: str, status_code: int) -> JSONResponse:
    return JSONResponse({"error": msg}, status_code=status_code)


def repository(request: Request) -> recipes_db.RecipesRepository:
    return recipes_db.RecipesRepository(request.app.state.db)


async def generate_recipe(request: Request) -> JSONResponse:
    try:
        data = await read_json(request)
        text_field(data, "value")
        gen_request = GenerationRequest.from_dict(data)
    except (BadRequest, KeyError, ValueError) as e:
        return error(str(e) or "Provide 'type' and 'value'.", 400)

    recipe = await services.generate_recipe(
        gen_request, language(request, data), client=request.app.state.client
    )
    if recipe is None:
        return error("Could not generate a recipe. Try again.", 502)
    return JSONResponse(recipe.to_dict())


async def dish_suggestions(request: Request) -> JSONResponse:
    try:
        data = await read_json(request)
        dish_request = text_field(data, "request")
    except BadRequest as e:
        return error(str(e), 400)

    suggestions = await services.generate_dish_suggestions(
        dish_request,
        language(request, data),
        client=request.app.state.client,
        n=request.app.state.config.suggestion_count,
    )
    if suggestions is None:
        return error("Could not generate dish suggestions. Try again.", 502)
    return JSONResponse([s.to_dict() for s in suggestions])


async def select_suggestion(request: Request) -> JSONResponse:
    try:
        data = await read_json(request)
        text_field(data, "dishName")
        suggestion = DishSuggestion.from_dict({"description": "", **data})
    except BadRequest as e:
        return error(str(e), 400)

    recipe = await services.recipe_from_suggestion(
        suggestion, language(request, data), client=request.app.state.client
    )
    if recipe is None:
        return error("Could not generate a recipe. Try again.", 502)
    return JSONResponse(recipe.to_dict())


async def list_recipes(request: Request) -> JSONResponse:
    recipes = await repository(request).list()
    return JSONResponse([r.to_dict() for r in recipes])


async def save_recipe(request: Request) -> JSONResponse:
    try:
        data = await read_json(request)
        recipe = Recipe.from_dict(data)
    except (BadRequest, KeyError, TypeError) as e:
        return error(f"Not a recipe. {e}", 400)
    await repository(request).save(recipe)
    return JSONResponse(recipe.to_dict(), status_code=201)


async def recipe_detail(request: Request) -> JSONResponse:
    id = request.path_params["id"]
    try:
        recipe = await repository(request).get(id)
    except recipes_db.RecipeNotFound:
        return error(f"No recipe {id}.", 404)
    return JSONResponse(recipe.to_dict())


async def recipe_detail_html(request: Request) -> HTMLResponse:
    id = request.path_params["id"]
    try:
        recipe = await repository(request).get(id)
    except recipes_db.RecipeNotFound:
        return HTMLResponse(f"<p>No recipe {id}.</p>", status_code=404)
    return HTMLResponse(recipe.html)


def create_app(
    config: Config | None = None,
    *,
    client: GenerationClient | None = None,
    db: Database | None = None,
) -> Starlette:
    config = Config() if config is None else config

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette):
        logging.basicConfig(level=config.log_level)
        app.state.client = services.client_factory(config) if client is None else client
        try:
            await app.state.db.connect()
            await recipes_db.create_db(app.state.db)
            yield
        finally:
            await app.state.db.disconnect()
            await app.state.client.close()

    app = Starlette(
        routes=[
            Route("/recipes", list_recipes, methods=["GET"]),
            Route("/recipes", save_recipe, methods=["POST"]),
            Route("/recipes/generate", generate_recipe, methods=["POST"]),
            Route("/recipes/{id:path}/html", recipe_detail_html, methods=["GET"]),
            Route("/recipes/{id:path}", recipe_detail, methods=["GET"]),
            Route("/suggestions", dish_suggestions, methods=["POST"]),
            Route("/suggestions/select", select_suggestion, methods=["POST"]),
        ],
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.db = recipes_db.database_factory(config) if db is None else db
    return app


app = create_app()
