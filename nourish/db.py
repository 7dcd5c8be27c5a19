import json
import logging
from typing import Any

from databases import Database

from nourish.config import Config
from nourish.models import Recipe


logger = logging.getLogger(__name__)


CREATE_RECIPES_TABLE = """
CREATE TABLE IF NOT EXISTS Recipes (
    position INTEGER PRIMARY KEY AUTOINCREMENT,
    id VARCHAR(320) UNIQUE NOT NULL,
    recipe_name VARCHAR(256) NOT NULL,
    description TEXT,
    ingredients TEXT,
    instructions TEXT,
    image_url TEXT
)
"""


CREATE_RECIPE = """
INSERT INTO Recipes(id, recipe_name, description, ingredients, instructions, image_url)
VALUES (:id, :recipe_name, :description, :ingredients, :instructions, :image_url)
"""


GET_RECIPE = "SELECT * FROM Recipes WHERE id = :id"


RECIPE_EXISTS = "SELECT 1 FROM Recipes WHERE id = :id"


LIST_RECIPES = "SELECT * FROM Recipes ORDER BY position"


class RecipeNotFound(Exception):
    pass


def database_factory(config: Config | None = None) -> Database:
    config = Config() if config is None else config
    return Database(config.db_url)


async def create_db(db: Database) -> None:
    await db.execute(  # pyright: ignore[reportUnknownMemberType]
        query=CREATE_RECIPES_TABLE
    )


def recipe_from_record(record: Any) -> Recipe:
    return Recipe.from_dict(
        {
            "id": record["id"],
            "recipeName": record["recipe_name"],
            "description": record["description"],
            "ingredients": json.loads(record["ingredients"]),
            "instructions": json.loads(record["instructions"]),
            "imageUrl": record["image_url"],
        }
    )


class RecipesRepository:
    """Saved recipes. Saving is idempotent by recipe id."""

    def __init__(self, db: Database) -> None:
        self.db = db

    async def exists(self, id: str) -> bool:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            RECIPE_EXISTS, values={"id": id}
        )
        return result is not None

    async def save(self, recipe: Recipe) -> None:
        async with self.db.transaction():
            if await self.exists(recipe.id):
                logger.info("Recipe %s already saved.", recipe.id)
                return
            await self.db.execute(  # pyright: ignore[reportUnknownMemberType]
                CREATE_RECIPE,
                values={
                    "id": recipe.id,
                    "recipe_name": recipe.recipe_name,
                    "description": recipe.description,
                    "ingredients": json.dumps(
                        [i.to_dict() for i in recipe.ingredients]
                    ),
                    "instructions": json.dumps(list(recipe.instructions)),
                    "image_url": recipe.image_url,
                },
            )

    async def get(self, id: str) -> Recipe:
        result = await self.db.fetch_one(  # pyright: ignore[reportUnknownMemberType]
            GET_RECIPE, values={"id": id}
        )

        if result is None:
            raise RecipeNotFound(f"{id}")

        return recipe_from_record(result)

    async def list(self) -> tuple[Recipe, ...]:
        result = await self.db.fetch_all(  # pyright: ignore[reportUnknownMemberType]
            LIST_RECIPES
        )
        return tuple(recipe_from_record(r) for r in result)
