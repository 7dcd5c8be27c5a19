"""Run one flow from the command line.

    python -m nourish "carrot, rice"
    python -m nourish --dish "something warming for winter" --suggest --language vi
"""

import argparse
import asyncio
import logging

from rich import print

from nourish import services
from nourish.config import Config
from nourish.models import GenerationRequest, RequestType


async def main(args: argparse.Namespace) -> int:
    config = Config()
    logging.basicConfig(level=config.log_level)
    language = args.language or config.default_language
    client = services.client_factory(config)

    try:
        if args.suggest:
            suggestions = await services.generate_dish_suggestions(
                args.value, language, client=client, n=config.suggestion_count
            )
            if suggestions is None:
                print("[red]Could not generate dish suggestions.[/red]")
                return 1
            for s in suggestions:
                print(f"[bold]{s.dish_name}[/bold]: {s.description}")
            return 0

        kind = RequestType.dish if args.dish else RequestType.ingredients
        recipe = await services.generate_recipe(
            GenerationRequest(type=kind, value=args.value), language, client=client
        )
        if recipe is None:
            print("[red]Could not generate a recipe.[/red]")
            return 1
        print(recipe.id)
        print(recipe.to_markdown(image=False))
        return 0
    finally:
        await client.close()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(prog="nourish")
    parser.add_argument("value", help="Ingredients, or a dish request with --dish.")
    parser.add_argument("--dish", action="store_true")
    parser.add_argument("--suggest", action="store_true", help="Five ideas instead.")
    parser.add_argument("--language")
    raise SystemExit(asyncio.run(main(parser.parse_args())))
