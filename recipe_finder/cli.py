#!/usr/bin/env python3
"""Command-line interface for the Recipe Finder backend.

Exit codes:
    0  success
    1  provider, persistence or lookup failure
    2  configuration error or invalid input
"""

import argparse
import json
import sys
from typing import Any, List, Mapping, Optional

from dotenv import load_dotenv

from recipe_finder.caching.maintenance import StorageMaintenance
from recipe_finder.caching.orchestrator import CacheOrchestrator
from recipe_finder.caching.persistent_store import (
    IngredientSearchStore,
    RecipeDetailStore,
    RecipeSearchStore,
)
from recipe_finder.config import Settings, configure_logging, load_settings
from recipe_finder.data_layer.exceptions import (
    ConfigurationError,
    InvalidQueryError,
    RecipeFinderError,
)
from recipe_finder.ingestion.query_normalizer import split_raw_terms
from recipe_finder.output.formatters import (
    format_ingredients_response,
    format_recipes_response,
    format_stats_json_string,
    format_stats_markdown,
)
from recipe_finder.providers.spoonacular_provider import SpoonacularProvider
from recipe_finder.scoring.match_scorer import rescore_recipes

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG = 2


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="recipe-finder",
        description="Find recipes by ingredient with a two-tier cache in front of Spoonacular",
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to a YAML settings file (default: config/settings.yaml if present)",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("serve", help="Run the HTTP API server")

    search = subparsers.add_parser("search", help="Search recipes by comma-separated ingredients")
    search.add_argument("ingredients", nargs="?", default="", help="e.g. 'eggs, milk' (empty for popular recipes)")

    details = subparsers.add_parser("details", help="Fetch full details for a recipe")
    details.add_argument("recipe_id")

    ingredients = subparsers.add_parser("ingredients", help="Search ingredient suggestions")
    ingredients.add_argument("query")

    stats = subparsers.add_parser("stats", help="Show persistent storage statistics")
    stats.add_argument(
        "--format",
        choices=["markdown", "json"],
        default="markdown",
        help="Output format (default: markdown)",
    )

    purge = subparsers.add_parser("purge", help="Delete stored records older than N days")
    purge.add_argument("--days", type=float, required=True)

    subparsers.add_parser("mapping", help="Rebuild the filename mapping debug file")

    show = subparsers.add_parser("show-details", help="Print stored recipe details without fetching")
    show.add_argument("recipe_id")

    return parser


def build_maintenance(settings: Settings) -> StorageMaintenance:
    """Maintenance over the stores in the configured data directory.

    Needs no API key, so storage commands work offline.
    """
    return StorageMaintenance([
        RecipeSearchStore(data_dir=settings.data_dir),
        IngredientSearchStore(data_dir=settings.data_dir),
        RecipeDetailStore(data_dir=settings.data_dir),
    ])


def build_orchestrator(settings: Settings) -> CacheOrchestrator:
    return CacheOrchestrator.from_settings(settings, SpoonacularProvider.from_settings(settings))


def _print_json(data: Any) -> None:
    print(json.dumps(data, indent=2))


def run_command(args: argparse.Namespace, settings: Settings) -> int:
    """Dispatch one parsed command.

    Raises:
        RecipeFinderError: Propagated from the cache layer; mapped to an
            exit code by :func:`main`
    """
    if args.command == "serve":
        from recipe_finder.api.server import create_app
        import uvicorn

        uvicorn.run(create_app(settings), host="0.0.0.0", port=settings.port)
        return EXIT_OK

    if args.command == "search":
        terms = split_raw_terms(args.ingredients)
        recipes = build_orchestrator(settings).search_recipes(terms)
        if terms:
            recipes = rescore_recipes(terms, recipes)
        _print_json(format_recipes_response(recipes, terms))
    elif args.command == "details":
        _print_json(build_orchestrator(settings).get_recipe_details(args.recipe_id).to_dict())
    elif args.command == "ingredients":
        found = build_orchestrator(settings).search_ingredients(args.query)
        _print_json(format_ingredients_response(found, args.query))
    elif args.command == "stats":
        stats = build_maintenance(settings).stats()
        if args.format == "json":
            print(format_stats_json_string(stats))
        else:
            print(format_stats_markdown(stats))
    elif args.command == "purge":
        if args.days < 0:
            raise InvalidQueryError(str(args.days), "--days must be non-negative")
        removed = build_maintenance(settings).purge_older_than(args.days)
        for kind, count in removed.items():
            print(f"{kind}: removed {count}")
        print(f"Total removed: {sum(removed.values())}", file=sys.stderr)
    elif args.command == "mapping":
        maintenance = build_maintenance(settings)
        mapping = maintenance.rebuild_filename_mapping()
        print(f"Wrote {len(mapping)} entries to {maintenance.mapping_path}")
    elif args.command == "show-details":
        _print_json(RecipeDetailStore(data_dir=settings.data_dir).require(args.recipe_id).to_dict())
    return EXIT_OK


def main(argv: Optional[List[str]] = None, environ: Optional[Mapping[str, str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if environ is None:
        load_dotenv()
    try:
        settings = load_settings(args.config, environ=environ)
        configure_logging(settings.log_level)
        return run_command(args, settings)
    except (ConfigurationError, InvalidQueryError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_CONFIG
    except RecipeFinderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_FAILURE


if __name__ == "__main__":
    sys.exit(main())
