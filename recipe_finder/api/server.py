"""FastAPI server for the Recipe Finder API.

Routes are a thin layer over :class:`CacheOrchestrator`; no cache logic
lives here. The orchestrator is created once per app and kept on
``app.state``.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import uvicorn
from dotenv import load_dotenv
from fastapi import FastAPI, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from recipe_finder import __version__
from recipe_finder.caching.orchestrator import CacheOrchestrator
from recipe_finder.config import Settings, configure_logging, load_settings
from recipe_finder.data_layer.exceptions import (
    ErrorCode,
    RecipeFinderError,
)
from recipe_finder.ingestion.query_normalizer import split_raw_terms
from recipe_finder.output.formatters import (
    filter_by_title,
    format_ingredients_response,
    format_recipes_response,
    format_title_search_response,
)
from recipe_finder.providers.spoonacular_provider import SpoonacularProvider
from recipe_finder.scoring.match_scorer import rescore_recipes

logger = logging.getLogger(__name__)

DEFAULT_PURGE_DAYS = 30

STATUS_BY_CODE = {
    ErrorCode.INVALID_QUERY: 400,
    ErrorCode.RECORD_NOT_FOUND: 404,
    ErrorCode.PROVIDER_FAILURE: 502,
    ErrorCode.PERSISTENCE_FAILURE: 500,
    ErrorCode.CONFIGURATION_ERROR: 500,
}

USER_MESSAGES = {
    ErrorCode.INVALID_QUERY: "Invalid request. Please check your input.",
    ErrorCode.RECORD_NOT_FOUND: "The requested data was not found.",
    ErrorCode.PROVIDER_FAILURE: "Failed to fetch data from the recipe service.",
    ErrorCode.PERSISTENCE_FAILURE: "Storage operation failed.",
    ErrorCode.CONFIGURATION_ERROR: "The server is not configured correctly.",
}


class RecipeSearchRequest(BaseModel):
    ingredients: List[str] = Field(default_factory=list)


def create_app(
    settings: Optional[Settings] = None,
    orchestrator: Optional[CacheOrchestrator] = None
) -> FastAPI:
    """Create the FastAPI application.

    Args:
        settings: Resolved settings (loaded from the environment if omitted)
        orchestrator: Prebuilt orchestrator (built from settings if omitted)

    Returns:
        Configured FastAPI app

    Raises:
        ConfigurationError: If an orchestrator must be built and no API key
            is configured
    """
    settings = settings or load_settings()
    if orchestrator is None:
        orchestrator = CacheOrchestrator.from_settings(
            settings, SpoonacularProvider.from_settings(settings)
        )

    app = FastAPI(title="Recipe Finder API", version=__version__)
    app.state.settings = settings
    app.state.orchestrator = orchestrator

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["*"],
    )

    @app.exception_handler(RecipeFinderError)
    async def recipe_finder_error_handler(request: Request, exc: RecipeFinderError):
        status = STATUS_BY_CODE.get(exc.code, 500)
        if status >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc)
        return JSONResponse(
            status_code=status,
            content={
                "success": False,
                "error": {
                    "code": exc.code.value,
                    "message": USER_MESSAGES.get(exc.code, "Something went wrong."),
                },
            },
        )

    @app.get("/api/v1/health")
    def health_check() -> Dict[str, Any]:
        return {
            "status": "healthy",
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "service": "Recipe Finder API",
            "version": __version__,
        }

    @app.get("/api/recipes")
    def get_recipes_by_query(ingredients: Optional[str] = None) -> Dict[str, Any]:
        return _recipes_response(split_raw_terms(ingredients or ""))

    @app.post("/api/recipes")
    def post_recipes(request: RecipeSearchRequest) -> Dict[str, Any]:
        return _recipes_response(request.ingredients)

    def _recipes_response(ingredients: List[str]) -> Dict[str, Any]:
        recipes = orchestrator.search_recipes(ingredients)
        if ingredients:
            recipes = rescore_recipes(ingredients, recipes)
        return format_recipes_response(recipes, ingredients)

    @app.get("/api/v1/recipes/{recipe_id}")
    def get_recipe_details(recipe_id: str) -> Dict[str, Any]:
        return orchestrator.get_recipe_details(recipe_id).to_dict()

    @app.get("/api/v1/ingredients/search")
    def search_ingredients(q: str = "") -> Dict[str, Any]:
        if not q:
            return format_ingredients_response([], "")
        return format_ingredients_response(orchestrator.search_ingredients(q), q)

    @app.get("/api/v1/search/recipes")
    def search_recipes_by_title(q: str = "") -> Dict[str, Any]:
        if not q.strip():
            return format_title_search_response([], q)
        recipes = orchestrator.search_recipes([q])
        return format_title_search_response(filter_by_title(recipes, q), q)

    @app.get("/api/v1/storage/stats")
    def storage_stats() -> Dict[str, Any]:
        return orchestrator.maintenance.stats().to_dict()

    @app.post("/api/v1/storage/mapping")
    def create_filename_mapping() -> Dict[str, Any]:
        mapping = orchestrator.maintenance.rebuild_filename_mapping()
        return {
            "status": "success",
            "message": "Filename mapping created successfully",
            "entries": len(mapping),
        }

    @app.post("/api/v1/storage/purge")
    def purge_storage(days: float = Query(DEFAULT_PURGE_DAYS, ge=0)) -> Dict[str, Any]:
        removed = orchestrator.maintenance.purge_older_than(days)
        return {"status": "success", "days": days, "removed": removed, "total": sum(removed.values())}

    return app


def main() -> None:
    load_dotenv()
    settings = load_settings()
    configure_logging(settings.log_level)
    app = create_app(settings)
    logger.info("Recipe Finder API server starting on port %d", settings.port)
    uvicorn.run(app, host="0.0.0.0", port=settings.port)


if __name__ == "__main__":
    main()
