# pantrie/app/deps.py (handles built once at startup, exposed as dependencies)

from __future__ import annotations

from fastapi import HTTPException, Request, status

from pantrie.app.config import Settings
from pantrie.services.fetcher import HtmlFetcher
from pantrie.services.gemini_client import GeminiClient
from pantrie.services.importer import RecipeImporter


def build_recipe_importer(config: Settings) -> RecipeImporter:
    return RecipeImporter(
        fetcher=HtmlFetcher(timeout=config.FETCH_TIMEOUT_SECONDS),
        completion_client=GeminiClient(
            api_key=config.GEMINI_API_KEY,
            model_name=config.GEMINI_MODEL,
            timeout_seconds=config.LLM_TIMEOUT_SECONDS,
        ),
        max_output_tokens=config.LLM_MAX_OUTPUT_TOKENS,
    )


def get_recipe_importer(request: Request) -> RecipeImporter:
    importer = getattr(request.app.state, "recipe_importer", None)
    if importer is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Recipe import is not configured",
        )
    return importer
