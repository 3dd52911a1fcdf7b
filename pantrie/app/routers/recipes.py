# pantrie/app/routers/recipes.py
from __future__ import annotations

import logging
import time
from urllib.parse import urlparse

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool

from pantrie.app.deps import get_recipe_importer
from pantrie.app.schemas.recipes import ErrorResponse, RecipeImportRequest
from pantrie.services.errors import ServiceError
from pantrie.services.importer import RecipeImporter
from pantrie.services.models import RecipeRecord

log = logging.getLogger("recipes")
router = APIRouter(prefix="/api/recipes", tags=["recipes"])

_ALLOWED_SCHEMES = {"http", "https"}


def _error(status_code: int, error: str, details: str | None = None) -> JSONResponse:
    payload = ErrorResponse(error=error, details=details)
    return JSONResponse(status_code=status_code, content=payload.model_dump(exclude_none=True))


def _is_valid_url(url: str) -> bool:
    try:
        parsed = urlparse(url)
    except ValueError:
        return False
    return parsed.scheme in _ALLOWED_SCHEMES and bool(parsed.netloc)


@router.post(
    "/import",
    response_model=RecipeRecord,
    responses={
        400: {"model": ErrorResponse},
        422: {"model": ErrorResponse},
        500: {"model": ErrorResponse},
        503: {"model": ErrorResponse},
    },
)
async def import_recipe(
    body: RecipeImportRequest,
    importer: RecipeImporter = Depends(get_recipe_importer),
):
    url = (body.url or "").strip()
    if not url:
        return _error(400, "URL is required")
    if not _is_valid_url(url):
        return _error(400, "Invalid URL format")

    t0 = time.time()
    log.info("recipe_import.start url=%s", url)
    try:
        record = await run_in_threadpool(importer.import_recipe, url)
    except ServiceError as exc:
        log.error("recipe_import.fail url=%s dt=%.2fs error=%s", url, time.time() - t0, exc)
        return _error(500, "Failed to import recipe", str(exc))

    log.info("recipe_import.done url=%s dt=%.2fs", url, time.time() - t0)
    return record
