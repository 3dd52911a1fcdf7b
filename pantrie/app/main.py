# pantrie/app/main.py
from __future__ import annotations

import logging
import sys

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from pantrie.app.config import settings
from pantrie.app.deps import build_recipe_importer
from pantrie.app.routers.recipes import router as recipes_router
from pantrie.app.schemas.recipes import ErrorResponse
from pantrie.services.errors import LlmConfigurationError

logging.basicConfig(
    level=settings.LOG_LEVEL.upper(),
    format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    handlers=[logging.StreamHandler(sys.stdout)],
)
log = logging.getLogger("pantrie")

app = FastAPI(title="Pantrie API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.FRONTEND_CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(recipes_router)


def _error_body(error: str, details: str | None = None) -> dict:
    return ErrorResponse(error=error, details=details).model_dump(exclude_none=True)


@app.exception_handler(StarletteHTTPException)
async def http_error(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=_error_body(str(exc.detail)), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = "; ".join(
        f"{'.'.join(str(part) for part in item['loc'])}: {item['msg']}" for item in exc.errors()
    )
    log.info("request.invalid path=%s details=%s", request.url.path, details)
    return JSONResponse(status_code=422, content=_error_body("Invalid request body", details or None))


@app.on_event("startup")
async def startup() -> None:
    try:
        app.state.recipe_importer = build_recipe_importer(settings)
    except LlmConfigurationError as exc:
        app.state.recipe_importer = None
        log.error("startup.recipe_import_disabled env=%s error=%s", settings.APP_ENV, exc)


@app.get("/health")
def health():
    return {"status": "ok", "message": "Pantrie API is running"}
