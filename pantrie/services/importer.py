from __future__ import annotations

import logging
import time
from urllib.parse import urlparse

from pydantic import ValidationError

from .errors import ExtractionError
from .fetcher import HtmlFetcher
from .gemini_client import CompletionClient
from .html_cleaner import clean_html
from .llm_extraction import DEFAULT_MAX_OUTPUT_TOKENS, extract_with_llm
from .models import RecipeDraft, RecipeRecord
from .normalizer import normalize_recipe_schema
from .structured_data import find_recipe_schema

logger = logging.getLogger(__name__)

UNKNOWN_SOURCE = "Unknown"


def source_from_url(url: str) -> str:
    try:
        hostname = urlparse(url).hostname
    except ValueError:
        return UNKNOWN_SOURCE

    if not hostname:
        return UNKNOWN_SOURCE
    return hostname.removeprefix("www.")


def _try_structured_data(html: str) -> RecipeDraft | None:
    schema = find_recipe_schema(html)
    if schema is None:
        return None

    draft = normalize_recipe_schema(schema)
    if draft.has_required_fields():
        return draft

    logger.info(
        "recipe_import.structured_data_incomplete title=%s ingredients=%d instructions=%d",
        bool(draft.title),
        len(draft.ingredients),
        len(draft.instructions),
    )
    return None


class RecipeImporter:
    """
    Turns a recipe page URL into a validated ``RecipeRecord``.

    Pages that publish JSON-LD Recipe data are converted directly; everything
    else is cleaned and handed to the language model once.
    """

    def __init__(
        self,
        fetcher: HtmlFetcher,
        completion_client: CompletionClient,
        max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
    ) -> None:
        self.fetcher = fetcher
        self.completion_client = completion_client
        self.max_output_tokens = max_output_tokens

    def _extract_draft(self, url: str, html: str) -> RecipeDraft:
        draft = _try_structured_data(html)
        if draft is not None:
            logger.info("recipe_import.fast_path url=%s", url)
            return draft

        logger.info("recipe_import.llm_fallback url=%s", url)
        page = clean_html(html)
        return extract_with_llm(self.completion_client, page, self.max_output_tokens)

    def import_recipe(self, url: str) -> RecipeRecord:
        t0 = time.time()
        html = self.fetcher.fetch(url)
        draft = self._extract_draft(url, html)

        try:
            record = draft.to_record(source=source_from_url(url), source_url=url)
        except ValidationError as error:
            raise ExtractionError(f"Extracted recipe failed validation: {error}") from error

        logger.info(
            "recipe_import.ok url=%s source=%s dt=%.2fs",
            url,
            record.source,
            time.time() - t0,
        )
        return record
