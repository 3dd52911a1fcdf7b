from __future__ import annotations

import json
import logging
import re

from pydantic import ValidationError

from .errors import ExtractionError
from .gemini_client import CompletionClient
from .html_cleaner import CleanedPage, PageHints
from .models import LlmRecipePayload, RecipeDraft

logger = logging.getLogger(__name__)

DEFAULT_MAX_OUTPUT_TOKENS = 4000

CODE_FENCE_PATTERN = re.compile(r"```(?:json)?\s*", re.IGNORECASE)

OUTPUT_SHAPE = """{
  "title": "recipe name",
  "description": "brief description or null",
  "ingredients": ["ingredient 1 with quantity", "ingredient 2", ...],
  "instructions": ["step 1", "step 2", ...],
  "prepTime": minutes as number or null,
  "cookTime": minutes as number or null,
  "totalTime": minutes as number or null,
  "servings": number or null,
  "difficulty": "easy" or "medium" or "hard" or null,
  "imageUrl": "image URL if available or null",
  "author": "author name or null",
  "tags": ["tag1", "tag2"]
}"""

EXTRACTION_RULES = """Important:
- Extract ALL ingredients with their quantities
- Extract ALL instruction steps in order
- Parse cooking times correctly (convert to minutes)
- If info is missing, use null
- Ignore ads, comments, navigation, and sidebar content
- Focus on the main recipe content
- Return ONLY the JSON, no other text, no markdown, no code blocks"""


def _hint_lines(hints: PageHints) -> list[str]:
    lines = []
    if hints.title:
        lines.append(
            f'The recipe title is very likely "{hints.title}". '
            "Use it as the title unless the page clearly names the recipe differently."
        )
    if hints.imageUrl:
        lines.append(f"A likely recipe image URL is {hints.imageUrl}")
    return lines


def build_extraction_prompt(cleaned_html: str, hints: PageHints | None = None) -> str:
    sections = ["Extract the recipe from this webpage HTML."]

    hint_lines = _hint_lines(hints or PageHints())
    if hint_lines:
        sections.append("Hints:\n" + "\n".join(f"- {line}" for line in hint_lines))

    sections.append(f"HTML:\n{cleaned_html}")
    sections.append(
        "Return ONLY valid JSON with this exact structure (no markdown, no code blocks):\n"
        + OUTPUT_SHAPE
    )
    sections.append(EXTRACTION_RULES)
    return "\n\n".join(sections) + "\n"


def _strip_code_fences(text: str) -> str:
    return CODE_FENCE_PATTERN.sub("", text).replace("```", "").strip()


def _first_json_value(text: str) -> object:
    # Trailing prose may contain braces of its own, so decode from each "{"
    # and stop at the first one that parses.
    start = text.find("{")
    if start < 0:
        raise ExtractionError("Could not find JSON in model response")

    decoder = json.JSONDecoder()
    first_error: json.JSONDecodeError | None = None
    while start >= 0:
        try:
            value, _ = decoder.raw_decode(text, start)
            return value
        except json.JSONDecodeError as error:
            first_error = first_error or error
        start = text.find("{", start + 1)

    raise ExtractionError(f"Model response was not valid JSON: {first_error}") from first_error


def parse_llm_response(text: str) -> RecipeDraft:
    """Pull the recipe JSON object out of a model reply and validate it."""
    stripped = _strip_code_fences(text or "")

    data = _first_json_value(stripped)
    if not isinstance(data, dict):
        raise ExtractionError("Model response JSON was not an object")

    try:
        payload = LlmRecipePayload.model_validate(data)
    except ValidationError as error:
        details = "; ".join(item["msg"].removeprefix("Value error, ") for item in error.errors())
        raise ExtractionError(details) from error

    return payload.to_draft()


def extract_with_llm(
    client: CompletionClient,
    page: CleanedPage,
    max_output_tokens: int = DEFAULT_MAX_OUTPUT_TOKENS,
) -> RecipeDraft:
    prompt = build_extraction_prompt(page.html, page.hints)
    logger.info("llm_extraction.request prompt_chars=%d", len(prompt))

    reply = client.complete(prompt, max_output_tokens)
    draft = parse_llm_response(reply)

    if not draft.imageUrl and page.hints.imageUrl:
        draft = draft.model_copy(update={"imageUrl": page.hints.imageUrl})
    return draft
