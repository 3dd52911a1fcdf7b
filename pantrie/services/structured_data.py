from __future__ import annotations

import json
import logging
import re
from typing import Any, Iterable, Iterator

from bs4 import BeautifulSoup

logger = logging.getLogger(__name__)

JSON_LD_TYPE = re.compile(r"^\s*application/ld\+json", re.IGNORECASE)
RECIPE_TYPE = "Recipe"


def _is_recipe(candidate: Any) -> bool:
    if not isinstance(candidate, dict):
        return False
    declared = candidate.get("@type")
    if isinstance(declared, list):
        return RECIPE_TYPE in declared
    return declared == RECIPE_TYPE


def _as_list(value: Any) -> list[Any]:
    return value if isinstance(value, list) else [value]


def _iter_json_ld_blocks(soup: BeautifulSoup) -> Iterator[Any]:
    for index, script in enumerate(soup.find_all("script", attrs={"type": JSON_LD_TYPE})):
        content = script.string if script.string is not None else script.get_text()
        if not content or not content.strip():
            continue
        try:
            yield json.loads(content.strip())
        except json.JSONDecodeError as error:
            logger.debug("structured_data.skip_block index=%d error=%s", index, error)


def _find_in_candidates(candidates: Iterable[Any]) -> dict | None:
    for candidate in candidates:
        if _is_recipe(candidate):
            return candidate
        if isinstance(candidate, dict) and isinstance(candidate.get("@graph"), list):
            for item in candidate["@graph"]:
                if _is_recipe(item):
                    return item
    return None


def find_recipe_schema(html: str) -> dict | None:
    """Return the first schema.org Recipe object embedded as JSON-LD, if any."""
    if not html:
        return None

    soup = BeautifulSoup(html, "html.parser")
    for block in _iter_json_ld_blocks(soup):
        match = _find_in_candidates(_as_list(block))
        if match is not None:
            logger.info("structured_data.recipe_found")
            return match

    return None
