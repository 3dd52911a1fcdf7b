from __future__ import annotations

import re
from typing import Any, Optional

from .models import JsonLdRecipe, RecipeDraft

DURATION_PATTERN = re.compile(r"PT(?:(\d+)H)?(?:(\d+)M)?", re.IGNORECASE)
DIGITS_PATTERN = re.compile(r"\d+")
STEP_SPLIT_PATTERN = re.compile(r"\n|(?<=[.!?])\s+")


def _text(value: Any) -> Optional[str]:
    return value if isinstance(value, str) and value else None


def parse_duration(value: Any) -> Optional[int]:
    """Convert an ISO-8601 ``PT#H#M`` duration into whole minutes."""
    if not isinstance(value, str) or not value.strip():
        return None

    match = DURATION_PATTERN.search(value)
    if not match:
        return None

    hours, minutes = match.groups()
    if hours is None and minutes is None:
        return None

    return int(hours or 0) * 60 + int(minutes or 0)


def parse_servings(value: Any) -> Optional[int]:
    if isinstance(value, list):
        value = value[0] if value else None
    if value is None or isinstance(value, bool):
        return None

    match = DIGITS_PATTERN.search(str(value))
    if not match:
        return None
    return int(match.group(0)) or None


def _ingredient_text(entry: Any) -> str:
    if isinstance(entry, str):
        return entry
    if isinstance(entry, dict) and entry.get("name"):
        return str(entry["name"])
    return str(entry)


def _normalize_ingredients(value: Any) -> list[str]:
    if not value:
        return []
    entries = value if isinstance(value, list) else [value]
    cleaned = (_ingredient_text(entry).strip() for entry in entries)
    return [item for item in cleaned if item]


def _step_texts(entry: Any) -> list[str]:
    if isinstance(entry, str):
        return [entry]
    if isinstance(entry, dict):
        section_items = entry.get("itemListElement")
        if isinstance(section_items, list):
            return [text for item in section_items for text in _step_texts(item)]
        if entry.get("text"):
            return [str(entry["text"])]
        if entry.get("name"):
            return [str(entry["name"])]
    return [str(entry)]


def _normalize_instructions(value: Any) -> list[str]:
    if not value:
        return []

    if isinstance(value, str):
        steps = STEP_SPLIT_PATTERN.split(value)
    elif isinstance(value, list):
        steps = [text for entry in value for text in _step_texts(entry)]
    else:
        steps = _step_texts(value)

    cleaned = (step.strip() for step in steps)
    return [step for step in cleaned if step]


def _normalize_image(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value or None
    if isinstance(value, list):
        return _normalize_image(value[0]) if value else None
    if isinstance(value, dict):
        return _text(value.get("url"))
    return None


def _normalize_author(value: Any) -> Optional[str]:
    if isinstance(value, str):
        return value or None
    if isinstance(value, list):
        return _normalize_author(value[0]) if value else None
    if isinstance(value, dict):
        return _text(value.get("name"))
    return None


def _normalize_tags(value: Any) -> list[str]:
    if isinstance(value, str):
        pieces = (piece.strip() for piece in value.split(","))
        return [piece for piece in pieces if piece]
    if isinstance(value, list):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return []


def _normalize_label(value: Any) -> Optional[str]:
    if isinstance(value, list):
        labels = [item for item in value if isinstance(item, str) and item]
        return ", ".join(labels) or None
    return _text(value)


def normalize_recipe_schema(schema: dict) -> RecipeDraft:
    """Map a raw JSON-LD Recipe object onto the recipe draft fields."""
    raw = JsonLdRecipe.model_validate(schema)

    return RecipeDraft(
        title=_text(raw.name),
        description=_text(raw.description),
        ingredients=_normalize_ingredients(raw.recipeIngredient),
        instructions=_normalize_instructions(raw.recipeInstructions),
        prepTime=parse_duration(raw.prepTime),
        cookTime=parse_duration(raw.cookTime),
        totalTime=parse_duration(raw.totalTime),
        servings=parse_servings(raw.recipeYield),
        difficulty=None,
        imageUrl=_normalize_image(raw.image),
        author=_normalize_author(raw.author),
        tags=_normalize_tags(raw.keywords),
        cuisine=_normalize_label(raw.recipeCuisine),
        category=_normalize_label(raw.recipeCategory),
    )
