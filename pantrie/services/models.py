"""
Data shapes used by the recipe import pipeline.

Untrusted input (JSON-LD blocks, LLM output) is parsed into the boundary
models here; everything downstream works with ``RecipeDraft`` and, once
provenance is attached, the immutable ``RecipeRecord``.
"""
from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Difficulty = Literal["easy", "medium", "hard"]

ALLOWED_DIFFICULTIES = {"easy", "medium", "hard"}
_DURATION_TEXT_PATTERN = re.compile(
    r"^\s*(?:(\d+(?:\.\d+)?)\s*(?:h|hr|hrs|hours?))?"
    r"\s*(?:and\s+)?(?:(\d+)\s*(?:m|min|mins|minutes?)?)?\s*$",
    re.IGNORECASE,
)
_COUNT_TEXT_PATTERN = re.compile(r"^\s*(\d+)\s*(?:servings?|people|portions?)?\s*$", re.IGNORECASE)


@dataclass(frozen=True)
class HeaderProfile:
    """A named set of request headers the fetcher can present to a site."""
    name: str
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class FetchAttempt:
    """Outcome of requesting a page with one header profile."""
    profile: str
    status_code: Optional[int] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status_code is not None and 200 <= self.status_code < 300

    @property
    def reason(self) -> str:
        if self.error:
            return f"{self.profile}: {self.error}"
        return f"{self.profile}: HTTP {self.status_code}"


class RecipeDraft(BaseModel):
    """Recipe fields gathered by either extraction path, before validation."""
    title: Optional[str] = None
    description: Optional[str] = None
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    prepTime: Optional[int] = None
    cookTime: Optional[int] = None
    totalTime: Optional[int] = None
    servings: Optional[int] = None
    difficulty: Optional[Difficulty] = None
    imageUrl: Optional[str] = None
    author: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    cuisine: Optional[str] = None
    category: Optional[str] = None

    def has_required_fields(self) -> bool:
        return bool(self.title and self.title.strip()) and bool(self.ingredients) and bool(self.instructions)

    def to_record(self, source: str, source_url: str) -> RecipeRecord:
        return RecipeRecord(**self.model_dump(), source=source, sourceUrl=source_url)


class RecipeRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    ingredients: list[str] = Field(..., min_length=1)
    instructions: list[str] = Field(..., min_length=1)
    prepTime: Optional[int] = None
    cookTime: Optional[int] = None
    totalTime: Optional[int] = None
    servings: Optional[int] = None
    difficulty: Optional[Difficulty] = None
    imageUrl: Optional[str] = None
    author: Optional[str] = None
    tags: list[str] = Field(default_factory=list)
    cuisine: Optional[str] = None
    category: Optional[str] = None
    source: str
    sourceUrl: str

    @field_validator("title")
    @classmethod
    def _title_not_blank(cls, value: str) -> str:
        stripped = value.strip()
        if not stripped:
            raise ValueError("title must not be blank")
        return stripped


class JsonLdRecipe(BaseModel):
    """
    A schema.org Recipe object as found in a page's JSON-LD.

    Most properties are polymorphic in the wild (a string, a list, or a nested
    object), so they are kept as ``Any`` and resolved by the normalizer.
    """
    model_config = ConfigDict(extra="ignore")

    name: Any = None
    description: Any = None
    recipeIngredient: Any = None
    recipeInstructions: Any = None
    prepTime: Any = None
    cookTime: Any = None
    totalTime: Any = None
    recipeYield: Any = None
    image: Any = None
    author: Any = None
    keywords: Any = None
    recipeCuisine: Any = None
    recipeCategory: Any = None


def _clean_str(value: Any) -> Optional[str]:
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    return None


def _from_number(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        return int(round(value))
    return None


def _to_minutes(value: Any) -> Optional[int]:
    if not isinstance(value, str):
        return _from_number(value)

    match = _DURATION_TEXT_PATTERN.match(value)
    if not match or not any(match.groups()):
        return None

    hours, minutes = match.groups()
    return int(round(float(hours or 0) * 60)) + int(minutes or 0)


def _to_count(value: Any) -> Optional[int]:
    if not isinstance(value, str):
        return _from_number(value)

    match = _COUNT_TEXT_PATTERN.match(value)
    return int(match.group(1)) if match else None


def _to_str_list(value: Any) -> list[str]:
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, list):
        return []
    out: list[str] = []
    for item in value:
        if isinstance(item, (int, float)) and not isinstance(item, bool):
            item = str(item)
        text = _clean_str(item)
        if text:
            out.append(text)
    return out


class LlmRecipePayload(BaseModel):
    """The JSON object a language model returns for a recipe page."""
    model_config = ConfigDict(extra="ignore")

    title: Optional[str] = None
    description: Optional[str] = None
    ingredients: list[str] = Field(default_factory=list)
    instructions: list[str] = Field(default_factory=list)
    prepTime: Optional[int] = None
    cookTime: Optional[int] = None
    totalTime: Optional[int] = None
    servings: Optional[int] = None
    difficulty: Optional[Difficulty] = None
    imageUrl: Optional[str] = None
    author: Optional[str] = None
    tags: list[str] = Field(default_factory=list)

    @field_validator("title", "description", "imageUrl", "author", mode="before")
    @classmethod
    def _strings(cls, value: Any) -> Optional[str]:
        return _clean_str(value)

    @field_validator("ingredients", "instructions", "tags", mode="before")
    @classmethod
    def _string_lists(cls, value: Any) -> list[str]:
        return _to_str_list(value)

    @field_validator("prepTime", "cookTime", "totalTime", mode="before")
    @classmethod
    def _durations(cls, value: Any) -> Optional[int]:
        return _to_minutes(value)

    @field_validator("servings", mode="before")
    @classmethod
    def _servings(cls, value: Any) -> Optional[int]:
        return _to_count(value)

    @field_validator("difficulty", mode="before")
    @classmethod
    def _difficulty(cls, value: Any) -> Optional[str]:
        candidate = _clean_str(value)
        if candidate and candidate.lower() in ALLOWED_DIFFICULTIES:
            return candidate.lower()
        return None

    @model_validator(mode="after")
    def _required_fields(self) -> LlmRecipePayload:
        if not self.title:
            raise ValueError("Recipe title is required but was not found")
        if not self.ingredients:
            raise ValueError("Recipe ingredients are required but were not found")
        if not self.instructions:
            raise ValueError("Recipe instructions are required but were not found")
        return self

    def to_draft(self) -> RecipeDraft:
        return RecipeDraft(**self.model_dump())
