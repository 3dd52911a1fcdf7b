from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Optional

from bs4 import BeautifulSoup, Comment, Tag

logger = logging.getLogger(__name__)

MAX_CLEANED_CHARS = 60_000
MIN_CONTAINER_TEXT_CHARS = 500
MIN_TITLE_CHARS = 3
MAX_TITLE_CHARS = 200

WHITESPACE_PATTERN = re.compile(r"\s+")

REMOVABLE_TAGS = (
    "script",
    "style",
    "noscript",
    "link",
    "nav",
    "footer",
    "header",
    "aside",
    "iframe",
    "form",
    "svg",
)

REMOVABLE_SELECTORS = (
    "#sidebar",
    ".sidebar",
    ".widget-area",
    "#comments",
    ".comments",
    ".comment-list",
    ".comments-area",
    "#respond",
    ".ad",
    ".ads",
    ".adsbygoogle",
    ".ad-container",
    ".ad-slot",
    "[class*='advert']",
    "[id*='advert']",
)

RECIPE_CONTAINER_SELECTORS = (
    ".wprm-recipe-container",
    ".wprm-recipe",
    ".tasty-recipes",
    ".mv-create-card",
    ".recipe-card",
    "[itemtype*='schema.org/Recipe']",
    ".recipe",
    "#recipe",
    ".entry-content",
    "main",
    "article",
)

TITLE_SELECTORS = (
    ".wprm-recipe-name",
    ".tasty-recipes-title",
    ".mv-create-title",
    ".recipe-title",
    "h1.entry-title",
    "h1",
    "meta[property='og:title']",
    "title",
)

IMAGE_SELECTORS = (
    "meta[property='og:image']",
    "meta[name='twitter:image']",
    ".wprm-recipe-image img",
    ".tasty-recipes-image img",
    ".recipe-image img",
    "article img",
)

IMAGE_SOURCE_ATTRIBUTES = ("content", "src", "data-src", "data-lazy-src")


@dataclass(frozen=True)
class PageHints:
    title: Optional[str] = None
    imageUrl: Optional[str] = None


@dataclass(frozen=True)
class CleanedPage:
    html: str
    hints: PageHints = field(default_factory=PageHints)


def _plausible_title(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    text = WHITESPACE_PATTERN.sub(" ", value).strip()
    if MIN_TITLE_CHARS <= len(text) <= MAX_TITLE_CHARS:
        return text
    return None


def _plausible_image(value: Optional[str]) -> Optional[str]:
    if not value:
        return None
    url = value.strip()
    return url if url.startswith("http") else None


def _element_title(element: Tag) -> Optional[str]:
    if element.name == "meta":
        content = element.get("content")
        return content if isinstance(content, str) else None
    return element.get_text(" ", strip=True)


def _element_image(element: Tag) -> Optional[str]:
    for attribute in IMAGE_SOURCE_ATTRIBUTES:
        candidate = _plausible_image(element.get(attribute))
        if candidate:
            return candidate
    return None


def extract_hints(soup: BeautifulSoup) -> PageHints:
    title = None
    for selector in TITLE_SELECTORS:
        element = soup.select_one(selector)
        title = _plausible_title(_element_title(element)) if element else None
        if title:
            break

    image = None
    for selector in IMAGE_SELECTORS:
        element = soup.select_one(selector)
        image = _element_image(element) if element else None
        if image:
            break

    return PageHints(title=title, imageUrl=image)


def _remove_clutter(soup: BeautifulSoup) -> None:
    for comment in soup.find_all(string=lambda text: isinstance(text, Comment)):
        comment.extract()

    for element in soup.find_all(list(REMOVABLE_TAGS)):
        if not element.decomposed:
            element.decompose()

    for selector in REMOVABLE_SELECTORS:
        for element in soup.select(selector):
            if not element.decomposed:
                element.decompose()


def _find_recipe_container(soup: BeautifulSoup) -> tuple[Optional[Tag], str]:
    for selector in RECIPE_CONTAINER_SELECTORS:
        for element in soup.select(selector):
            if len(element.get_text(" ", strip=True)) > MIN_CONTAINER_TEXT_CHARS:
                return element, selector
    return None, "none"


def clean_html(html: str) -> CleanedPage:
    """Reduce a recipe page to its likely recipe markup plus weak hints."""
    soup = BeautifulSoup(html, "html.parser")
    hints = extract_hints(soup)

    _remove_clutter(soup)
    container, selector = _find_recipe_container(soup)

    if container is not None:
        kept = str(container)
    elif soup.body is not None:
        selector = "body"
        kept = str(soup.body)
    else:
        selector = "original"
        kept = html

    collapsed = WHITESPACE_PATTERN.sub(" ", kept).strip()
    truncated = collapsed[:MAX_CLEANED_CHARS]
    logger.info(
        "html_cleaner.done selector=%s chars=%d title_hint=%s",
        selector,
        len(truncated),
        hints.title,
    )
    return CleanedPage(html=truncated, hints=hints)
