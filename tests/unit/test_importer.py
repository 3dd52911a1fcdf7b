from __future__ import annotations

import json

import pytest

from pantrie.services.errors import ExtractionError, FetchError
from pantrie.services.importer import RecipeImporter, source_from_url
from pantrie.services.models import FetchAttempt

LONG_TEXT = "Whisk honey, garlic and soy sauce, then brush the glaze generously over each fillet. " * 8

JSON_LD_RECIPE = {
    "@context": "https://schema.org",
    "@type": "Recipe",
    "name": "Classic Pancakes",
    "recipeIngredient": ["1 cup flour", "1 egg", "1 cup milk"],
    "recipeInstructions": [{"@type": "HowToStep", "text": "Whisk everything."}, {"@type": "HowToStep", "text": "Cook on a griddle."}],
    "totalTime": "PT20M",
    "recipeYield": "8 pancakes",
}

LLM_REPLY = json.dumps(
    {
        "title": "Honey Garlic Salmon",
        "description": "Sticky glazed salmon.",
        "ingredients": ["4 salmon fillets", "3 tbsp honey"],
        "instructions": ["Make the glaze.", "Bake the salmon."],
        "prepTime": 5,
        "cookTime": 15,
        "totalTime": 20,
        "servings": 4,
        "difficulty": "easy",
        "imageUrl": None,
        "author": None,
        "tags": ["fish"],
    }
)


def _json_ld_page(schema: dict) -> str:
    return (
        "<html><head>"
        f'<script type="application/ld+json">{json.dumps(schema)}</script>'
        "</head><body><h1>Pancakes</h1></body></html>"
    )


SALMON_PAGE = (
    "<html><head><title>Dinner ideas</title></head><body>"
    "<nav>Home</nav>"
    "<h1>Honey Garlic Salmon</h1>"
    f"<div class='recipe-card'><p>{LONG_TEXT}</p></div>"
    "</body></html>"
)


class FetcherStub:
    def __init__(self, html: str | None = None, error: Exception | None = None) -> None:
        self.html = html
        self.error = error
        self.urls: list[str] = []

    def fetch(self, url: str) -> str:
        self.urls.append(url)
        if self.error is not None:
            raise self.error
        return self.html or ""


class CompletionClientStub:
    def __init__(self, reply: str = LLM_REPLY) -> None:
        self.reply = reply
        self.prompts: list[str] = []

    def complete(self, prompt: str, max_output_tokens: int) -> str:
        self.prompts.append(prompt)
        return self.reply


def _importer(fetcher: FetcherStub, client: CompletionClientStub | None = None) -> RecipeImporter:
    return RecipeImporter(fetcher=fetcher, completion_client=client or CompletionClientStub())


class TestSourceFromUrl:
    def test_strips_leading_www(self) -> None:
        assert source_from_url("https://www.allrecipes.com/recipe/123") == "allrecipes.com"

    def test_keeps_other_subdomains(self) -> None:
        assert source_from_url("https://cooking.nytimes.com/recipes/1") == "cooking.nytimes.com"

    def test_only_leading_www_is_removed(self) -> None:
        assert source_from_url("https://recipes.www.example.com/x") == "recipes.www.example.com"

    @pytest.mark.parametrize("url", ["not a url", "", "http://[::1"])
    def test_unknown_on_unparseable_url(self, url: str) -> None:
        assert source_from_url(url) == "Unknown"


class TestFastPath:
    def test_uses_structured_data_without_llm(self) -> None:
        client = CompletionClientStub()
        importer = _importer(FetcherStub(_json_ld_page(JSON_LD_RECIPE)), client)

        record = importer.import_recipe("https://www.allrecipes.com/recipe/123")

        assert record.title == "Classic Pancakes"
        assert record.ingredients == ["1 cup flour", "1 egg", "1 cup milk"]
        assert record.instructions == ["Whisk everything.", "Cook on a griddle."]
        assert record.totalTime == 20
        assert record.servings == 8
        assert record.source == "allrecipes.com"
        assert record.sourceUrl == "https://www.allrecipes.com/recipe/123"
        assert client.prompts == []

    def test_repeat_imports_are_equal(self) -> None:
        importer = _importer(FetcherStub(_json_ld_page(JSON_LD_RECIPE)))
        url = "https://example.com/pancakes"

        assert importer.import_recipe(url) == importer.import_recipe(url)

    @pytest.mark.parametrize("missing", ["name", "recipeIngredient", "recipeInstructions"])
    def test_incomplete_structured_data_falls_back_to_llm(self, missing: str) -> None:
        schema = {key: value for key, value in JSON_LD_RECIPE.items() if key != missing}
        client = CompletionClientStub()

        record = _importer(FetcherStub(_json_ld_page(schema)), client).import_recipe("https://example.com/p")

        assert len(client.prompts) == 1
        assert record.title == "Honey Garlic Salmon"


class TestFallbackPath:
    def test_title_hint_reaches_prompt(self) -> None:
        client = CompletionClientStub()
        url = "https://example.com/honey-salmon"

        record = _importer(FetcherStub(SALMON_PAGE), client).import_recipe(url)

        assert len(client.prompts) == 1
        assert '"Honey Garlic Salmon"' in client.prompts[0]
        assert "<nav>" not in client.prompts[0]
        assert record.title == "Honey Garlic Salmon"
        assert record.source == "example.com"
        assert record.sourceUrl == url
        assert record.difficulty == "easy"

    def test_incomplete_llm_record_fails(self) -> None:
        reply = json.dumps({"title": "Honey Garlic Salmon", "ingredients": ["salmon"], "instructions": []})

        with pytest.raises(ExtractionError, match="instructions are required"):
            _importer(FetcherStub(SALMON_PAGE), CompletionClientStub(reply)).import_recipe("https://example.com/s")

    def test_unparseable_llm_reply_fails(self) -> None:
        with pytest.raises(ExtractionError):
            _importer(FetcherStub(SALMON_PAGE), CompletionClientStub("no recipe here")).import_recipe(
                "https://example.com/s"
            )


class TestFetchFailure:
    def test_fetch_error_is_terminal(self) -> None:
        error = FetchError("https://example.com/x", [FetchAttempt(profile="googlebot", status_code=403)])
        client = CompletionClientStub()

        with pytest.raises(FetchError):
            _importer(FetcherStub(error=error), client).import_recipe("https://example.com/x")

        assert client.prompts == []

    def test_source_url_is_passed_to_fetcher(self) -> None:
        fetcher = FetcherStub(_json_ld_page(JSON_LD_RECIPE))

        _importer(fetcher).import_recipe("https://example.com/pancakes?ref=home")

        assert fetcher.urls == ["https://example.com/pancakes?ref=home"]
