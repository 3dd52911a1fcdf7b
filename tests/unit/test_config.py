from __future__ import annotations

import pytest

from pantrie.app.config import Settings
from pantrie.app.deps import build_recipe_importer
from pantrie.services.errors import LlmConfigurationError


class TestSettings:
    def test_defaults(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("GEMINI_MODEL", raising=False)
        monkeypatch.delenv("FETCH_TIMEOUT_SECONDS", raising=False)

        config = Settings(_env_file=None)

        assert config.GEMINI_MODEL == "gemini-2.5-flash"
        assert config.LLM_MAX_OUTPUT_TOKENS == 4000
        assert config.FETCH_TIMEOUT_SECONDS == 15.0
        assert config.LLM_TIMEOUT_SECONDS == 60.0

    def test_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("fetch_timeout_seconds", "7.5")
        monkeypatch.setenv("GEMINI_MODEL", "gemini-2.5-pro")

        config = Settings(_env_file=None)

        assert config.FETCH_TIMEOUT_SECONDS == 7.5
        assert config.GEMINI_MODEL == "gemini-2.5-pro"


class TestBuildRecipeImporter:
    def test_missing_api_key(self) -> None:
        config = Settings(_env_file=None, GEMINI_API_KEY="")

        with pytest.raises(LlmConfigurationError):
            build_recipe_importer(config)

    def test_wires_settings(self) -> None:
        config = Settings(_env_file=None, GEMINI_API_KEY="test-key", FETCH_TIMEOUT_SECONDS=9.0, LLM_MAX_OUTPUT_TOKENS=2000)

        importer = build_recipe_importer(config)

        assert importer.fetcher.timeout == 9.0
        assert importer.max_output_tokens == 2000
        assert importer.completion_client.model_name == config.GEMINI_MODEL
