from __future__ import annotations

import logging
from typing import Protocol

import httpx
from google import genai
from google.genai import types
from google.genai.errors import APIError, ClientError

from pantrie.services.errors import ExtractionError, LlmConfigurationError, RateLimitedError

logger = logging.getLogger(__name__)

DEFAULT_MODEL_NAME = "gemini-2.5-flash"
DEFAULT_TIMEOUT_SECONDS = 60.0


class CompletionClient(Protocol):
    def complete(self, prompt: str, max_output_tokens: int) -> str:
        ...


def _is_rate_limited(error: ClientError) -> bool:
    status_code = getattr(error, "code", None) or getattr(error, "status_code", None)
    return status_code == 429 or "RESOURCE_EXHAUSTED" in str(error)


class GeminiClient:
    def __init__(
        self,
        api_key: str,
        model_name: str = DEFAULT_MODEL_NAME,
        timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    ) -> None:
        if not api_key:
            raise LlmConfigurationError("Missing Gemini API key. Set GEMINI_API_KEY in the environment or .env.")
        self.model_name = model_name
        self.timeout_seconds = timeout_seconds
        self._client = genai.Client(
            api_key=api_key,
            http_options=types.HttpOptions(timeout=int(timeout_seconds * 1000)),
        )

    def complete(self, prompt: str, max_output_tokens: int) -> str:
        try:
            response = self._client.models.generate_content(
                model=self.model_name,
                contents=prompt,
                config=types.GenerateContentConfig(
                    max_output_tokens=max_output_tokens,
                    temperature=0.0,
                ),
            )
        except ClientError as err:
            if _is_rate_limited(err):
                raise RateLimitedError("Gemini rate limit reached. Try again in a few moments.") from err
            raise ExtractionError(f"Gemini request was rejected: {err}") from err
        except APIError as err:
            raise ExtractionError(f"Gemini request failed: {err}") from err
        except httpx.TimeoutException as err:
            raise ExtractionError(f"Gemini request timed out after {self.timeout_seconds}s") from err
        except httpx.HTTPError as err:
            raise ExtractionError(f"Network error calling Gemini: {err}") from err

        text = response.text if response is not None else None
        if not text:
            raise ExtractionError("Model response did not include text content.")

        logger.info("gemini.complete model=%s chars=%d", self.model_name, len(text))
        return text
