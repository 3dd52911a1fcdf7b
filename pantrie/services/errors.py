from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pantrie.services.models import FetchAttempt


class ServiceError(Exception):
    pass


class FetchError(ServiceError):
    def __init__(self, url: str, attempts: list[FetchAttempt] | None = None):
        self.url = url
        self.attempts = list(attempts or [])
        last_reason = self.attempts[-1].reason if self.attempts else "no header profiles configured"
        super().__init__(f"Could not fetch URL {url}: {last_reason}")

    @property
    def last_reason(self) -> str | None:
        return self.attempts[-1].reason if self.attempts else None


class ExtractionError(ServiceError):
    pass


class RateLimitedError(ExtractionError):
    pass


class LlmConfigurationError(ServiceError):
    pass
