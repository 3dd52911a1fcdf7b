from __future__ import annotations

import logging
from typing import Sequence

import httpx

from .errors import FetchError
from .models import FetchAttempt, HeaderProfile

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 15.0

DESKTOP_BROWSER_PROFILE = HeaderProfile(
    name="desktop-chrome",
    headers={
        "User-Agent": (
            "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
            "(KHTML, like Gecko) Chrome/124.0.0.0 Safari/537.36"
        ),
        "Accept": (
            "text/html,application/xhtml+xml,application/xml;q=0.9,"
            "image/avif,image/webp,image/apng,*/*;q=0.8"
        ),
        "Accept-Language": "en-US,en;q=0.9",
        "Cache-Control": "no-cache",
        "Pragma": "no-cache",
        "Sec-Ch-Ua": '"Chromium";v="124", "Google Chrome";v="124", "Not-A.Brand";v="99"',
        "Sec-Ch-Ua-Mobile": "?0",
        "Sec-Ch-Ua-Platform": '"Windows"',
        "Sec-Fetch-Dest": "document",
        "Sec-Fetch-Mode": "navigate",
        "Sec-Fetch-Site": "none",
        "Sec-Fetch-User": "?1",
        "Upgrade-Insecure-Requests": "1",
    },
)

SEARCH_CRAWLER_PROFILE = HeaderProfile(
    name="googlebot",
    headers={
        "User-Agent": "Mozilla/5.0 (compatible; Googlebot/2.1; +http://www.google.com/bot.html)",
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.5",
    },
)

MOBILE_BROWSER_PROFILE = HeaderProfile(
    name="mobile-safari",
    headers={
        "User-Agent": (
            "Mozilla/5.0 (iPhone; CPU iPhone OS 17_4 like Mac OS X) AppleWebKit/605.1.15 "
            "(KHTML, like Gecko) Version/17.4 Mobile/15E148 Safari/604.1"
        ),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-US,en;q=0.9",
    },
)

DEFAULT_HEADER_PROFILES: tuple[HeaderProfile, ...] = (
    DESKTOP_BROWSER_PROFILE,
    SEARCH_CRAWLER_PROFILE,
    MOBILE_BROWSER_PROFILE,
)


class HtmlFetcher:
    def __init__(
        self,
        profiles: Sequence[HeaderProfile] = DEFAULT_HEADER_PROFILES,
        timeout: float = DEFAULT_TIMEOUT_SECONDS,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.profiles = tuple(profiles)
        self.timeout = timeout
        self._transport = transport

    def _request(self, client: httpx.Client, url: str, profile: HeaderProfile) -> tuple[FetchAttempt, str | None]:
        try:
            response = client.get(url, headers=dict(profile.headers))
        except httpx.TimeoutException:
            return FetchAttempt(profile=profile.name, error=f"timed out after {self.timeout}s"), None
        except (httpx.HTTPError, httpx.InvalidURL) as error:
            return FetchAttempt(profile=profile.name, error=str(error) or type(error).__name__), None

        attempt = FetchAttempt(profile=profile.name, status_code=response.status_code)
        return attempt, (response.text if attempt.ok else None)

    def fetch(self, url: str) -> str:
        attempts: list[FetchAttempt] = []

        with httpx.Client(
            timeout=self.timeout,
            follow_redirects=True,
            transport=self._transport,
        ) as client:
            for profile in self.profiles:
                attempt, body = self._request(client, url, profile)
                attempts.append(attempt)

                if body is not None:
                    logger.info("fetch.ok url=%s profile=%s chars=%d", url, profile.name, len(body))
                    return body

                logger.warning("fetch.attempt_failed url=%s reason=%s", url, attempt.reason)

        raise FetchError(url, attempts)
