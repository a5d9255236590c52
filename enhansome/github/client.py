"""Async GitHub REST client with rate-limit aware retries."""

from __future__ import annotations

import asyncio
import time
from datetime import UTC, datetime
from email.utils import parsedate_to_datetime
from typing import Awaitable, Callable, Mapping, Optional

import httpx

from ..config import DEFAULT_API_URL
from ..logging import get_logger
from ..models import RepoInfo

SleepFunc = Callable[[float], Awaitable[None]]
ClockFunc = Callable[[], float]

_RATE_LIMIT_STATUSES = {403, 429}


class GitHubClient:
    """Fetches repository metadata, retrying when GitHub asks us to slow down.

    The client owns an ``httpx.AsyncClient`` unless one is injected. Use it as
    an async context manager, or call :meth:`aclose` when done.
    """

    def __init__(
        self,
        token: str | None = None,
        *,
        api_url: str = DEFAULT_API_URL,
        max_retries: int = 3,
        max_wait_seconds: float = 300.0,
        request_timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
        sleep: SleepFunc | None = None,
        clock: ClockFunc | None = None,
    ) -> None:
        self.token = token or None
        self.api_url = api_url.rstrip("/")
        self.max_retries = max(1, max_retries)
        self.max_wait_seconds = max_wait_seconds
        self._owns_client = http_client is None
        self._http = http_client or httpx.AsyncClient(
            timeout=request_timeout, follow_redirects=True
        )
        self._sleep = sleep or asyncio.sleep
        self._clock = clock or time.time
        self.logger = get_logger("github")

    async def __aenter__(self) -> "GitHubClient":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._owns_client:
            await self._http.aclose()

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": "enhansome",
        }
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    async def get_repo_info(self, owner: str, name: str) -> Optional[RepoInfo]:
        """Return metadata for ``owner/name`` or ``None`` when it cannot be fetched."""
        full_name = f"{owner}/{name}"
        url = f"{self.api_url}/repos/{owner}/{name}"

        for attempt in range(1, self.max_retries + 1):
            self.logger.debug(
                "Fetching repository info for %s (attempt %d/%d)",
                full_name,
                attempt,
                self.max_retries,
            )
            try:
                response = await self._http.get(url, headers=self._headers())
            except httpx.HTTPError as exc:
                self.logger.error("Network error fetching repo info for %s: %s", full_name, exc)
                return None

            if response.status_code == 200:
                return self._parse_payload(full_name, response)

            if response.status_code in _RATE_LIMIT_STATUSES:
                wait = self.compute_wait(response.headers)
                if wait is not None:
                    if wait > self.max_wait_seconds:
                        self.logger.error(
                            "Rate limit wait for %s (%.0fs) exceeds the maximum of %.0fs; giving up",
                            full_name,
                            wait,
                            self.max_wait_seconds,
                        )
                        return None
                    if attempt == self.max_retries:
                        break
                    self.logger.warning(
                        "Request for %s was throttled (status %d); waiting %.0f seconds",
                        full_name,
                        response.status_code,
                        wait,
                    )
                    await self._sleep(wait)
                    continue

            self.logger.error(
                "Failed to fetch repo info for %s (status %d)",
                full_name,
                response.status_code,
            )
            self.logger.debug("Response body for %s: %s", full_name, response.text[:500])
            return None

        self.logger.error(
            "Failed to fetch repo info for %s after %d attempts", full_name, self.max_retries
        )
        return None

    def compute_wait(self, headers: Mapping[str, str]) -> Optional[float]:
        """Seconds to wait before retrying, or ``None`` when the response is not a rate limit.

        ``Retry-After`` wins; otherwise an exhausted primary quota waits until
        ``X-RateLimit-Reset`` plus a one second buffer.
        """
        retry_after = headers.get("retry-after")
        if retry_after:
            parsed = self._parse_retry_after(retry_after)
            if parsed is not None:
                return parsed

        remaining = headers.get("x-ratelimit-remaining")
        reset = headers.get("x-ratelimit-reset")
        if remaining is not None and remaining.strip() == "0" and reset:
            try:
                reset_at = float(reset)
            except ValueError:
                return None
            return max(0.0, reset_at - self._clock()) + 1.0
        return None

    def _parse_retry_after(self, value: str) -> Optional[float]:
        value = value.strip()
        try:
            return max(0.0, float(value))
        except ValueError:
            pass
        try:
            when = parsedate_to_datetime(value)
        except (TypeError, ValueError):
            return None
        if when.tzinfo is None:
            when = when.replace(tzinfo=UTC)
        now = datetime.fromtimestamp(self._clock(), tz=UTC)
        return max(0.0, (when - now).total_seconds())

    def _parse_payload(self, full_name: str, response: httpx.Response) -> Optional[RepoInfo]:
        try:
            payload = response.json()
        except ValueError:
            self.logger.warning("GitHub returned invalid JSON for %s", full_name)
            return None
        if not isinstance(payload, dict):
            self.logger.warning("Unexpected payload for %s: %r", full_name, payload)
            return None
        try:
            return RepoInfo.from_api(payload)
        except ValueError as exc:
            self.logger.warning("Incomplete payload for %s: %s", full_name, exc)
            return None


__all__ = ["ClockFunc", "GitHubClient", "SleepFunc"]
