"""Fetching a user's public events, with a short-lived in-memory cache."""

from __future__ import annotations

import json
import time
import urllib.request
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable
from urllib.error import HTTPError, URLError
from urllib.parse import quote

from .domain import GitHubEvent, PayloadError

USER_NOT_FOUND = "USER_NOT_FOUND"
AUTH_REQUIRED = "AUTH_REQUIRED"
RATE_LIMIT = "RATE_LIMIT"
HTTP_STATUS = "HTTP_STATUS"
NETWORK_ERROR = "NETWORK_ERROR"
READ_ERROR = "READ_ERROR"
PARSE_ERROR = "PARSE_ERROR"

DEFAULT_TTL = 5 * 60.0
DEFAULT_TIMEOUT = 10.0
DEFAULT_USER_AGENT = "github-activity-cli"
DEFAULT_BASE_URL = "https://api.github.com"


class RepositoryError(Exception):
    """An error while fetching events, with a short code and an optional cause."""

    def __init__(self, code: str, message: str, cause: BaseException | None = None):
        super().__init__(code, message)
        self.code = code
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.code}: {self.message} ({self.cause})"
        return f"{self.code}: {self.message}"


class EventRepository(ABC):
    """A source of a user's events."""

    @abstractmethod
    def fetch_events(self, username: str) -> list[GitHubEvent]:
        """Return the events of ``username``, newest first."""


@dataclass
class EventCache:
    """Holds the events of one user for ``ttl`` seconds."""

    ttl: float = DEFAULT_TTL
    username: str = ""
    data: list[GitHubEvent] | None = None
    timestamp: float | None = None
    clock: Callable[[], float] = field(default=time.monotonic, repr=False)

    def is_valid(self, username: str) -> bool:
        if self.username != username or self.timestamp is None:
            return False
        return self.clock() - self.timestamp < self.ttl

    def update(self, username: str, events: list[GitHubEvent]) -> None:
        self.username = username
        self.data = events
        self.timestamp = self.clock()

    def clear(self) -> None:
        self.username = ""
        self.data = None
        self.timestamp = None


class GitHubAPIRepository(EventRepository):
    """Reads events from the public GitHub REST API, caching the last answer."""

    def __init__(
        self,
        timeout: float = DEFAULT_TIMEOUT,
        cache: EventCache | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        base_url: str = DEFAULT_BASE_URL,
        urlopen: Callable[..., Any] = urllib.request.urlopen,
    ):
        self.timeout = timeout
        self.cache = cache if cache is not None else EventCache()
        self.user_agent = user_agent
        self.base_url = base_url.rstrip("/")
        self._urlopen = urlopen

    def fetch_events(self, username: str) -> list[GitHubEvent]:
        if self.cache.is_valid(username) and self.cache.data is not None:
            return self.cache.data
        events = self._fetch_from_api(username)
        self.cache.update(username, events)
        return events

    @staticmethod
    def _status_error(status: int, username: str) -> RepositoryError:
        if status == 404:
            return RepositoryError(USER_NOT_FOUND, f"user '{username}' not found")
        if status == 401:
            return RepositoryError(AUTH_REQUIRED, "authentication required")
        if status == 403:
            return RepositoryError(RATE_LIMIT, "rate limit exceeded")
        return RepositoryError(HTTP_STATUS, f"API returned status code: {status}")

    def _fetch_from_api(self, username: str) -> list[GitHubEvent]:
        url = f"{self.base_url}/users/{quote(username, safe='')}/events"
        request = urllib.request.Request(
            url,
            headers={
                "Accept": "application/vnd.github.v3+json",
                "User-Agent": self.user_agent,
            },
            method="GET",
        )
        try:
            with self._urlopen(request, timeout=self.timeout) as response:
                status = response.status
                if status != 200:
                    raise self._status_error(status, username)
                try:
                    body = response.read()
                except OSError as exc:
                    raise RepositoryError(
                        READ_ERROR, "failed to read response body", exc
                    ) from exc
        except HTTPError as exc:
            raise self._status_error(exc.code, username) from None
        except (URLError, OSError) as exc:
            raise RepositoryError(NETWORK_ERROR, "failed to fetch data", exc) from exc
        return self._parse_events(body)

    @staticmethod
    def _parse_events(body: bytes) -> list[GitHubEvent]:
        try:
            decoded = json.loads(body)
        except ValueError as exc:
            raise RepositoryError(PARSE_ERROR, "failed to parse JSON", exc) from exc
        if decoded is None:
            return []
        if not isinstance(decoded, list):
            raise RepositoryError(PARSE_ERROR, "failed to parse JSON: expected an array")
        try:
            return [GitHubEvent.from_dict(item) for item in decoded]
        except PayloadError as exc:
            raise RepositoryError(PARSE_ERROR, "failed to parse JSON", exc) from exc


class StaticEventRepository(EventRepository):
    """Serves a fixed list of events, or raises a fixed error."""

    def __init__(
        self,
        events: list[GitHubEvent] | None = None,
        error: BaseException | None = None,
    ):
        self.events = list(events) if events is not None else []
        self.error = error

    def fetch_events(self, username: str) -> list[GitHubEvent]:
        if self.error is not None:
            raise self.error
        return list(self.events)