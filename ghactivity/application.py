"""Use cases over a user's event feed: listing, detailing and summarising activity."""

from __future__ import annotations

from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime
from itertools import islice
from typing import Iterable, Iterator

from .domain import (
    EventFilter,
    EventType,
    GitHubEvent,
    PayloadError,
    available_event_types,
    truncate_message,
)
from .repository import EventRepository

COMMIT_MESSAGE_WIDTH = 60
DEFAULT_LIMIT = 30


class ActivityError(Exception):
    """Raised when activity cannot be listed or the options are invalid."""


def _format_timestamp(moment: datetime) -> str:
    return (
        f"{moment.year:04d}-{moment.month:02d}-{moment.day:02d} "
        f"{moment.hour:02d}:{moment.minute:02d}:{moment.second:02d}"
    )


@dataclass
class ActivitySummary:
    """A one-line view of an event."""

    description: str = ""
    type: str = ""
    repository: str = ""
    timestamp: str = ""


@dataclass
class CommitSummary:
    """A shortened view of a commit."""

    sha: str = ""
    message: str = ""
    author: str = ""


@dataclass
class DetailedActivity(ActivitySummary):
    """An event summary together with its identifiers and commits."""

    event_id: str = ""
    actor_login: str = ""
    commit_count: int = 0
    commits: list[CommitSummary] = field(default_factory=list)
    extra_details: dict[str, str] = field(default_factory=dict)


@dataclass
class ActivityOptions:
    """Options of an activity query."""

    event_type: str = ""
    limit: int = DEFAULT_LIMIT
    show_detailed: bool = False

    def validate(self) -> None:
        """Raise ActivityError when the limit is negative or the type is unknown."""
        if self.limit < 0:
            raise ActivityError("limit cannot be negative")
        if self.event_type:
            wanted = self.event_type.casefold()
            if not any(wanted == kind.value.casefold() for kind in available_event_types()):
                raise ActivityError(f"invalid event type: {self.event_type}")


def default_activity_options() -> ActivityOptions:
    """Return the options used when nothing is specified."""
    return ActivityOptions()


def _select(events: Iterable[GitHubEvent], event_filter: EventFilter) -> Iterator[GitHubEvent]:
    matching = (event for event in events if event_filter.matches(event))
    if event_filter.max_limit > 0:
        return islice(matching, event_filter.max_limit)
    return matching


def _require_username(username: str) -> None:
    if not username.strip():
        raise ActivityError("username cannot be empty")


class ActivityService:
    """Reads events from a repository and turns them into activity views."""

    def __init__(self, repository: EventRepository | None):
        self.repository = repository

    def _fetch(self, username: str) -> list[GitHubEvent]:
        if self.repository is None:
            raise ActivityError("failed to fetch events: no repository configured")
        try:
            return self.repository.fetch_events(username)
        except Exception as exc:
            raise ActivityError(f"failed to fetch events: {exc}") from exc

    def summarize(self, event: GitHubEvent) -> ActivitySummary:
        """Build the summary of one event."""
        return ActivitySummary(
            description=event.describe(),
            type=event.type,
            repository=event.repo.name,
            timestamp=_format_timestamp(event.created_at),
        )

    def detail(self, event: GitHubEvent) -> DetailedActivity:
        """Build the detailed view of one event, with commits for pushes."""
        activity = DetailedActivity(
            **asdict(self.summarize(event)),
            event_id=event.id,
            actor_login=event.actor.login,
        )
        if event.type == EventType.PUSH.value:
            try:
                commits = event.commit_details()
            except PayloadError:
                return activity
            activity.commit_count = len(commits)
            activity.commits = [
                CommitSummary(
                    sha=commit.short_sha,
                    message=truncate_message(commit.first_line, COMMIT_MESSAGE_WIDTH),
                    author=commit.author_name,
                )
                for commit in commits
            ]
        return activity

    def get_user_activity(
        self, username: str, event_filter: EventFilter
    ) -> list[ActivitySummary]:
        """Return summaries of the user's events that pass the filter."""
        _require_username(username)
        events = self._fetch(username)
        return [self.summarize(event) for event in _select(events, event_filter)]

    def get_user_activity_detailed(
        self, username: str, event_filter: EventFilter
    ) -> list[DetailedActivity]:
        """Return detailed views of the user's events that pass the filter."""
        _require_username(username)
        events = self._fetch(username)
        return [self.detail(event) for event in _select(events, event_filter)]

    def event_type_statistics(self, username: str) -> dict[str, int]:
        """Count the user's events by type."""
        return dict(Counter(event.type for event in self._fetch(username)))

    def recent_repositories(self, username: str, limit: int) -> list[str]:
        """Return the distinct repositories of the user's events, in feed order."""
        names = list(dict.fromkeys(event.repo.name for event in self._fetch(username)))
        return names[:limit] if limit > 0 else names