"""Event model for a user's public activity feed and the rules for describing it."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Mapping, TypeVar

T = TypeVar("T")

ZERO_TIME = datetime(1, 1, 1, tzinfo=timezone.utc)


class PayloadError(ValueError):
    """Raised when JSON data does not have the shape an event expects."""


class EventType(str, Enum):
    """Event types the activity feed knows how to describe."""

    PUSH = "PushEvent"
    CREATE = "CreateEvent"
    DELETE = "DeleteEvent"
    ISSUES = "IssuesEvent"
    PULL_REQUEST = "PullRequestEvent"
    WATCH = "WatchEvent"
    FORK = "ForkEvent"
    ISSUE_COMMENT = "IssueCommentEvent"
    PUBLIC = "PublicEvent"
    MEMBER = "MemberEvent"
    RELEASE = "ReleaseEvent"


_EVENT_TYPE_DESCRIPTIONS = {
    EventType.PUSH: "Git push",
    EventType.CREATE: "Branch or tag creation",
    EventType.DELETE: "Branch or tag deletion",
    EventType.ISSUES: "Issue opened, closed, etc.",
    EventType.PULL_REQUEST: "PR opened, closed, merged, etc.",
    EventType.WATCH: "Repository starred",
    EventType.FORK: "Repository forked",
    EventType.ISSUE_COMMENT: "Comment on issue or PR",
    EventType.PUBLIC: "Repository made public",
    EventType.MEMBER: "Member added to repository",
    EventType.RELEASE: "Release published",
}


def available_event_types() -> dict[EventType, str]:
    """Return every known event type with a short description."""
    return dict(_EVENT_TYPE_DESCRIPTIONS)


def _mapping(data: Any, what: str) -> Mapping[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, Mapping):
        raise PayloadError(f"{what}: expected a JSON object, got {type(data).__name__}")
    return data


def _field(data: Mapping[str, Any], key: str, kind: type, default: Any) -> Any:
    value = data.get(key)
    if value is None:
        return default
    if kind is int:
        valid = isinstance(value, int) and not isinstance(value, bool)
    else:
        valid = isinstance(value, kind)
    if not valid:
        raise PayloadError(
            f"field {key!r}: expected {kind.__name__}, got {type(value).__name__}"
        )
    return value


def _text(data: Mapping[str, Any], key: str) -> str:
    return _field(data, key, str, "")


def _number(data: Mapping[str, Any], key: str) -> int:
    return _field(data, key, int, 0)


def _object(data: Mapping[str, Any], key: str) -> Mapping[str, Any]:
    return _mapping(data.get(key), f"field {key!r}")


def _timestamp(data: Mapping[str, Any], key: str) -> datetime:
    value = _field(data, key, str, None)
    if value is None:
        return ZERO_TIME
    text = value[:-1] + "+00:00" if value.endswith(("Z", "z")) else value
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise PayloadError(f"field {key!r}: invalid timestamp {value!r}") from exc
    if parsed.tzinfo is None:
        raise PayloadError(f"field {key!r}: timestamp {value!r} has no time zone")
    return parsed


def title_case(text: str) -> str:
    """Upper-case the first character and lower-case the rest."""
    return text[:1].upper() + text[1:].lower()


def truncate_message(message: str, max_length: int) -> str:
    """Shorten ``message`` to ``max_length`` characters, ending it with an ellipsis."""
    if len(message) <= max_length:
        return message
    if max_length < 3:
        raise ValueError("max_length must be at least 3 to fit the ellipsis")
    return message[: max_length - 3] + "..."


@dataclass
class Actor:
    """The user who performed an action."""

    id: int = 0
    login: str = ""
    display_login: str = ""
    gravatar_id: str = ""
    url: str = ""
    avatar_url: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Actor:
        data = _mapping(data, "actor")
        return cls(
            id=_number(data, "id"),
            login=_text(data, "login"),
            display_login=_text(data, "display_login"),
            gravatar_id=_text(data, "gravatar_id"),
            url=_text(data, "url"),
            avatar_url=_text(data, "avatar_url"),
        )


@dataclass
class Repo:
    """The repository an event happened in."""

    id: int = 0
    name: str = ""
    url: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Repo:
        data = _mapping(data, "repo")
        return cls(id=_number(data, "id"), name=_text(data, "name"), url=_text(data, "url"))


@dataclass
class Commit:
    """A git commit carried by a push event."""

    sha: str = ""
    message: str = ""
    author_name: str = ""
    author_email: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> Commit:
        data = _mapping(data, "commit")
        author = _object(data, "author")
        return cls(
            sha=_text(data, "sha"),
            message=_text(data, "message"),
            author_name=_text(author, "name"),
            author_email=_text(author, "email"),
        )

    @property
    def short_sha(self) -> str:
        """The first seven characters of the SHA."""
        return self.sha[:7]

    @property
    def first_line(self) -> str:
        """The first line of the commit message."""
        return self.message.split("\n", 1)[0]


@dataclass
class PushPayload:
    """Payload of a push event."""

    size: int = 0
    commits: list[Commit] = field(default_factory=list)
    ref: str = ""

    @classmethod
    def from_dict(cls, data: Any) -> PushPayload:
        data = _mapping(data, "push payload")
        raw_commits = _field(data, "commits", list, [])
        return cls(
            size=_number(data, "size"),
            commits=[Commit.from_dict(item) for item in raw_commits],
            ref=_text(data, "ref"),
        )

    @property
    def branch(self) -> str:
        """The branch name, without the ``refs/heads/`` prefix."""
        return self.ref.removeprefix("refs/heads/")


@dataclass
class _RefPayload:
    ref: str
    ref_type: str
    description: str

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> _RefPayload:
        return cls(_text(data, "ref"), _text(data, "ref_type"), _text(data, "description"))


@dataclass
class _NumberedPayload:
    action: str
    number: int
    title: str
    state: str

    @classmethod
    def parser(cls, key: str) -> Callable[[Mapping[str, Any]], _NumberedPayload]:
        def parse(data: Mapping[str, Any]) -> _NumberedPayload:
            item = _object(data, key)
            return cls(
                _text(data, "action"),
                _number(item, "number"),
                _text(item, "title"),
                _text(item, "state"),
            )

        return parse


def _fork_target(data: Mapping[str, Any]) -> str:
    return _text(_object(data, "forkee"), "full_name")


def _release_tag(data: Mapping[str, Any]) -> str:
    _text(data, "action")
    release = _object(data, "release")
    _text(release, "name")
    return _text(release, "tag_name")


def _parse(parser: Callable[[Mapping[str, Any]], T], payload: Mapping[str, Any] | None) -> T | None:
    if payload is None:
        return None
    try:
        return parser(payload)
    except PayloadError:
        return None


@dataclass
class GitHubEvent:
    """One entry of a user's public event feed.

    ``payload`` holds the decoded JSON payload, raw JSON text, or ``None``
    when the event carries no payload at all.
    """

    id: str = ""
    type: str = ""
    actor: Actor = field(default_factory=Actor)
    repo: Repo = field(default_factory=Repo)
    payload: Any = None
    public: bool = False
    created_at: datetime = ZERO_TIME

    @classmethod
    def from_dict(cls, data: Any) -> GitHubEvent:
        data = _mapping(data, "event")
        payload = data["payload"] if "payload" in data else None
        if "payload" in data and payload is None:
            payload = {}
        return cls(
            id=_text(data, "id"),
            type=_text(data, "type"),
            actor=Actor.from_dict(data.get("actor")),
            repo=Repo.from_dict(data.get("repo")),
            payload=payload,
            public=_field(data, "public", bool, False),
            created_at=_timestamp(data, "created_at"),
        )

    def _payload_object(self) -> Mapping[str, Any]:
        payload = self.payload
        if payload is None:
            raise PayloadError("event has no payload")
        if isinstance(payload, (str, bytes, bytearray)):
            try:
                payload = json.loads(payload)
            except ValueError as exc:
                raise PayloadError(f"payload is not valid JSON: {exc}") from exc
        return _mapping(payload, "payload")

    def _safe_payload(self) -> Mapping[str, Any] | None:
        try:
            return self._payload_object()
        except PayloadError:
            return None

    def describe(self) -> str:
        """Return a one-line human-readable description of the event."""
        repo_name = self.repo.name
        fallback = f"{self.type} in {repo_name}"
        try:
            kind = EventType(self.type)
        except ValueError:
            return fallback
        payload = self._safe_payload()

        if kind is EventType.PUSH:
            push = _parse(PushPayload.from_dict, payload)
            if push is not None:
                if push.size == 1:
                    return f"Pushed 1 commit to {repo_name} (branch: {push.branch})"
                return f"Pushed {push.size} commits to {repo_name} (branch: {push.branch})"
        elif kind in (EventType.CREATE, EventType.DELETE):
            ref = _parse(_RefPayload.from_dict, payload)
            if ref is not None:
                verb = "Created" if kind is EventType.CREATE else "Deleted"
                return f"{verb} {ref.ref_type} '{ref.ref}' in {repo_name}"
        elif kind is EventType.ISSUES:
            issue = _parse(_NumberedPayload.parser("issue"), payload)
            if issue is not None:
                return (
                    f"{title_case(issue.action)} issue #{issue.number} "
                    f"in {repo_name}: {issue.title}"
                )
        elif kind is EventType.PULL_REQUEST:
            pull = _parse(_NumberedPayload.parser("pull_request"), payload)
            if pull is not None:
                return (
                    f"{title_case(pull.action)} pull request #{pull.number} "
                    f"in {repo_name}: {pull.title}"
                )
        elif kind is EventType.WATCH:
            return f"Starred {repo_name}"
        elif kind is EventType.FORK:
            target = _parse(_fork_target, payload)
            if target:
                return f"Forked {repo_name} to {target}"
            return f"Forked {repo_name}"
        elif kind is EventType.ISSUE_COMMENT:
            issue = _parse(_NumberedPayload.parser("issue"), payload)
            if issue is not None:
                return f"Commented on issue #{issue.number} in {repo_name}"
            return f"Commented on an issue in {repo_name}"
        elif kind is EventType.PUBLIC:
            return f"Made {repo_name} public"
        elif kind is EventType.MEMBER:
            return f"Added a member to {repo_name}"
        elif kind is EventType.RELEASE:
            tag = _parse(_release_tag, payload)
            if tag is not None:
                return f"Released {tag} in {repo_name}"
            return f"Created a release in {repo_name}"

        return fallback

    def commit_details(self) -> list[Commit]:
        """Return the commits of a push event.

        Raises ValueError for other event types and PayloadError when the
        payload cannot be read.
        """
        if self.type != EventType.PUSH.value:
            raise ValueError("event is not a PushEvent")
        try:
            return PushPayload.from_dict(self._payload_object()).commits
        except PayloadError as exc:
            raise PayloadError(f"failed to parse push payload: {exc}") from exc


@dataclass
class EventFilter:
    """Criteria for selecting events: a type (case-insensitive) and a maximum count."""

    type: str = ""
    max_limit: int = 0

    def matches(self, event: GitHubEvent) -> bool:
        return not self.type or event.type.casefold() == self.type.casefold()