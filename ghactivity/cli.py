"""Command-line interface for listing a user's recent public activity."""

from __future__ import annotations

import re
import sys
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Sequence, TextIO

from .application import (
    DEFAULT_LIMIT,
    ActivityError,
    ActivityOptions,
    ActivityService,
    ActivitySummary,
    DetailedActivity,
)
from .domain import EventFilter, available_event_types
from .repository import GitHubAPIRepository

PROGRAM_NAME = "github-activity"

USAGE = """\
GitHub Activity CLI

Usage:
  github-activity [flags] <username>

Flags:
  -type string
        Filter by event type (e.g., PushEvent, IssuesEvent)
  -limit int
        Limit the number of events displayed (default 30)
  -detailed
        Show detailed information for each event
  -list-types
        List all available event types

Examples:
  github-activity kamranahmedse
  github-activity -type=PushEvent -limit=5 torvalds
  github-activity -detailed octocat
  github-activity -list-types"""

_BOOL_FLAGS = {"detailed": "detailed", "list-types": "list_types"}
_VALUE_FLAGS = {"type", "limit"}
_TRUE_WORDS = {"1", "t", "T", "TRUE", "true", "True"}
_FALSE_WORDS = {"0", "f", "F", "FALSE", "false", "False"}
_LEGACY_OCTAL = re.compile(r"0[0-7_]+")


class _FlagError(Exception):
    pass


class _HelpRequested(Exception):
    pass


def _parse_int(text: str) -> int:
    sign = 1
    body = text
    if body[:1] in ("+", "-") and body:
        sign = -1 if body[0] == "-" else 1
        body = body[1:]
    if not body.isascii() or not body[:1].isdigit() or body != body.strip():
        raise ValueError(text)
    if _LEGACY_OCTAL.fullmatch(body):
        return sign * int(body.replace("_", ""), 8)
    return sign * int(body, 0)


def _parse_bool(text: str) -> bool:
    if text in _TRUE_WORDS:
        return True
    if text in _FALSE_WORDS:
        return False
    raise ValueError(text)


@dataclass
class CLIFlags:
    """Parsed command-line flags and the arguments that follow them."""

    event_type: str = ""
    limit: int = DEFAULT_LIMIT
    detailed: bool = False
    list_types: bool = False
    args: list[str] = field(default_factory=list)


class OutputFormatter(ABC):
    """Writes activity views to a text stream."""

    @abstractmethod
    def format_activities(self, stream: TextIO, activities: list[ActivitySummary]) -> None:
        """Write activity summaries."""

    @abstractmethod
    def format_detailed_activities(
        self, stream: TextIO, activities: list[DetailedActivity]
    ) -> None:
        """Write detailed activities."""


class ConsoleOutputFormatter(OutputFormatter):
    """Plain bulleted text for a terminal."""

    def format_activities(self, stream: TextIO, activities: list[ActivitySummary]) -> None:
        for activity in activities:
            stream.write(f"- {activity.description}\n")

    def format_detailed_activities(
        self, stream: TextIO, activities: list[DetailedActivity]
    ) -> None:
        for activity in activities:
            stream.write(f"- {activity.description}\n")
            stream.write(f"  Time: {activity.timestamp}\n")
            stream.write(f"  Type: {activity.type}\n")
            if activity.commits:
                stream.write("  Commits:\n")
                for commit in activity.commits:
                    stream.write(f"    - {commit.sha}: {commit.message}\n")
            for key, value in activity.extra_details.items():
                stream.write(f"  {key[:1].upper()}{key[1:]}: {value}\n")
            stream.write("\n")


class CLI:
    """Parses arguments, runs the query and prints the result."""

    def __init__(
        self,
        service: ActivityService | None,
        output: OutputFormatter | None = None,
        stdout: TextIO | None = None,
        stderr: TextIO | None = None,
    ):
        self.service = service
        self.output = output if output is not None else ConsoleOutputFormatter()
        self._stdout = stdout
        self._stderr = stderr

    @property
    def stdout(self) -> TextIO:
        return self._stdout if self._stdout is not None else sys.stdout

    @property
    def stderr(self) -> TextIO:
        return self._stderr if self._stderr is not None else sys.stderr

    def _say(self, text: str = "") -> None:
        print(text, file=self.stdout)

    def _error(self, exc: Exception) -> int:
        print(f"Error: {exc}", file=self.stderr)
        return 1

    def parse_flags(self, argv: Sequence[str]) -> CLIFlags:
        """Parse ``argv`` (program name first); flags stop at the first plain argument.

        On a flag error the message and usage are printed and the flags come
        back without arguments.
        """
        flags = CLIFlags()
        remaining = list(argv[1:])
        try:
            while remaining:
                arg = remaining[0]
                if len(arg) < 2 or arg[0] != "-":
                    break
                remaining.pop(0)
                if arg == "--":
                    break
                name = arg[2:] if arg.startswith("--") else arg[1:]
                if not name or name[0] in "-=":
                    raise _FlagError(f"bad flag syntax: {arg}")
                name, separator, value = name.partition("=")
                self._apply_flag(flags, name, value if separator else None, remaining)
        except _HelpRequested:
            self.print_usage()
            return flags
        except _FlagError as exc:
            print(exc, file=self.stderr)
            self.print_usage()
            return flags
        flags.args = remaining
        return flags

    @staticmethod
    def _apply_flag(
        flags: CLIFlags, name: str, value: str | None, remaining: list[str]
    ) -> None:
        if name in _BOOL_FLAGS:
            if value is None:
                setattr(flags, _BOOL_FLAGS[name], True)
                return
            try:
                setattr(flags, _BOOL_FLAGS[name], _parse_bool(value))
            except ValueError:
                raise _FlagError(
                    f'invalid boolean value "{value}" for -{name}: parse error'
                ) from None
            return
        if name not in _VALUE_FLAGS:
            if name in ("help", "h"):
                raise _HelpRequested
            raise _FlagError(f"flag provided but not defined: -{name}")
        if value is None:
            if not remaining:
                raise _FlagError(f"flag needs an argument: -{name}")
            value = remaining.pop(0)
        if name == "type":
            flags.event_type = value
        else:
            try:
                flags.limit = _parse_int(value)
            except ValueError:
                raise _FlagError(
                    f'invalid value "{value}" for flag -{name}: parse error'
                ) from None

    def run(self, argv: Sequence[str]) -> int:
        """Run the command and return its exit status."""
        flags = self.parse_flags(argv)

        if flags.list_types:
            self.list_event_types()
            return 0

        if not flags.args:
            self.print_usage()
            return 1

        username = flags.args[0]
        event_filter = EventFilter(type=flags.event_type, max_limit=flags.limit)
        options = ActivityOptions(
            event_type=flags.event_type, limit=flags.limit, show_detailed=flags.detailed
        )
        try:
            options.validate()
        except ActivityError as exc:
            return self._error(exc)

        self._say(f"Fetching GitHub activity for user: {username}\n")

        if flags.detailed:
            return self.display_detailed_activities(username, event_filter)
        return self.display_activities(username, event_filter)

    def _report_empty(self, event_filter: EventFilter) -> None:
        if event_filter.type:
            self._say(f"No '{event_filter.type}' events found.")
        else:
            self._say("No recent activity found.")

    def _require_service(self) -> ActivityService:
        if self.service is None:
            raise ActivityError("no activity service configured")
        return self.service

    def display_activities(self, username: str, event_filter: EventFilter) -> int:
        """Print activity summaries and return the exit status."""
        try:
            activities = self._require_service().get_user_activity(username, event_filter)
        except ActivityError as exc:
            return self._error(exc)
        if not activities:
            self._report_empty(event_filter)
            return 0
        self.output.format_activities(self.stdout, activities)
        return 0

    def display_detailed_activities(self, username: str, event_filter: EventFilter) -> int:
        """Print detailed activities and return the exit status."""
        try:
            activities = self._require_service().get_user_activity_detailed(
                username, event_filter
            )
        except ActivityError as exc:
            return self._error(exc)
        if not activities:
            self._report_empty(event_filter)
            return 0
        self.output.format_detailed_activities(self.stdout, activities)
        return 0

    def list_event_types(self) -> None:
        """Print every known event type with its description."""
        event_types = available_event_types()
        self._say("Available event types:")
        width = max(len(kind.value) for kind in event_types) + 2
        for kind, description in event_types.items():
            self._say(f"  {kind.value:<{width}} - {description}")

    def print_usage(self) -> None:
        """Print the usage text."""
        self._say(USAGE)


def main(argv: Sequence[str] | None = None) -> int:
    """Entry point: ``argv`` holds the arguments after the program name."""
    args = sys.argv[1:] if argv is None else list(argv)
    service = ActivityService(GitHubAPIRepository())
    return CLI(service).run([PROGRAM_NAME, *args])


if __name__ == "__main__":
    sys.exit(main())