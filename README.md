# ghactivity

A small command-line tool that fetches a GitHub user's recent public events
and prints them as readable one-line summaries.

## Installation

```
pip install .
```

No third-party libraries are needed at runtime.

## Usage

```
github-activity [flags] <username>
```

The same command can be started with `python -m ghactivity.cli`.

Flags (written with one or two dashes, as `-flag value` or `-flag=value`):

- `-type string`: show only events of this type, for example `PushEvent` or
  `IssuesEvent` (case-insensitive; unknown types are rejected)
- `-limit int`: show at most this many events (default 30, `0` means no
  limit, negative values are rejected)
- `-detailed`: for each event, also show the time, the type and, for pushes,
  the commits (short SHA and first line of the message, cut to 60 characters)
- `-list-types`: list the event types that can be filtered on
- `-h`, `-help`: print the usage text

Flags must come before the username; parsing stops at the first plain
argument or at `--`.

Examples:

```
github-activity kamranahmedse
github-activity -type=PushEvent -limit=5 torvalds
github-activity -detailed octocat
github-activity -list-types
```

Sample output:

```
Fetching GitHub activity for user: octocat

- Pushed 3 commits to octocat/hello-world (branch: main)
- Opened issue #42 in octocat/hello-world: Bug: Something is broken
- Starred facebook/react
```

When nothing matches, the command prints `No recent activity found.` (or
`No '<type>' events found.` when filtering by type) and exits with status 0.
A missing user, a rate limit, a network failure, an invalid option or any
other API failure is reported on standard error as `Error: ...`, and the
command exits with status 1. Running it without a username prints the usage
text and exits with status 1.

Requests time out after ten seconds. The events of the most recently
requested user are kept in memory for five minutes, so repeated queries for
that user within one process do not call the API again.

## Using it as a library

```python
from ghactivity.repository import GitHubAPIRepository
from ghactivity.application import ActivityService
from ghactivity.domain import EventFilter

service = ActivityService(GitHubAPIRepository())
for activity in service.get_user_activity("octocat", EventFilter(type="PushEvent", max_limit=5)):
    print(activity.timestamp, activity.description)
```

- `ghactivity.domain` holds the event model: `GitHubEvent` (with
  `from_dict`, `describe()` and `commit_details()`), `Actor`, `Repo`,
  `Commit`, `PushPayload`, `EventFilter`, the `EventType` enumeration,
  `available_event_types()`, `truncate_message()` and `title_case()`.
- `ghactivity.repository` holds `EventRepository`, `GitHubAPIRepository`,
  `StaticEventRepository` (events already in memory, or a fixed error),
  `EventCache` and `RepositoryError`.
- `ghactivity.application` holds `ActivityService`, which besides
  `get_user_activity` offers `get_user_activity_detailed`,
  `event_type_statistics(username)` and `recent_repositories(username, limit)`,
  along with `ActivityOptions`, `default_activity_options()` and
  `ActivityError`.
- `ghactivity.cli` holds `CLI`, `ConsoleOutputFormatter` and `main`.

## What it does not do

- It sends no access token, so GitHub's limits for unauthenticated requests
  apply.
- It reads only the first page of events that the API returns; it does not
  page through older events.
- The cache lives in memory only and is lost when the process ends.

## Running the tests

```
pip install .[test]
pytest
```