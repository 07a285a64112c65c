from datetime import datetime, timezone

import pytest

from ghactivity.application import (
    ActivityError,
    ActivityOptions,
    ActivityService,
    default_activity_options,
)
from ghactivity.domain import Actor, EventFilter, GitHubEvent, Repo
from ghactivity.repository import RepositoryError, StaticEventRepository


def _event(event_id="", event_type="", repo_name="", **kwargs):
    return GitHubEvent(id=event_id, type=event_type, repo=Repo(name=repo_name), **kwargs)


TWO_EVENTS = [
    _event("1", "PushEvent", "user/repo1"),
    _event("2", "IssuesEvent", "user/repo2"),
]


@pytest.mark.parametrize(
    "event_filter, events, expected",
    [
        (EventFilter(), TWO_EVENTS, 2),
        (
            EventFilter(type="PushEvent"),
            [
                _event("1", "PushEvent", "user/repo1"),
                _event("2", "IssuesEvent", "user/repo2"),
                _event("3", "PushEvent", "user/repo3"),
            ],
            2,
        ),
        (EventFilter(max_limit=1), TWO_EVENTS, 1),
    ],
)
def test_get_user_activity_counts(event_filter, events, expected):
    service = ActivityService(StaticEventRepository(events))
    activities = service.get_user_activity("testuser", event_filter)
    assert len(activities) == expected


def test_get_user_activity_empty_username():
    service = ActivityService(StaticEventRepository())
    with pytest.raises(ActivityError, match="username cannot be empty"):
        service.get_user_activity("", EventFilter())


def test_get_user_activity_repository_error():
    service = ActivityService(StaticEventRepository(error=RuntimeError("API error")))
    with pytest.raises(ActivityError) as info:
        service.get_user_activity("testuser", EventFilter())
    assert str(info.value) == "failed to fetch events: API error"
    assert isinstance(info.value.__cause__, RuntimeError)


def test_whitespace_username_rejected_before_fetch():
    service = ActivityService(None)
    with pytest.raises(ActivityError, match="username cannot be empty"):
        service.get_user_activity("   ", EventFilter())


def test_repository_error_text_is_carried():
    error = RepositoryError("USER_NOT_FOUND", "User not found")
    service = ActivityService(StaticEventRepository(error=error))
    with pytest.raises(ActivityError) as info:
        service.get_user_activity_detailed("ghost", EventFilter())
    assert str(info.value) == "failed to fetch events: USER_NOT_FOUND: User not found"


def test_get_user_activity_detailed_push_event():
    push = GitHubEvent(
        id="1",
        type="PushEvent",
        repo=Repo(name="user/repo"),
        actor=Actor(login="testuser"),
        created_at=datetime.now(timezone.utc),
        payload="""{
            "size": 2,
            "commits": [
                {"sha": "abc123", "message": "First commit", "author": {"name": "John"}},
                {"sha": "def456", "message": "Second commit with a very long message that should be truncated", "author": {"name": "Jane"}}
            ],
            "ref": "refs/heads/main"
        }""",
    )
    service = ActivityService(StaticEventRepository([push]))

    activities = service.get_user_activity_detailed("testuser", EventFilter())

    assert len(activities) == 1
    activity = activities[0]
    assert activity.event_id == "1"
    assert activity.actor_login == "testuser"
    assert activity.commit_count == 2
    assert len(activity.commits) == 2
    assert activity.commits[0].sha == "abc123"
    assert activity.commits[0].author == "John"
    assert activity.commits[1].author == "Jane"
    assert len(activity.commits[1].message) <= 60
    assert activity.commits[1].message.endswith("...")
    assert activity.description == "Pushed 2 commits to user/repo (branch: main)"


def test_detailed_activity_without_payload_has_no_commits():
    event = _event("1", "PushEvent", "user/repo", actor=Actor(login="testuser"))
    service = ActivityService(StaticEventRepository([event]))
    activities = service.get_user_activity_detailed("testuser", EventFilter())
    assert len(activities) == 1
    assert activities[0].commits == []
    assert activities[0].commit_count == 0


def test_detailed_activity_respects_filter_and_limit():
    events = [
        _event("1", "WatchEvent", "a/one"),
        _event("2", "PushEvent", "a/two"),
        _event("3", "WatchEvent", "a/three"),
        _event("4", "WatchEvent", "a/four"),
    ]
    service = ActivityService(StaticEventRepository(events))
    activities = service.get_user_activity_detailed(
        "testuser", EventFilter(type="watchevent", max_limit=2)
    )
    assert [activity.event_id for activity in activities] == ["1", "3"]


def test_event_type_statistics():
    events = [
        GitHubEvent(type="PushEvent"),
        GitHubEvent(type="PushEvent"),
        GitHubEvent(type="IssuesEvent"),
        GitHubEvent(type="PushEvent"),
        GitHubEvent(type="WatchEvent"),
        GitHubEvent(type="IssuesEvent"),
    ]
    service = ActivityService(StaticEventRepository(events))
    assert service.event_type_statistics("testuser") == {
        "PushEvent": 3,
        "IssuesEvent": 2,
        "WatchEvent": 1,
    }


def test_event_type_statistics_error():
    service = ActivityService(StaticEventRepository(error=RuntimeError("boom")))
    with pytest.raises(ActivityError, match="failed to fetch events: boom"):
        service.event_type_statistics("testuser")


REPO_EVENTS = [
    GitHubEvent(repo=Repo(name="user/repo1")),
    GitHubEvent(repo=Repo(name="user/repo2")),
    GitHubEvent(repo=Repo(name="user/repo1")),
    GitHubEvent(repo=Repo(name="user/repo3")),
    GitHubEvent(repo=Repo(name="user/repo2")),
    GitHubEvent(repo=Repo(name="user/repo4")),
]


def test_recent_repositories_no_limit():
    service = ActivityService(StaticEventRepository(REPO_EVENTS))
    assert service.recent_repositories("testuser", 0) == [
        "user/repo1",
        "user/repo2",
        "user/repo3",
        "user/repo4",
    ]


def test_recent_repositories_with_limit():
    service = ActivityService(StaticEventRepository(REPO_EVENTS))
    assert service.recent_repositories("testuser", 2) == ["user/repo1", "user/repo2"]


@pytest.mark.parametrize(
    "options",
    [
        ActivityOptions(event_type="PushEvent", limit=10),
        ActivityOptions(event_type="", limit=10),
        ActivityOptions(event_type="pushevent"),
    ],
)
def test_validate_accepts(options):
    assert options.validate() is None


@pytest.mark.parametrize(
    "options, message",
    [
        (ActivityOptions(limit=-1), "limit cannot be negative"),
        (ActivityOptions(event_type="InvalidEvent"), "invalid event type: InvalidEvent"),
    ],
)
def test_validate_rejects(options, message):
    with pytest.raises(ActivityError) as info:
        options.validate()
    assert str(info.value) == message


def test_default_activity_options():
    options = default_activity_options()
    assert options.event_type == ""
    assert options.limit == 30
    assert options.show_detailed is False


def test_summarize():
    event = GitHubEvent(
        id="123",
        type="PushEvent",
        repo=Repo(name="user/repo"),
        created_at=datetime(2024, 1, 15, 10, 30, 0, tzinfo=timezone.utc),
        payload={"size": 1, "ref": "refs/heads/main"},
    )
    summary = ActivityService(None).summarize(event)
    assert summary.type == "PushEvent"
    assert summary.repository == "user/repo"
    assert summary.timestamp == "2024-01-15 10:30:00"
    assert summary.description == "Pushed 1 commit to user/repo (branch: main)"


def test_summarize_zero_time():
    summary = ActivityService(None).summarize(GitHubEvent(type="WatchEvent"))
    assert summary.timestamp == "0001-01-01 00:00:00"