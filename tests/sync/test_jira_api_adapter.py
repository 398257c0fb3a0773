"""Tests for the JiraIssueAPI adapter.

The JiraClient is mocked and ``asyncio.sleep`` is patched, so retry
backoff and inter-page delays are asserted without waiting.
"""

from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock, call, patch

import pytest

from issuesync.api.client import JiraClient
from issuesync.api.exceptions import (
    AuthenticationError,
    ConnectionError,
    RateLimitError,
    ServerError,
    ValidationError,
)
from issuesync.api.resilience import RetryConfig
from issuesync.config import PaginationConfig
from issuesync.sync.adapters.field_mapper import IssueFieldMapper
from issuesync.sync.adapters.jira_api_adapter import JiraIssueAPI
from issuesync.sync.domain.entities import IssueId, ProjectKey
from issuesync.sync.domain.errors import TransportFailure
from issuesync.sync.domain.result import Err, Ok

SINCE = datetime(2024, 1, 15, 9, 30, tzinfo=timezone.utc)
KEYS = [ProjectKey("ABC"), ProjectKey("XYZ")]


def raw_issue(issue_id: int, type_name: str = "Task") -> dict:
    return {
        "id": str(issue_id),
        "key": f"ABC-{issue_id}",
        "fields": {
            "project": {"id": "10000"},
            "summary": f"Issue {issue_id}",
            "description": None,
            "issuetype": {"name": type_name},
            "priority": {"name": "Medium"},
            "created": "2024-02-01T10:00:00.000+0000",
            "updated": "2024-02-01T10:00:00.000+0000",
        },
    }


def search_page(ids: list[int], token: str | None = None, is_last: bool = True) -> dict:
    page = {"issues": [raw_issue(i) for i in ids], "isLast": is_last}
    if token:
        page["nextPageToken"] = token
    return page


async def collect(stream) -> list:
    return [item async for item in stream]


@pytest.fixture
def client():
    mock = MagicMock(spec=JiraClient)
    mock.search_issues = AsyncMock()
    return mock


@pytest.fixture
def mock_sleep():
    with patch("asyncio.sleep", new_callable=AsyncMock) as sleep:
        yield sleep


class TestBuildRequest:
    """Tests for the JQL and request body."""

    def test_build_jql(self):
        jql = JiraIssueAPI.build_jql(KEYS, SINCE)

        assert jql == "project in (ABC, XYZ) AND created >= '2024-01-15'"

    def test_first_request_has_no_token(self, client):
        body = JiraIssueAPI(client)._build_request(KEYS, SINCE, None)

        assert body["maxResults"] == 100
        assert "nextPageToken" not in body
        assert "summary" in body["fields"]

    def test_continuation_request_carries_token(self, client):
        body = JiraIssueAPI(client)._build_request(KEYS, SINCE, "tok-2")

        assert body["nextPageToken"] == "tok-2"


class TestFetchPage:
    """Tests for a single page request with retry."""

    async def test_maps_issues_and_token(self, client, mock_sleep):
        client.search_issues.return_value = search_page([1, 2], token="t1", is_last=False)

        result = await JiraIssueAPI(client).fetch_page(KEYS, SINCE)

        page = result.value
        assert [issue.id for issue in page.issues] == [IssueId(1), IssueId(2)]
        assert page.next_page_token == "t1"
        assert page.is_last is False

    async def test_unmappable_issues_are_dropped(self, client, mock_sleep):
        client.search_issues.return_value = {
            "issues": [raw_issue(1), raw_issue(2, type_name="Improvement")],
            "isLast": True,
        }

        result = await JiraIssueAPI(client).fetch_page(KEYS, SINCE)

        assert [issue.id for issue in result.value.issues] == [IssueId(1)]

    async def test_backoff_schedule(self, client, mock_sleep):
        """Two transient failures then success: waits 0.5s then 1.0s."""
        client.search_issues.side_effect = [
            ServerError("Server error (503)", status_code=503),
            ConnectionError("Failed to connect", host="jira"),
            search_page([1]),
        ]

        result = await JiraIssueAPI(client).fetch_page(KEYS, SINCE)

        assert isinstance(result, Ok)
        assert client.search_issues.await_count == 3
        assert mock_sleep.await_args_list == [call(0.5), call(1.0)]

    async def test_gives_up_after_three_attempts(self, client, mock_sleep):
        last = RateLimitError("Rate limit exceeded")
        client.search_issues.side_effect = [
            ServerError("Server error (502)", status_code=502),
            ServerError("Server error (502)", status_code=502),
            last,
        ]

        result = await JiraIssueAPI(client).fetch_page(KEYS, SINCE)

        assert isinstance(result, Err)
        assert isinstance(result.error, TransportFailure)
        assert result.error.cause is last
        assert client.search_issues.await_count == 3
        assert mock_sleep.await_args_list == [call(0.5), call(1.0)]

    @pytest.mark.parametrize("error", [
        AuthenticationError(status_code=401),
        ValidationError("Validation failed", status_code=400),
    ])
    async def test_client_errors_are_not_retried(self, client, mock_sleep, error):
        client.search_issues.side_effect = error

        result = await JiraIssueAPI(client).fetch_page(KEYS, SINCE)

        assert result.error.cause is error
        assert client.search_issues.await_count == 1
        mock_sleep.assert_not_awaited()

    async def test_malformed_response(self, client, mock_sleep):
        client.search_issues.return_value = {"issues": "nope"}

        result = await JiraIssueAPI(client).fetch_page(KEYS, SINCE)

        assert isinstance(result.error, TransportFailure)
        assert client.search_issues.await_count == 1

    async def test_malformed_entries_are_dropped(self, client, mock_sleep):
        bad_type = raw_issue(3)
        bad_type["fields"]["issuetype"] = "Bug"
        client.search_issues.return_value = {
            "issues": [None, raw_issue(1), "ABC-2", bad_type, {"id": "4", "fields": "x"}],
            "isLast": True,
        }

        result = await JiraIssueAPI(client).fetch_page(KEYS, SINCE)

        assert isinstance(result, Ok)
        assert [issue.id for issue in result.value.issues] == [IssueId(1)]

    async def test_mapper_exception_becomes_transport_failure(self, client, mock_sleep):
        client.search_issues.return_value = search_page([1])
        mapper = MagicMock(spec=IssueFieldMapper)
        mapper.map_to_entity.side_effect = AttributeError("'str' object has no attribute 'get'")

        result = await JiraIssueAPI(client, field_mapper=mapper).fetch_page(KEYS, SINCE)

        assert isinstance(result, Err)
        assert isinstance(result.error, TransportFailure)
        assert isinstance(result.error.cause, AttributeError)
        assert client.search_issues.await_count == 1

    async def test_custom_retry_config(self, client, mock_sleep):
        client.search_issues.side_effect = ServerError(status_code=500)
        api = JiraIssueAPI(client, retry_config=RetryConfig(max_attempts=1))

        result = await api.fetch_page(KEYS, SINCE)

        assert isinstance(result, Err)
        assert client.search_issues.await_count == 1


class TestFetchIssues:
    """Tests for the paginated stream."""

    async def test_follows_tokens_until_last_page(self, client, mock_sleep):
        client.search_issues.side_effect = [
            search_page([1, 2], token="t1", is_last=False),
            search_page([3], token="t2", is_last=False),
            search_page([4], is_last=True),
        ]

        pages = await collect(JiraIssueAPI(client).fetch_issues(KEYS, SINCE))

        assert [[i.id.value for i in p.value] for p in pages] == [[1, 2], [3], [4]]
        bodies = [c.args[0] for c in client.search_issues.await_args_list]
        assert [b.get("nextPageToken") for b in bodies] == [None, "t1", "t2"]

    async def test_waits_between_pages(self, client, mock_sleep):
        client.search_issues.side_effect = [
            search_page([1], token="t1", is_last=False),
            search_page([2], is_last=True),
        ]

        await collect(JiraIssueAPI(client).fetch_issues(KEYS, SINCE))

        assert mock_sleep.await_args_list == [call(1.0)]

    async def test_empty_project_keys_makes_no_request(self, client, mock_sleep):
        """No project keys: nothing to fetch, no remote call."""
        pages = await collect(JiraIssueAPI(client).fetch_issues([], SINCE))

        assert pages == []
        client.search_issues.assert_not_awaited()

    async def test_stops_after_failure(self, client, mock_sleep):
        client.search_issues.side_effect = [
            search_page([1], token="t1", is_last=False),
            AuthenticationError(status_code=401),
            search_page([2], is_last=True),
        ]

        pages = await collect(JiraIssueAPI(client).fetch_issues(KEYS, SINCE))

        assert isinstance(pages[0], Ok)
        assert isinstance(pages[1], Err)
        assert len(pages) == 2
        assert client.search_issues.await_count == 2

    async def test_missing_token_ends_stream(self, client, mock_sleep):
        client.search_issues.return_value = search_page([1], token=None, is_last=False)

        pages = await collect(JiraIssueAPI(client).fetch_issues(KEYS, SINCE))

        assert len(pages) == 1
        assert client.search_issues.await_count == 1

    async def test_max_pages_limit(self, client, mock_sleep):
        client.search_issues.return_value = search_page([1], token="again", is_last=False)
        api = JiraIssueAPI(client, pagination_config=PaginationConfig(max_pages=2))

        pages = await collect(api.fetch_issues(KEYS, SINCE))

        assert len(pages) == 2

    async def test_empty_page_still_yielded(self, client, mock_sleep):
        client.search_issues.return_value = search_page([], is_last=True)

        pages = await collect(JiraIssueAPI(client).fetch_issues(KEYS, SINCE))

        assert pages == [Ok([])]

    async def test_closing_stream_stops_fetching(self, client, mock_sleep):
        client.search_issues.side_effect = [
            search_page([1], token="t1", is_last=False),
            search_page([2], token="t2", is_last=False),
            search_page([3], is_last=True),
        ]
        stream = JiraIssueAPI(client).fetch_issues(KEYS, SINCE)

        first = await stream.__anext__()
        await stream.aclose()

        assert [issue.id for issue in first.value] == [IssueId(1)]
        assert client.search_issues.await_count == 1
        mock_sleep.assert_not_awaited()
        with pytest.raises(StopAsyncIteration):
            await stream.__anext__()
