"""Jira API adapter for fetching issues page by page.

This adapter implements IIssueAPI on top of JiraClient:
- ``fetch_page`` issues one search request, retried with exponential
  backoff, and maps the response to domain entities
- ``fetch_issues`` drives ``fetch_page`` across pages using the search's
  continuation token, pausing between requests
"""

import asyncio
import logging
from collections.abc import AsyncIterator
from datetime import datetime
from typing import TYPE_CHECKING, Any

from ...api.resilience import RetryConfig, retry_async
from ...config import PaginationConfig
from ..domain.entities import FetchedPage, JiraIssue, ProjectKey
from ..domain.errors import TransportFailure
from ..domain.ports import IIssueAPI
from ..domain.result import Err, Ok, Result
from .field_mapper import ISSUE_FIELDS, IssueFieldMapper

if TYPE_CHECKING:
    from ...api.client import JiraClient

logger = logging.getLogger(__name__)


class JiraIssueAPI(IIssueAPI):
    """Jira Cloud adapter for issue search.

    Paging uses ``PaginationConfig`` (100 issues per page, 1s between pages
    by default) and each page request uses ``RetryConfig`` (3 attempts,
    0.5s initial backoff doubling each retry by default).
    """

    def __init__(
        self,
        client: "JiraClient",
        field_mapper: IssueFieldMapper | None = None,
        pagination_config: PaginationConfig | None = None,
        retry_config: RetryConfig | None = None,
    ):
        """Initialize the API adapter.

        Args:
            client: Configured JiraClient instance (inside its context)
            field_mapper: Maps raw search results to entities
            pagination_config: Page size, inter-page delay and page limit
            retry_config: Retry policy for a single page request
        """
        self.client = client
        self.mapper = field_mapper or IssueFieldMapper()
        self.pagination_config = pagination_config or PaginationConfig()
        self.retry_config = retry_config or RetryConfig()

    @staticmethod
    def build_jql(project_keys: list[ProjectKey], since: datetime) -> str:
        """Build the search query for ``project_keys`` created since ``since``."""
        keys = ", ".join(key.value for key in project_keys)
        return f"project in ({keys}) AND created >= '{since.date().isoformat()}'"

    def _build_request(
        self,
        project_keys: list[ProjectKey],
        since: datetime,
        next_page_token: str | None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "jql": self.build_jql(project_keys, since),
            "fields": ISSUE_FIELDS,
            "maxResults": self.pagination_config.page_size,
        }
        if next_page_token:
            body["nextPageToken"] = next_page_token
        return body

    async def _search(self, body: dict[str, Any]) -> dict[str, Any]:
        data = await self.client.search_issues(body)
        if not isinstance(data, dict) or not isinstance(data.get("issues", []), list):
            raise ValueError("Search response has no 'issues' list")
        return data

    async def fetch_page(
        self,
        project_keys: list[ProjectKey],
        since: datetime,
        next_page_token: str | None = None,
    ) -> Result[FetchedPage, TransportFailure]:
        """Fetch and map one page of issues.

        Returns:
            Ok(FetchedPage), or Err(TransportFailure) with the last error as
            cause once retries are exhausted or a non-retryable error occurs
        """
        body = self._build_request(project_keys, since, next_page_token)

        try:
            data = await retry_async(self._search, body, config=self.retry_config)
        except Exception as e:
            return Err(
                TransportFailure(
                    f"Failed to fetch issues from Jira API: {e}",
                    cause=e,
                )
            )

        try:
            raw_issues = data.get("issues") or []
            issues = [
                issue
                for issue in (self.mapper.map_to_entity(raw) for raw in raw_issues)
                if issue is not None
            ]
            page = FetchedPage(
                issues=issues,
                next_page_token=data.get("nextPageToken"),
                is_last=bool(data.get("isLast", True)),
            )
        except Exception as e:
            return Err(TransportFailure(f"Malformed search response: {e}", cause=e))

        if len(issues) < len(raw_issues):
            logger.debug(f"Dropped {len(raw_issues) - len(issues)} unmappable issues")

        return Ok(page)

    async def fetch_issues(
        self,
        project_keys: list[ProjectKey],
        since: datetime,
    ) -> AsyncIterator[Result[list[JiraIssue], TransportFailure]]:
        """Stream issues page by page (memory efficient).

        An empty ``project_keys`` yields nothing and makes no request.

        Yields:
            Ok(list of issues) per page, or a single Err before stopping
        """
        if not project_keys:
            logger.info("No project keys, nothing to fetch")
            return

        config = self.pagination_config
        next_page_token: str | None = None
        pages_fetched = 0

        while True:
            result = await self.fetch_page(project_keys, since, next_page_token)
            if isinstance(result, Err):
                yield result
                return

            page = result.value
            pages_fetched += 1
            yield Ok(page.issues)

            if page.is_last:
                break
            if not page.next_page_token:
                logger.warning(
                    f"Page {pages_fetched} is not marked last but has no continuation token; stopping"
                )
                break
            if config.max_pages and pages_fetched >= config.max_pages:
                logger.info(f"Reached max_pages limit ({config.max_pages})")
                break

            next_page_token = page.next_page_token

            if config.delay_between_pages > 0:
                await asyncio.sleep(config.delay_between_pages)

        logger.info(f"Pagination complete: {pages_fetched} pages")
