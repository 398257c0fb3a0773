"""Port interfaces for sync and lookup operations.

Ports define the contracts between the use cases and the infrastructure.
Every port reports failure as an ``Err`` value; implementations must not
let infrastructure exceptions escape.

Following the Hexagonal Architecture (Ports and Adapters) pattern:
- Ports are interfaces defined in the domain layer
- Adapters implement these ports in the adapters layer
- Use cases depend only on ports, not concrete implementations
"""

from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from datetime import datetime
from typing import Any, TypeVar

from .entities import FetchedPage, IssueId, JiraIssue, Page, PageNumber, PageSize, ProjectKey
from .errors import StorageFailure, TransactionFailure, TransportFailure
from .result import Result

T = TypeVar("T")


class IProjectRepository(ABC):
    """Port for reading the partition keys (Jira projects) to sync."""

    @abstractmethod
    async def find_all_project_keys(self) -> Result[list[ProjectKey], StorageFailure]:
        """Return every stored project key."""
        ...


class IIssueRepository(ABC):
    """Port for issue persistence operations."""

    @abstractmethod
    async def find_by_ids(self, ids: list[IssueId]) -> Result[list[JiraIssue], StorageFailure]:
        """Fetch the stored issues among ``ids`` in one query.

        Missing ids are simply absent from the returned list. An empty
        ``ids`` returns ``Ok([])`` without touching storage.
        """
        ...

    @abstractmethod
    async def list_issues(
        self,
        page_number: PageNumber,
        page_size: PageSize,
    ) -> Result[Page[JiraIssue], StorageFailure]:
        """Return one page of issues, newest first, plus the total count."""
        ...

    @abstractmethod
    async def bulk_upsert(self, issues: list[JiraIssue]) -> Result[list[JiraIssue], StorageFailure]:
        """Insert or overwrite ``issues`` keyed by issue id.

        Has no transaction awareness of its own; atomicity comes from the
        caller's ``ITransactionExecutor``. An empty list returns ``Ok([])``
        without touching storage.
        """
        ...


class IIssueAPI(ABC):
    """Port for reading issues from the remote Jira API."""

    @abstractmethod
    async def fetch_page(
        self,
        project_keys: list[ProjectKey],
        since: datetime,
        next_page_token: str | None = None,
    ) -> Result[FetchedPage, TransportFailure]:
        """Fetch one page of issues created at or after ``since``.

        Transient failures are retried inside this call; the returned
        failure carries the last underlying error.
        """
        ...

    @abstractmethod
    def fetch_issues(
        self,
        project_keys: list[ProjectKey],
        since: datetime,
    ) -> AsyncIterator[Result[list[JiraIssue], TransportFailure]]:
        """Stream issues page by page, in fetch order.

        Yields one ``Ok(issues)`` per page. Stops after the last page, or
        right after yielding an ``Err``.
        """
        ...


class ITransactionExecutor(ABC):
    """Port for running a unit of work atomically."""

    @abstractmethod
    async def execute_in_transaction(
        self,
        block: Callable[[], Awaitable[Result[T, Any]]],
    ) -> Result[T, TransactionFailure]:
        """Run ``block`` in one transaction.

        Commits when ``block`` returns ``Ok``. Rolls back when it returns
        ``Err`` or raises; either way the failure comes back as
        ``Err(TransactionFailure)`` with the original error as cause.
        """
        ...
