"""Read-side use cases: lookup by ids and paged listing."""

import logging

from ..domain.entities import IssueId, JiraIssue, Page, PageNumber, PageSize
from ..domain.errors import (
    InvalidPageNumber,
    InvalidPageSize,
    IssueFindError,
    IssueFindFailed,
    IssueListError,
    IssueListFetchFailed,
)
from ..domain.ports import IIssueRepository
from ..domain.result import Err, Ok, Result

logger = logging.getLogger(__name__)


class FindIssuesByIdsUseCase:
    """Fetch the stored issues for a list of ids in one repository call."""

    def __init__(self, issue_repo: IIssueRepository):
        self.repo = issue_repo

    async def execute(self, ids: list[IssueId]) -> Result[list[JiraIssue], IssueFindError]:
        result = await self.repo.find_by_ids(ids)
        if isinstance(result, Err):
            return Err(IssueFindFailed(result.error))
        return Ok(result.value)


class ListIssuesUseCase:
    """Return one page of stored issues, newest first.

    The page number is validated before the page size, and storage is only
    queried once both are valid.
    """

    def __init__(self, issue_repo: IIssueRepository):
        self.repo = issue_repo

    async def execute(
        self,
        page_number: int,
        page_size: int,
    ) -> Result[Page[JiraIssue], IssueListError]:
        number = PageNumber.of(page_number)
        if isinstance(number, Err):
            return Err(InvalidPageNumber(number.error))

        size = PageSize.of(page_size)
        if isinstance(size, Err):
            return Err(InvalidPageSize(size.error))

        result = await self.repo.list_issues(page_number=number.value, page_size=size.value)
        if isinstance(result, Err):
            logger.error(f"Failed to list issues: {result.error}")
            return Err(IssueListFetchFailed(result.error))
        return Ok(result.value)
