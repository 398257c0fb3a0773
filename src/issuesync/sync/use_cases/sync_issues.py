"""Sync Issues Use Case - Orchestrates the Jira issue sync workflow.

This use case mirrors recently created Jira issues into the database. It
depends on ports (interfaces) for all external operations, making it fully
testable without infrastructure.

Workflow:
1. Read all project keys (via IProjectRepository)
2. Compute the lookback window (now - SyncConfig.lookback_days)
3. Stream issues page by page (via IIssueAPI)
4. Upsert each page in its own transaction (via ITransactionExecutor and
   IIssueRepository)
5. Return the number of issues persisted, or the first failure

Persistence is per page: when a later page fails, earlier pages stay
committed. A rerun simply upserts the same rows again.
"""

import logging
from collections.abc import Callable
from contextlib import aclosing
from datetime import datetime, timedelta, timezone

from ...config import SyncConfig
from ..domain.errors import (
    IssueFetchFailed,
    IssuePersistFailed,
    IssueSyncError,
    ProjectKeyFetchFailed,
)
from ..domain.ports import IIssueAPI, IIssueRepository, IProjectRepository, ITransactionExecutor
from ..domain.result import Err, Ok, Result

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class SyncIssuesUseCase:
    """Orchestrates the Jira issue sync workflow.

    Example:
        use_case = SyncIssuesUseCase(
            project_repo=PostgresProjectRepository(pool),
            issue_repo=PostgresIssueRepository(pool),
            issue_api=JiraIssueAPI(client),
            transaction_executor=PostgresTransactionExecutor(pool),
        )
        result = await use_case.execute()
    """

    def __init__(
        self,
        project_repo: IProjectRepository,
        issue_repo: IIssueRepository,
        issue_api: IIssueAPI,
        transaction_executor: ITransactionExecutor,
        config: SyncConfig | None = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        """Initialize the use case with its dependencies.

        Args:
            project_repo: Port for reading project keys
            issue_repo: Port for persisting issues
            issue_api: Port for fetching issues from Jira
            transaction_executor: Port for per-page transactions
            config: Sync window settings
            clock: Returns the current time (timezone-aware)
        """
        self.project_repo = project_repo
        self.issue_repo = issue_repo
        self.api = issue_api
        self.transactions = transaction_executor
        self.config = config or SyncConfig()
        self.clock = clock

    async def execute(self) -> Result[int, IssueSyncError]:
        """Execute the issue sync workflow.

        Returns:
            Ok(number of issues persisted), or Err with the step that failed
        """
        since = self.clock() - timedelta(days=self.config.lookback_days)
        logger.info(f"Fetching issues created since {since.isoformat()}...")

        logger.info("Fetching project keys...")
        keys_result = await self.project_repo.find_all_project_keys()
        if isinstance(keys_result, Err):
            logger.error(f"Failed to fetch project keys: {keys_result.error}")
            return Err(ProjectKeyFetchFailed(keys_result.error))

        project_keys = keys_result.value
        logger.info(
            f"Found {len(project_keys)} project keys: {[key.value for key in project_keys]}"
        )

        total_count = 0

        async with aclosing(self.api.fetch_issues(project_keys, since)) as stream:
            async for page_result in stream:
                if isinstance(page_result, Err):
                    logger.error(
                        f"Failed to fetch issues after {total_count} saved: {page_result.error}"
                    )
                    return Err(IssueFetchFailed(page_result.error))

                issues = page_result.value
                logger.info(f"Fetched: {len(issues)} issues")

                persist_result = await self.transactions.execute_in_transaction(
                    lambda: self.issue_repo.bulk_upsert(issues)
                )
                if isinstance(persist_result, Err):
                    logger.error(
                        f"Failed to persist issues after {total_count} saved: {persist_result.error}"
                    )
                    return Err(IssuePersistFailed(persist_result.error))

                total_count += len(issues)
                logger.info(f"Saved: {len(issues)} issues (total: {total_count})")

        logger.info(f"Sync completed: {total_count} total issues")
        return Ok(total_count)
