#!/usr/bin/env python3
"""Jira Issue Sync CLI.

Mirrors recently created Jira issues into PostgreSQL and reads them back.

Architecture:
    - JiraClient is the shared HTTP layer for the Jira search API
    - JiraIssueAPI pages through the search with retry and backoff
    - SyncIssuesUseCase upserts each page in its own transaction
    - IssueBatchLoader resolves point lookups with a single query

Environment Variables Required:
    - JIRA_BASE_URL: Jira site URL
    - JIRA_API_TOKEN: API credential sent as ``Authorization: <scheme> <token>``
    - DATABASE_URL: PostgreSQL connection string

Example Usage:
    $ python main.py --job sync-jira-issue          # Sync issues to database
    $ python main.py --lookup 10001 10002           # Look up stored issues by id
    $ python main.py --list-page 1 --page-size 20   # Show the newest stored issues
"""
import argparse
import asyncio
import logging
import sys
from datetime import datetime, timezone

from issuesync.api import JiraClient, close_pool, create_pool
from issuesync.api.exceptions import ConfigurationError, ConnectionPoolError
from issuesync.config import Settings
from issuesync.sync.adapters import (
    JiraIssueAPI,
    PostgresIssueRepository,
    PostgresProjectRepository,
    PostgresTransactionExecutor,
)
from issuesync.sync.domain.result import Err
from issuesync.sync.use_cases import (
    FindIssuesByIdsUseCase,
    IssueBatchLoader,
    ListIssuesUseCase,
    SyncIssuesUseCase,
)

logger = logging.getLogger(__name__)

SYNC_JOB = "sync-jira-issue"


async def run_issue_sync(settings: Settings, db_pool) -> int:
    """Run the issue sync job.

    Returns:
        Process exit code (0 on success, 1 on failure)
    """
    async with JiraClient(
        settings.jira_base_url,
        settings.jira_api_token,
        auth_scheme=settings.jira_auth_scheme,
    ) as client:
        use_case = SyncIssuesUseCase(
            project_repo=PostgresProjectRepository(db_pool),
            issue_repo=PostgresIssueRepository(db_pool),
            issue_api=JiraIssueAPI(
                client,
                pagination_config=settings.pagination,
                retry_config=settings.retry,
            ),
            transaction_executor=PostgresTransactionExecutor(db_pool),
            config=settings.sync,
        )
        result = await use_case.execute()

    if isinstance(result, Err):
        logger.error(f"Job {SYNC_JOB} failed: {result.error}")
        return 1

    logger.info(f"Job {SYNC_JOB} completed: {result.value} issues synced")
    return 0


async def run_lookup(db_pool, raw_ids: list[str]) -> int:
    """Look up stored issues by id and print one line per id."""
    loader = IssueBatchLoader(FindIssuesByIdsUseCase(PostgresIssueRepository(db_pool)))
    results = await loader.load(raw_ids)

    exit_code = 0
    for raw_id, result in results.items():
        if isinstance(result, Err):
            print(f"{raw_id}: ERROR {result.error}")
            exit_code = 1
        else:
            issue = result.value
            print(f"{raw_id}: {issue.key} [{issue.issue_type.value}/{issue.priority.value}] {issue.summary}")
    return exit_code


async def run_list(db_pool, page_number: int, page_size: int) -> int:
    """Print one page of stored issues, newest first."""
    result = await ListIssuesUseCase(PostgresIssueRepository(db_pool)).execute(page_number, page_size)
    if isinstance(result, Err):
        logger.error(f"Listing failed: {result.error}")
        return 1

    page = result.value
    print(f"Page {page_number} ({len(page.items)} of {page.total_count} issues)")
    for issue in page.items:
        print(f"  {issue.id}  {issue.key}  {issue.created_at.isoformat()}  {issue.summary}")
    return 0


async def run(args: argparse.Namespace) -> int:
    """Main orchestration function.

    Returns:
        Process exit code
    """
    if not args.job and not args.lookup and args.list_page is None:
        logger.info("Nothing to do (use --job, --lookup or --list-page)")
        return 0

    try:
        settings = Settings.from_env()
    except ConfigurationError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    logging.getLogger().setLevel(settings.log_level)

    start_time = datetime.now(timezone.utc)
    logger.info(f"Starting at {start_time.isoformat()}")

    try:
        db_pool = await create_pool(settings.database_url)
    except ConnectionPoolError as e:
        logger.error(f"Database connection failed: {e}")
        return 1

    try:
        if args.job == SYNC_JOB:
            exit_code = await run_issue_sync(settings, db_pool)
        elif args.lookup:
            exit_code = await run_lookup(db_pool, args.lookup)
        else:
            exit_code = await run_list(db_pool, args.list_page, args.page_size)
    finally:
        await close_pool(db_pool)

    duration = (datetime.now(timezone.utc) - start_time).total_seconds()
    logger.info(f"Completed in {duration:.1f} seconds")
    return exit_code


def main():
    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        datefmt='%Y-%m-%d %H:%M:%S'
    )

    parser = argparse.ArgumentParser(
        description="Sync recently created Jira issues to PostgreSQL",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python main.py --job sync-jira-issue          # Sync issues to database
  python main.py --lookup 10001 10002           # Look up issues by id
  python main.py --list-page 1 --page-size 20   # List the newest issues
        """
    )

    job_group = parser.add_argument_group("Jobs")
    job_group.add_argument(
        "--job",
        choices=[SYNC_JOB],
        help="Run a batch job"
    )

    query_group = parser.add_argument_group("Queries")
    query_group.add_argument(
        "--lookup",
        nargs="+",
        metavar="ID",
        help="Look up stored issues by numeric id"
    )
    query_group.add_argument(
        "--list-page",
        type=int,
        metavar="N",
        help="Print page N of stored issues (newest first)"
    )
    query_group.add_argument(
        "--page-size",
        type=int,
        default=20,
        metavar="M",
        help="Issues per page for --list-page (1-100, default: 20)"
    )

    args = parser.parse_args()

    sys.exit(asyncio.run(run(args)))


if __name__ == "__main__":
    main()
