"""PostgreSQL repository adapters for issues and projects.

These adapters implement IIssueRepository and IProjectRepository. Every
database exception is caught here and returned as ``Err(StorageFailure)``.

Queries run on the connection of the surrounding ``database_transaction``
when there is one (see ``acquire_connection``), otherwise on a pooled
connection of their own.
"""

import logging
from typing import TYPE_CHECKING

from ...api.database import acquire_connection
from ..domain.entities import IssueId, JiraIssue, Page, PageNumber, PageSize, ProjectKey
from ..domain.errors import StorageFailure
from ..domain.ports import IIssueRepository, IProjectRepository
from ..domain.result import Err, Ok, Result
from .field_mapper import IssueFieldMapper

if TYPE_CHECKING:
    import asyncpg

logger = logging.getLogger(__name__)

ISSUE_COLUMNS = (
    "id, project_id, key, summary, description, "
    "issue_type, priority, created_at, updated_at"
)

UPSERT_ISSUE_SQL = f"""
    INSERT INTO jira_issue ({ISSUE_COLUMNS})
    VALUES (
        $1, $2, $3, $4, $5::jsonb,
        $6::jira_issue_type, $7::jira_issue_priority, $8, $9
    )
    ON CONFLICT (id) DO UPDATE SET
        project_id = EXCLUDED.project_id,
        key = EXCLUDED.key,
        summary = EXCLUDED.summary,
        description = EXCLUDED.description,
        issue_type = EXCLUDED.issue_type,
        priority = EXCLUDED.priority,
        updated_at = EXCLUDED.updated_at
"""

# Enums and JSONB come back as text so rows map straight to entities
SELECT_COLUMNS = (
    "id, project_id, key, summary, description::text AS description, "
    "issue_type::text AS issue_type, priority::text AS priority, "
    "created_at, updated_at"
)

SELECT_ISSUES_BY_IDS_SQL = f"""
    SELECT {SELECT_COLUMNS}
    FROM jira_issue
    WHERE id = ANY($1::bigint[])
"""

LIST_ISSUES_SQL = f"""
    SELECT {SELECT_COLUMNS}
    FROM jira_issue
    ORDER BY created_at DESC, id DESC
    LIMIT $1 OFFSET $2
"""


class PostgresIssueRepository(IIssueRepository):
    """PostgreSQL implementation of IIssueRepository.

    - ``bulk_upsert`` uses INSERT ON CONFLICT with executemany()
    - ``find_by_ids`` resolves any number of ids with one ``= ANY($1)`` query
    - ``list`` pages with LIMIT/OFFSET next to a COUNT(*)
    """

    def __init__(self, pool: "asyncpg.Pool", field_mapper: IssueFieldMapper | None = None):
        """Initialize the repository.

        Args:
            pool: asyncpg connection pool for database operations
            field_mapper: Converts between entities and records
        """
        self.pool = pool
        self.mapper = field_mapper or IssueFieldMapper()

    async def find_by_ids(self, ids: list[IssueId]) -> Result[list[JiraIssue], StorageFailure]:
        if not ids:
            return Ok([])

        try:
            async with acquire_connection(self.pool) as conn:
                rows = await conn.fetch(SELECT_ISSUES_BY_IDS_SQL, [i.value for i in ids])
            return Ok([self.mapper.map_from_record(row) for row in rows])
        except Exception as e:
            logger.error(f"Failed to fetch Jira issues: {e}")
            return Err(StorageFailure(f"Failed to fetch Jira issues: {e}", cause=e))

    async def list_issues(
        self,
        page_number: PageNumber,
        page_size: PageSize,
    ) -> Result[Page[JiraIssue], StorageFailure]:
        offset = (page_number.value - 1) * page_size.value

        try:
            async with acquire_connection(self.pool) as conn:
                total = await conn.fetchval("SELECT COUNT(*) FROM jira_issue")
                rows = await conn.fetch(LIST_ISSUES_SQL, page_size.value, offset)
            return Ok(
                Page(
                    total_count=total,
                    items=[self.mapper.map_from_record(row) for row in rows],
                )
            )
        except Exception as e:
            logger.error(f"Failed to list Jira issues: {e}")
            return Err(StorageFailure(f"Failed to list Jira issues: {e}", cause=e))

    async def bulk_upsert(self, issues: list[JiraIssue]) -> Result[list[JiraIssue], StorageFailure]:
        """Bulk upsert issues using INSERT ON CONFLICT.

        All mutable columns are overwritten with the incoming snapshot;
        ``created_at`` keeps its first stored value.
        """
        if not issues:
            return Ok([])

        records = [self.mapper.map_to_record(issue) for issue in issues]

        try:
            async with acquire_connection(self.pool) as conn:
                await conn.executemany(UPSERT_ISSUE_SQL, records)
        except Exception as e:
            logger.error(f"Failed to bulk upsert {len(records)} Jira issues: {e}")
            return Err(StorageFailure(f"Failed to bulk upsert Jira issues: {e}", cause=e))

        logger.debug(f"Upserted {len(records)} Jira issues")
        return Ok(list(issues))


class PostgresProjectRepository(IProjectRepository):
    """PostgreSQL implementation of IProjectRepository."""

    def __init__(self, pool: "asyncpg.Pool"):
        self.pool = pool

    async def find_all_project_keys(self) -> Result[list[ProjectKey], StorageFailure]:
        try:
            async with acquire_connection(self.pool) as conn:
                rows = await conn.fetch("SELECT key FROM jira_project ORDER BY key")
            return Ok([ProjectKey(row["key"]) for row in rows])
        except Exception as e:
            logger.error(f"Failed to fetch project keys: {e}")
            return Err(StorageFailure(f"Failed to fetch project keys: {e}", cause=e))
