#!/usr/bin/env python3
"""Integration tests for PostgreSQL database operations.

Tests cover:
    - Schema presence (db/schema.sql applied)
    - Issue upsert, lookup and listing through the repositories
    - Transaction boundary: rollback through the executor

BEST PRACTICES FOR TEST ISOLATION:
    1. All test data uses the 'TSTSYNC' project key and ids >= 990000000
    2. Every test writes inside database_transaction and ends with
       RollbackRequested, so no data persists
    3. Assertions run after the rollback, on values captured inside
    4. DATABASE_URL loaded from .env for local dev; CI/CD should set it
       explicitly or skip these tests

NOTE: Requires running PostgreSQL instance with schema applied.
"""
import os
from datetime import datetime, timedelta, timezone

import pytest
import pytest_asyncio
from dotenv import load_dotenv

from issuesync.api.database import (
    RollbackRequested,
    acquire_connection,
    check_database_health,
    close_pool,
    create_pool,
    database_transaction,
)
from issuesync.sync.adapters import (
    PostgresIssueRepository,
    PostgresProjectRepository,
    PostgresTransactionExecutor,
)
from issuesync.sync.domain.entities import (
    IssueId,
    IssueKey,
    IssuePriority,
    IssueType,
    JiraIssue,
    PageNumber,
    PageSize,
    ProjectKey,
)
from issuesync.sync.domain.result import Err, Ok

# Load environment variables from .env file (for local development)
load_dotenv()

pytestmark = pytest.mark.skipif(
    not os.getenv("DATABASE_URL"),
    reason="DATABASE_URL not set"
)

TEST_PROJECT_ID = 990000000
TEST_PROJECT_KEY = "TSTSYNC"


def make_issue(offset: int, summary: str = "Integration issue") -> JiraIssue:
    created = datetime(2030, 1, 1, tzinfo=timezone.utc) + timedelta(minutes=offset)
    return JiraIssue(
        id=IssueId(TEST_PROJECT_ID + offset),
        project_id=TEST_PROJECT_ID,
        key=IssueKey(f"{TEST_PROJECT_KEY}-{offset}"),
        summary=summary,
        description='{"type": "doc", "version": 1, "content": []}',
        issue_type=IssueType.STORY,
        priority=IssuePriority.MEDIUM,
        created_at=created,
        updated_at=created,
    )


async def insert_test_project(conn):
    await conn.execute(
        "INSERT INTO jira_project (id, key, name) VALUES ($1, $2, $3)",
        TEST_PROJECT_ID, TEST_PROJECT_KEY, "Integration tests",
    )


async def run_rolled_back(pool, body):
    """Run ``body(conn)`` after inserting the test project, then roll back.

    Returns whatever ``body`` returned.
    """
    captured = {}
    with pytest.raises(RollbackRequested):
        async with database_transaction(pool) as conn:
            await insert_test_project(conn)
            captured["value"] = await body(conn)
            raise RollbackRequested()
    return captured["value"]


# ============================================
# Fixtures
# ============================================

@pytest_asyncio.fixture
async def db_pool():
    """Create a database connection pool for testing."""
    pool = await create_pool(os.getenv("DATABASE_URL"), min_size=1, max_size=5)
    yield pool
    await close_pool(pool)


# ============================================
# Schema Tests
# ============================================

class TestSchema:
    """Test database schema exists and is correct."""

    @pytest.mark.parametrize("table", ["jira_project", "jira_issue"])
    async def test_table_exists(self, db_pool, table):
        async with db_pool.acquire() as conn:
            result = await conn.fetchval("""
                SELECT EXISTS (
                    SELECT FROM information_schema.tables
                    WHERE table_name = $1
                )
            """, table)
        assert result is True

    async def test_health_check(self, db_pool):
        health = await check_database_health(db_pool)

        assert health["healthy"] is True


# ============================================
# Repository Tests
# ============================================

class TestIssueRepository:
    """Repository operations against a real database."""

    async def test_project_keys_include_test_project(self, db_pool):
        async def body(conn):
            return await PostgresProjectRepository(db_pool).find_all_project_keys()

        result = await run_rolled_back(db_pool, body)

        assert ProjectKey(TEST_PROJECT_KEY) in result.value

    async def test_upsert_then_find(self, db_pool):
        repo = PostgresIssueRepository(db_pool)
        issues = [make_issue(1), make_issue(2)]

        async def body(conn):
            upserted = await repo.bulk_upsert(issues)
            found = await repo.find_by_ids([IssueId(TEST_PROJECT_ID + 1), IssueId(TEST_PROJECT_ID + 3)])
            return upserted, found

        upserted, found = await run_rolled_back(db_pool, body)

        assert upserted == Ok(issues)
        assert [issue.id for issue in found.value] == [IssueId(TEST_PROJECT_ID + 1)]
        assert found.value[0].created_at == make_issue(1).created_at

    async def test_upsert_is_idempotent_and_overwrites(self, db_pool):
        repo = PostgresIssueRepository(db_pool)

        async def body(conn):
            await repo.bulk_upsert([make_issue(1, summary="before")])
            await repo.bulk_upsert([make_issue(1, summary="after")])
            count = await conn.fetchval(
                "SELECT COUNT(*) FROM jira_issue WHERE project_id = $1", TEST_PROJECT_ID
            )
            found = await repo.find_by_ids([IssueId(TEST_PROJECT_ID + 1)])
            return count, found

        count, found = await run_rolled_back(db_pool, body)

        assert count == 1
        assert found.value[0].summary == "after"

    async def test_list_newest_first(self, db_pool):
        repo = PostgresIssueRepository(db_pool)

        async def body(conn):
            await repo.bulk_upsert([make_issue(1), make_issue(2), make_issue(3)])
            return await repo.list_issues(PageNumber(1), PageSize(2))

        result = await run_rolled_back(db_pool, body)

        # Test rows are dated in 2030, so they lead the listing
        assert [issue.id.value - TEST_PROJECT_ID for issue in result.value.items] == [3, 2]
        assert result.value.total_count >= 3


class TestTransactionExecutor:
    """Rollback through PostgresTransactionExecutor."""

    async def test_err_rolls_back_written_rows(self, db_pool):
        async def write_then_fail():
            async with acquire_connection(db_pool) as conn:
                await insert_test_project(conn)
            return Err(ValueError("abort"))

        result = await PostgresTransactionExecutor(db_pool).execute_in_transaction(write_then_fail)

        async with db_pool.acquire() as conn:
            exists = await conn.fetchval(
                "SELECT EXISTS (SELECT 1 FROM jira_project WHERE id = $1)", TEST_PROJECT_ID
            )
        assert isinstance(result, Err)
        assert exists is False
