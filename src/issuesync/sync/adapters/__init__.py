"""Adapters layer - Infrastructure implementations for sync operations.

This layer contains concrete implementations of the ports defined in the domain layer:
- JiraIssueAPI: Jira Cloud search implementation of IIssueAPI
- PostgresIssueRepository: PostgreSQL implementation of IIssueRepository
- PostgresProjectRepository: PostgreSQL implementation of IProjectRepository
- PostgresTransactionExecutor: PostgreSQL implementation of ITransactionExecutor
- IssueFieldMapper: Conversion between API, domain and DB formats
"""

from .field_mapper import IssueFieldMapper
from .jira_api_adapter import JiraIssueAPI
from .postgres_issue_repo import PostgresIssueRepository, PostgresProjectRepository
from .transaction_executor import PostgresTransactionExecutor

__all__ = [
    "IssueFieldMapper",
    "JiraIssueAPI",
    "PostgresIssueRepository",
    "PostgresProjectRepository",
    "PostgresTransactionExecutor",
]
