"""Sync module - Clean Architecture implementation of the Jira issue sync.

Architecture:
    domain/     - Pure domain entities, error values and port interfaces
    use_cases/  - Business logic orchestration
    adapters/   - Infrastructure implementations (PostgreSQL, Jira API)
"""

from .domain.entities import (
    FetchedPage,
    IssueId,
    IssueKey,
    IssuePriority,
    IssueType,
    JiraIssue,
    Page,
    PageNumber,
    PageSize,
    ProjectKey,
)
from .domain.ports import IIssueAPI, IIssueRepository, IProjectRepository, ITransactionExecutor
from .domain.result import Err, Ok, Result

__all__ = [
    # Entities
    "JiraIssue",
    "FetchedPage",
    "Page",
    "IssueId",
    "IssueKey",
    "IssuePriority",
    "IssueType",
    "PageNumber",
    "PageSize",
    "ProjectKey",
    # Result
    "Ok",
    "Err",
    "Result",
    # Ports
    "IIssueAPI",
    "IIssueRepository",
    "IProjectRepository",
    "ITransactionExecutor",
]
