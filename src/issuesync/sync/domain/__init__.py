"""Domain layer - Pure domain entities, error values and port interfaces.

This layer contains:
- Entities: Frozen data structures representing Jira issues and paging
- Errors: Two-tier error values returned inside ``Err``
- Result: The ``Ok`` / ``Err`` pair every port and use case returns
- Ports: Abstract interfaces defining contracts for adapters

No infrastructure dependencies allowed in this layer.
"""

from .entities import (
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
from .errors import (
    DomainError,
    InvalidIdentifierFormat,
    InvalidPageNumber,
    InvalidPageSize,
    IssueFetchFailed,
    IssueFindError,
    IssueFindFailed,
    IssueListError,
    IssueListFetchFailed,
    IssueNotFound,
    IssuePersistFailed,
    IssueSyncError,
    PageNumberError,
    PageSizeError,
    ProjectKeyFetchFailed,
    StorageFailure,
    TransactionFailure,
    TransportFailure,
)
from .ports import IIssueAPI, IIssueRepository, IProjectRepository, ITransactionExecutor
from .result import Err, Ok, Result

__all__ = [
    # Entities
    "JiraIssue",
    "FetchedPage",
    "Page",
    # Value Objects
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
    # Errors - Lower Tier
    "DomainError",
    "TransportFailure",
    "StorageFailure",
    "InvalidIdentifierFormat",
    "IssueNotFound",
    "PageNumberError",
    "PageSizeError",
    "TransactionFailure",
    # Errors - Operation Tier
    "IssueSyncError",
    "ProjectKeyFetchFailed",
    "IssueFetchFailed",
    "IssuePersistFailed",
    "IssueFindError",
    "IssueFindFailed",
    "IssueListError",
    "InvalidPageNumber",
    "InvalidPageSize",
    "IssueListFetchFailed",
    # Ports
    "IIssueAPI",
    "IIssueRepository",
    "IProjectRepository",
    "ITransactionExecutor",
]
