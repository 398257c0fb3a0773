"""Error values for the sync and lookup use cases.

Two tiers, each error optionally wrapping the one below it as ``cause``:

    Lower tier (what went wrong in a collaborator)
        TransportFailure         - Jira API call failed (after retries)
        StorageFailure           - database call failed
        InvalidIdentifierFormat  - raw issue id could not be parsed
        PageNumberError / PageSizeError - paging input out of range
        TransactionFailure       - unit of work did not commit
        IssueNotFound            - requested issue is not stored

    Operation tier (which step of which use case failed)
        IssueSyncError:  ProjectKeyFetchFailed, IssueFetchFailed, IssuePersistFailed
        IssueFindError:  IssueFindFailed
        IssueListError:  InvalidPageNumber, InvalidPageSize, IssueListFetchFailed

They subclass Exception so they keep a message and a cause chain, but they
are returned inside ``Err`` rather than raised.
"""

from typing import Optional


class DomainError(Exception):
    """Base class for every error value in the sync module."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause
        if cause is not None:
            self.__cause__ = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}: {self.cause}"
        return self.message

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message={self.message!r}, cause={self.cause!r})"


# ============================================
# Lower Tier
# ============================================


class TransportFailure(DomainError):
    """The Jira API could not be reached or answered with an error."""


class StorageFailure(DomainError):
    """A database operation failed."""


class InvalidIdentifierFormat(DomainError):
    """A raw issue identifier is not a positive integer."""

    def __init__(self, raw_id: str, cause: Optional[BaseException] = None):
        super().__init__(f"Invalid issue ID format: {raw_id!r}", cause)
        self.raw_id = raw_id


class IssueNotFound(DomainError):
    """No stored issue has the requested identifier."""

    def __init__(self, raw_id: str):
        super().__init__(f"Issue not found: {raw_id}")
        self.raw_id = raw_id


class PageNumberError(DomainError):
    """Page number below the minimum."""

    def __init__(self, value: int, minimum: int):
        super().__init__(f"Page number must be at least {minimum}, but was {value}")
        self.value = value


class PageSizeError(DomainError):
    """Page size outside the allowed range."""

    def __init__(self, value: int, minimum: int, maximum: int):
        if value < minimum:
            message = f"Page size must be at least {minimum}, but was {value}"
        else:
            message = f"Page size must be at most {maximum}, but was {value}"
        super().__init__(message)
        self.value = value


class TransactionFailure(DomainError):
    """A unit of work was rolled back or could not run."""


# ============================================
# Operation Tier - Sync
# ============================================


class IssueSyncError(DomainError):
    """Base class for failures of a sync run."""


class ProjectKeyFetchFailed(IssueSyncError):
    def __init__(self, cause: StorageFailure):
        super().__init__("Failed to fetch project keys", cause)


class IssueFetchFailed(IssueSyncError):
    def __init__(self, cause: TransportFailure):
        super().__init__("Failed to fetch issues", cause)


class IssuePersistFailed(IssueSyncError):
    def __init__(self, cause: TransactionFailure):
        super().__init__("Failed to persist issues", cause)


# ============================================
# Operation Tier - Lookup and Listing
# ============================================


class IssueFindError(DomainError):
    """Base class for failures of a lookup by ids."""


class IssueFindFailed(IssueFindError):
    def __init__(self, cause: StorageFailure):
        super().__init__("Failed to fetch Jira issues", cause)


class IssueListError(DomainError):
    """Base class for failures of a paged listing."""


class InvalidPageNumber(IssueListError):
    def __init__(self, error: PageNumberError):
        super().__init__(error.message)
        self.error = error


class InvalidPageSize(IssueListError):
    def __init__(self, error: PageSizeError):
        super().__init__(error.message)
        self.error = error


class IssueListFetchFailed(IssueListError):
    def __init__(self, cause: StorageFailure):
        super().__init__("Failed to fetch Jira issues", cause)
