"""Domain entities for Jira issue sync.

These are pure data structures with no infrastructure dependencies.
Entities are frozen: a sync never edits an issue in memory, it replaces the
stored row with a fresh snapshot.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, TypeVar

from .errors import InvalidIdentifierFormat, PageNumberError, PageSizeError
from .result import Err, Ok, Result

T = TypeVar("T")


# ============================================
# Value Objects
# ============================================


@dataclass(frozen=True, order=True)
class IssueId:
    """Numeric identifier assigned by Jira. Never generated locally."""

    value: int

    PATTERN = re.compile(r"^[0-9]{1,18}$")

    @classmethod
    def of(cls, raw: str) -> Result["IssueId", InvalidIdentifierFormat]:
        """Parse a raw identifier string such as ``"10042"``."""
        if not isinstance(raw, str) or not cls.PATTERN.fullmatch(raw):
            return Err(InvalidIdentifierFormat(str(raw)))
        value = int(raw)
        if value <= 0:
            return Err(InvalidIdentifierFormat(raw))
        return Ok(cls(value))

    def __str__(self) -> str:
        return str(self.value)


@dataclass(frozen=True)
class IssueKey:
    """Human-readable issue key, e.g. ``ABC-123``."""

    value: str

    PATTERN = re.compile(r"^[A-Z][A-Z0-9_]*-[0-9]+$")

    @classmethod
    def is_valid(cls, value: str) -> bool:
        return bool(value) and cls.PATTERN.fullmatch(value) is not None

    def __str__(self) -> str:
        return self.value


@dataclass(frozen=True)
class ProjectKey:
    """Jira project key. The set of keys scopes every sync query."""

    value: str

    def __str__(self) -> str:
        return self.value


class IssueType(Enum):
    EPIC = "epic"
    STORY = "story"
    TASK = "task"
    SUBTASK = "subtask"
    BUG = "bug"


class IssuePriority(Enum):
    HIGHEST = "highest"
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"
    LOWEST = "lowest"


@dataclass(frozen=True)
class PageNumber:
    """1-based page number for listings."""

    value: int

    MIN_VALUE = 1

    @classmethod
    def of(cls, value: int) -> Result["PageNumber", PageNumberError]:
        if value < cls.MIN_VALUE:
            return Err(PageNumberError(value, cls.MIN_VALUE))
        return Ok(cls(value))


@dataclass(frozen=True)
class PageSize:
    """Number of items per listing page."""

    value: int

    MIN_VALUE = 1
    MAX_VALUE = 100

    @classmethod
    def of(cls, value: int) -> Result["PageSize", PageSizeError]:
        if value < cls.MIN_VALUE or value > cls.MAX_VALUE:
            return Err(PageSizeError(value, cls.MIN_VALUE, cls.MAX_VALUE))
        return Ok(cls(value))


# ============================================
# Entities
# ============================================


@dataclass(frozen=True)
class JiraIssue:
    """Snapshot of a Jira issue as mirrored into the local store.

    ``description`` holds the Atlassian Document Format body serialized as
    JSON text, or None when the issue has no description.
    """

    id: IssueId
    project_id: int
    key: IssueKey
    summary: str
    description: str | None
    issue_type: IssueType
    priority: IssuePriority
    created_at: datetime
    updated_at: datetime


@dataclass(frozen=True)
class FetchedPage:
    """One page of the Jira search, already mapped to entities.

    Exists only for the duration of one fetch step.
    """

    issues: list[JiraIssue] = field(default_factory=list)
    next_page_token: str | None = None
    is_last: bool = True


@dataclass(frozen=True)
class Page(Generic[T]):
    """One page of a listing plus the total number of stored items."""

    total_count: int
    items: list[T] = field(default_factory=list)
