"""Use cases layer - Business logic orchestration for sync and lookups.

This layer contains use case classes that orchestrate:
- The issue sync: project keys -> paged Jira fetch -> per-page upsert
- Point lookups by id, batched through IssueBatchLoader
- Paged listing of stored issues

Use cases depend only on ports, not concrete implementations.
"""

from .find_issues import FindIssuesByIdsUseCase, ListIssuesUseCase
from .load_issues import IssueBatchLoader
from .sync_issues import SyncIssuesUseCase

__all__ = [
    "FindIssuesByIdsUseCase",
    "IssueBatchLoader",
    "ListIssuesUseCase",
    "SyncIssuesUseCase",
]
