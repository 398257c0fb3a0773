"""Batched issue loader for point lookups.

Collects any number of raw id strings, resolves them with exactly one
FindIssuesByIdsUseCase call, and reports a result per requested id:

    loader = IssueBatchLoader(FindIssuesByIdsUseCase(repo))
    results = await loader.load(["10001", "10001", "10002", "bad"])
    # {"10001": Ok(issue), "10002": Err(IssueNotFound), "bad": Err(InvalidIdentifierFormat)}

Nothing is cached between calls.
"""

import logging
from collections.abc import Iterable

from ..domain.entities import IssueId, JiraIssue
from ..domain.errors import DomainError, IssueNotFound
from ..domain.result import Err, Ok, Result
from .find_issues import FindIssuesByIdsUseCase

logger = logging.getLogger(__name__)


class IssueBatchLoader:
    """Deduplicating, partially failing loader over FindIssuesByIdsUseCase."""

    def __init__(self, find_issues: FindIssuesByIdsUseCase):
        self.find_issues = find_issues

    async def load(self, raw_ids: Iterable[str]) -> dict[str, Result[JiraIssue, DomainError]]:
        """Load the issues for ``raw_ids``.

        Returns:
            One entry per distinct raw id. A batch-level failure is reported
            for every requested id, malformed ones included.
        """
        parsed = {raw_id: IssueId.of(raw_id) for raw_id in raw_ids}

        valid_ids = list(dict.fromkeys(r.value for r in parsed.values() if isinstance(r, Ok)))
        logger.debug(f"Loading {len(valid_ids)} issues for {len(parsed)} requested ids")

        batch = await self.find_issues.execute(valid_ids)
        if isinstance(batch, Err):
            return {raw_id: batch for raw_id in parsed}

        issues_by_id = {issue.id: issue for issue in batch.value}

        results: dict[str, Result[JiraIssue, DomainError]] = {}
        for raw_id, parse_result in parsed.items():
            if isinstance(parse_result, Err):
                results[raw_id] = parse_result
                continue
            issue = issues_by_id.get(parse_result.value)
            results[raw_id] = Ok(issue) if issue is not None else Err(IssueNotFound(raw_id))
        return results
