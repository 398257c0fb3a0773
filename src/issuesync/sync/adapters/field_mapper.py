"""Field mapper for transforming between Jira API, domain, and DB formats.

This adapter encapsulates all field transformation logic:
- Jira search response -> JiraIssue (dropping issues it cannot represent)
- JiraIssue -> database record tuple
- Database row -> JiraIssue
"""

import json
import logging
from datetime import datetime
from typing import Any, Mapping

from ..domain.entities import IssueId, IssueKey, IssuePriority, IssueType, JiraIssue

logger = logging.getLogger(__name__)

# Jira display names -> domain values
ISSUE_TYPES_BY_NAME = {
    "Epic": IssueType.EPIC,
    "Story": IssueType.STORY,
    "Task": IssueType.TASK,
    "Subtask": IssueType.SUBTASK,
    "Bug": IssueType.BUG,
}

PRIORITIES_BY_NAME = {
    "Highest": IssuePriority.HIGHEST,
    "High": IssuePriority.HIGH,
    "Medium": IssuePriority.MEDIUM,
    "Low": IssuePriority.LOW,
    "Lowest": IssuePriority.LOWEST,
}

# Fields requested from the search API
ISSUE_FIELDS = [
    "project",
    "summary",
    "description",
    "issuetype",
    "priority",
    "created",
    "updated",
]


class IssueFieldMapper:
    """Maps Jira search results to domain entities and DB records.

    This class handles:
    - Nested field extraction (fields.project.id, fields.issuetype.name, ...)
    - Issue type and priority name lookup
    - Timestamp parsing (Jira's ``+0000`` offsets and ISO 8601)
    - Description serialization (ADF node -> JSON text)
    """

    def map_to_entity(self, raw: dict[str, Any]) -> JiraIssue | None:
        """Transform one raw search result into a JiraIssue.

        Returns None when the issue has an unknown type or priority, a
        malformed key, or is missing required fields. Entries of the wrong
        JSON shape (not an object, or ``fields`` not an object) are dropped
        the same way.
        """
        if not isinstance(raw, dict):
            logger.debug(f"Skipping non-object search result: {raw!r}")
            return None

        fields = raw.get("fields")
        if not isinstance(fields, dict):
            logger.debug(f"Skipping issue {raw.get('key')}: missing fields object")
            return None

        issue_type = ISSUE_TYPES_BY_NAME.get(self._name(fields.get("issuetype")))
        if issue_type is None:
            logger.debug(f"Skipping issue {raw.get('key')}: unsupported issue type")
            return None

        priority = PRIORITIES_BY_NAME.get(self._name(fields.get("priority")))
        if priority is None:
            logger.debug(f"Skipping issue {raw.get('key')}: unsupported priority")
            return None

        key = raw.get("key")
        if not isinstance(key, str) or not IssueKey.is_valid(key):
            logger.debug(f"Skipping issue {raw.get('id')}: malformed key {key!r}")
            return None

        try:
            description = fields.get("description")
            return JiraIssue(
                id=IssueId(int(raw["id"])),
                project_id=int(fields["project"]["id"]),
                key=IssueKey(key),
                summary=fields["summary"],
                description=json.dumps(description) if description is not None else None,
                issue_type=issue_type,
                priority=priority,
                created_at=self._parse_timestamp(fields["created"]),
                updated_at=self._parse_timestamp(fields["updated"]),
            )
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            logger.debug(f"Skipping issue {key}: {e}")
            return None

    @staticmethod
    def _name(value: Any) -> str | None:
        # issuetype/priority arrive as {"name": ...} objects
        if isinstance(value, dict):
            name = value.get("name")
            return name if isinstance(name, str) else None
        return None

    def map_to_record(self, issue: JiraIssue) -> tuple[Any, ...]:
        """Transform JiraIssue to database record tuple.

        The tuple ordering matches the INSERT statement in
        PostgresIssueRepository: (id, project_id, key, summary, description,
        issue_type, priority, created_at, updated_at)
        """
        return (
            issue.id.value,
            issue.project_id,
            issue.key.value,
            issue.summary,
            issue.description,  # JSON text, cast to JSONB in SQL
            issue.issue_type.value,
            issue.priority.value,
            issue.created_at,
            issue.updated_at,
        )

    def map_from_record(self, row: Mapping[str, Any]) -> JiraIssue:
        """Transform a ``jira_issue`` row into a JiraIssue."""
        return JiraIssue(
            id=IssueId(row["id"]),
            project_id=row["project_id"],
            key=IssueKey(row["key"]),
            summary=row["summary"],
            description=row["description"],
            issue_type=IssueType(row["issue_type"]),
            priority=IssuePriority(row["priority"]),
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )

    @staticmethod
    def _parse_timestamp(value: str) -> datetime:
        """Parse a Jira timestamp such as ``2024-05-01T10:15:30.000+0000``.

        Handles the 'Z' suffix and colon-less offsets that
        ``datetime.fromisoformat`` rejects before Python 3.11.
        """
        text = value.replace("Z", "+00:00")
        if len(text) > 5 and text[-5] in "+-" and text[-4:].isdigit():
            text = f"{text[:-2]}:{text[-2:]}"
        parsed = datetime.fromisoformat(text)
        if parsed.tzinfo is None:
            raise ValueError(f"Timestamp without offset: {value!r}")
        return parsed
