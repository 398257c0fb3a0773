"""Incremental Jira issue mirror.

Packages:
    api   - Jira HTTP client, retry policy, database utilities, exceptions
    sync  - Domain, use cases and adapters for the sync and lookup paths
"""

__version__ = "0.1.0"
