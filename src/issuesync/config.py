"""Runtime configuration for Jira issue sync.

Settings come from environment variables (a ``.env`` file is loaded first
when present). Tunables for paging and the sync window are plain
dataclasses handed to each component at construction, so tests can use
their own windows and limits.

Environment Variables:
    JIRA_BASE_URL: Jira site URL, e.g. https://example.atlassian.net (required)
    JIRA_API_TOKEN: API credential sent with every request (required)
    JIRA_AUTH_SCHEME: Authorization scheme for the token (default: Basic)
    DATABASE_URL: PostgreSQL connection string (required)
    SYNC_LOOKBACK_DAYS: Only sync issues created this many days back (default: 180)
    LOG_LEVEL: Root log level (default: INFO)
"""

import os
from dataclasses import dataclass, field
from typing import Optional

from dotenv import load_dotenv

from .api.exceptions import ConfigurationError
from .api.resilience import RetryConfig


@dataclass(frozen=True)
class PaginationConfig:
    """Configuration for the paginated Jira search.

    Attributes:
        page_size: Issues per request (Jira caps search pages at 100)
        delay_between_pages: Seconds to wait between requests (rate limiting)
        max_pages: Safety limit to prevent endless paging (None = no limit)
    """
    page_size: int = 100
    delay_between_pages: float = 1.0
    max_pages: Optional[int] = None


@dataclass(frozen=True)
class SyncConfig:
    """Configuration for a sync run.

    Attributes:
        lookback_days: Sync issues created within this many days
    """
    lookback_days: int = 180


@dataclass(frozen=True)
class Settings:
    """Everything a process needs to wire the sync pipeline."""

    jira_base_url: str
    jira_api_token: str = field(repr=False)
    database_url: str = field(repr=False)
    jira_auth_scheme: str = "Basic"
    log_level: str = "INFO"
    sync: SyncConfig = field(default_factory=SyncConfig)
    pagination: PaginationConfig = field(default_factory=PaginationConfig)
    retry: RetryConfig = field(default_factory=RetryConfig)

    @classmethod
    def from_env(cls, load_env_file: bool = True) -> "Settings":
        """Build settings from the environment.

        Raises:
            ConfigurationError: If a required variable is missing or a
                numeric variable cannot be parsed.
        """
        if load_env_file:
            load_dotenv()

        required = {
            "JIRA_BASE_URL": os.getenv("JIRA_BASE_URL", "").strip(),
            "JIRA_API_TOKEN": os.getenv("JIRA_API_TOKEN", "").strip(),
            "DATABASE_URL": os.getenv("DATABASE_URL", "").strip(),
        }
        missing = [name for name, value in required.items() if not value]
        if missing:
            raise ConfigurationError(
                f"Missing required environment variables: {', '.join(missing)}",
                missing_keys=missing,
            )

        lookback = os.getenv("SYNC_LOOKBACK_DAYS", "180")
        try:
            lookback_days = int(lookback)
        except ValueError:
            raise ConfigurationError(
                f"SYNC_LOOKBACK_DAYS must be an integer, got {lookback!r}",
                details={"SYNC_LOOKBACK_DAYS": lookback},
            )
        if lookback_days < 0:
            raise ConfigurationError(
                f"SYNC_LOOKBACK_DAYS must not be negative, got {lookback_days}",
                details={"SYNC_LOOKBACK_DAYS": lookback},
            )

        return cls(
            jira_base_url=required["JIRA_BASE_URL"],
            jira_api_token=required["JIRA_API_TOKEN"],
            database_url=required["DATABASE_URL"],
            jira_auth_scheme=os.getenv("JIRA_AUTH_SCHEME", "Basic"),
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            sync=SyncConfig(lookback_days=lookback_days),
        )
