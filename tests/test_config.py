"""Tests for environment-driven settings."""

import pytest

from issuesync.api.exceptions import ConfigurationError
from issuesync.config import PaginationConfig, Settings, SyncConfig

REQUIRED = {
    "JIRA_BASE_URL": "https://example.atlassian.net",
    "JIRA_API_TOKEN": "secret-token",
    "DATABASE_URL": "postgresql://localhost/jira",
}


@pytest.fixture
def env(monkeypatch):
    for name in ["JIRA_AUTH_SCHEME", "SYNC_LOOKBACK_DAYS", "LOG_LEVEL"]:
        monkeypatch.delenv(name, raising=False)
    for name, value in REQUIRED.items():
        monkeypatch.setenv(name, value)
    return monkeypatch


class TestSettings:
    """Tests for Settings.from_env."""

    def test_defaults(self, env):
        settings = Settings.from_env(load_env_file=False)

        assert settings.jira_base_url == "https://example.atlassian.net"
        assert settings.jira_auth_scheme == "Basic"
        assert settings.log_level == "INFO"
        assert settings.sync == SyncConfig(lookback_days=180)
        assert settings.pagination == PaginationConfig(page_size=100, delay_between_pages=1.0)
        assert settings.retry.max_attempts == 3
        assert settings.retry.initial_delay == 0.5

    def test_overrides(self, env):
        env.setenv("JIRA_AUTH_SCHEME", "Bearer")
        env.setenv("SYNC_LOOKBACK_DAYS", "30")
        env.setenv("LOG_LEVEL", "debug")

        settings = Settings.from_env(load_env_file=False)

        assert settings.jira_auth_scheme == "Bearer"
        assert settings.sync.lookback_days == 30
        assert settings.log_level == "DEBUG"

    def test_missing_required(self, env):
        env.delenv("JIRA_API_TOKEN")
        env.setenv("DATABASE_URL", "   ")

        with pytest.raises(ConfigurationError) as exc_info:
            Settings.from_env(load_env_file=False)

        assert exc_info.value.missing_keys == ["JIRA_API_TOKEN", "DATABASE_URL"]

    @pytest.mark.parametrize("value", ["soon", "-1"])
    def test_invalid_lookback(self, env, value):
        env.setenv("SYNC_LOOKBACK_DAYS", value)

        with pytest.raises(ConfigurationError):
            Settings.from_env(load_env_file=False)

    def test_secrets_not_in_repr(self, env):
        text = repr(Settings.from_env(load_env_file=False))

        assert "secret-token" not in text
        assert "postgresql://" not in text
