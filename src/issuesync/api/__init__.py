"""Jira API and database infrastructure.

Classes:
    JiraClient: Async HTTP client for the Jira Cloud REST API
    RetryConfig: Retry policy for remote calls

Exceptions:
    IssueSyncInfraError: Base exception for infrastructure errors
    ConfigurationError: Missing or invalid configuration
    APIError: API request failures
    NetworkError: Network connectivity issues
    DatabaseError: Database operation failures
"""
from .client import JiraClient
from .database import (
    RollbackRequested,
    acquire_connection,
    check_database_health,
    close_pool,
    create_pool,
    database_transaction,
)
from .exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    ConnectionPoolError,
    DatabaseError,
    IntegrityError,
    IssueSyncInfraError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TimeoutError,
    TransactionError,
    ValidationError,
)
from .resilience import DEFAULT_RETRYABLE_EXCEPTIONS, RetryConfig, is_retryable, retry_async

__all__ = [
    # Client
    "JiraClient",
    # Exceptions - Base
    "IssueSyncInfraError",
    "ConfigurationError",
    # Exceptions - API
    "APIError",
    "AuthenticationError",
    "RateLimitError",
    "NotFoundError",
    "ValidationError",
    "ServerError",
    # Exceptions - Network
    "NetworkError",
    "ConnectionError",
    "TimeoutError",
    # Exceptions - Database
    "DatabaseError",
    "ConnectionPoolError",
    "TransactionError",
    "IntegrityError",
    # Resilience
    "RetryConfig",
    "retry_async",
    "is_retryable",
    "DEFAULT_RETRYABLE_EXCEPTIONS",
    # Database utilities
    "database_transaction",
    "acquire_connection",
    "RollbackRequested",
    "create_pool",
    "close_pool",
    "check_database_health",
]
