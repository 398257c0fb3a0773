#!/usr/bin/env python3
"""HTTP Client for the Jira Cloud REST API.

This client knows HOW to talk to Jira, but not WHAT to fetch. It handles:

    - Static API token authentication (``Authorization: <scheme> <token>``)
    - Connection pooling via a shared aiohttp session
    - Mapping of HTTP failures to typed exceptions

It performs exactly one request per call. Retries and pagination belong to
the issue API adapter that composes this client.

Usage:
    async with JiraClient(base_url, api_token) as client:
        data = await client.search_issues({"jql": "project in (ABC)", "maxResults": 100})
"""
import asyncio
import logging
from typing import Any, Optional

import aiohttp

from .exceptions import (
    APIError,
    AuthenticationError,
    ConfigurationError,
    ConnectionError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
    TimeoutError,
    ValidationError,
)

logger = logging.getLogger(__name__)


class JiraClient:
    """Async HTTP client for the Jira Cloud REST API.

    Use it as an async context manager so the session is always closed:

        async with JiraClient(base_url, api_token) as client:
            data = await client.search_issues(body)

    Attributes:
        base_url: Jira site URL (e.g., "https://example.atlassian.net")
        auth_scheme: Authorization scheme sent with the token ("Basic" or "Bearer")
    """

    SEARCH_ENDPOINT = "/rest/api/3/search/jql"

    def __init__(
        self,
        base_url: str,
        api_token: str,
        auth_scheme: str = "Basic",
        timeout_seconds: float = 60.0,
    ):
        """Initialize the JiraClient.

        Raises:
            ConfigurationError: If base_url or api_token is empty.
        """
        missing = []
        if not base_url:
            missing.append("JIRA_BASE_URL")
        if not api_token:
            missing.append("JIRA_API_TOKEN")
        if missing:
            raise ConfigurationError(
                f"Missing Jira client configuration: {', '.join(missing)}",
                missing_keys=missing,
            )

        self.base_url = base_url.rstrip("/")
        self.auth_scheme = auth_scheme
        self.timeout_seconds = timeout_seconds
        self._api_token = api_token

        # Session is created in __aenter__, closed in __aexit__
        self._session: Optional[aiohttp.ClientSession] = None

    # ----------------------------------------
    # Context Manager Protocol
    # ----------------------------------------

    async def __aenter__(self) -> "JiraClient":
        """Enter async context: create the HTTP session."""
        self._session = aiohttp.ClientSession(
            connector=aiohttp.TCPConnector(
                limit=10,
                limit_per_host=10,
            ),
            timeout=aiohttp.ClientTimeout(
                total=self.timeout_seconds,
                connect=10,
            ),
        )
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Exit async context: close the HTTP session."""
        if self._session:
            await self._session.close()
            self._session = None

    # ----------------------------------------
    # Requests
    # ----------------------------------------

    def _auth_headers(self) -> dict[str, str]:
        return {
            "Authorization": f"{self.auth_scheme} {self._api_token}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def _request(
        self,
        method: str,
        endpoint: str,
        params: Optional[dict] = None,
        json_body: Optional[dict] = None,
    ) -> dict[str, Any]:
        """Make a single HTTP request (no retry logic).

        Raises:
            APIError: If response status is not 2xx or the body is not JSON
            RuntimeError: If called outside of async context manager
            ConnectionError: If connection to server fails
            TimeoutError: If request times out
        """
        if not self._session:
            raise RuntimeError(
                "JiraClient must be used as async context manager: "
                "async with JiraClient(...) as client:"
            )

        url = f"{self.base_url}{endpoint}"

        try:
            async with self._session.request(
                method=method,
                url=url,
                headers=self._auth_headers(),
                params=params,
                json=json_body,
            ) as response:
                if response.status >= 400:
                    error_text = await response.text()
                    raise self._create_api_error(
                        status=response.status,
                        method=method,
                        endpoint=endpoint,
                        response_body=error_text,
                        retry_after=response.headers.get("Retry-After"),
                    )

                try:
                    return await response.json()
                except (aiohttp.ContentTypeError, ValueError) as e:
                    raise APIError(
                        f"Malformed JSON response from {method} {endpoint}",
                        status_code=response.status,
                        endpoint=endpoint,
                        method=method,
                        recoverable=False,
                        cause=e,
                    )

        except aiohttp.ClientConnectionError as e:
            raise ConnectionError(
                f"Failed to connect to {self.base_url}",
                host=self.base_url,
                cause=e,
            )

        except asyncio.TimeoutError as e:
            raise TimeoutError(
                f"Request to {endpoint} timed out",
                timeout_seconds=self.timeout_seconds,
                cause=e,
            )

        except aiohttp.ClientError as e:
            raise NetworkError(
                f"Network error during {method} {endpoint}: {e}",
                cause=e,
            )

    def _create_api_error(
        self,
        status: int,
        method: str,
        endpoint: str,
        response_body: str,
        retry_after: Optional[str] = None,
    ) -> APIError:
        """Create appropriate APIError subclass based on status code."""
        if status in (401, 403):
            return AuthenticationError(
                f"Jira rejected the API token for {method} {endpoint}",
                status_code=status,
                endpoint=endpoint,
                response_body=response_body,
            )

        if status == 404:
            return NotFoundError(
                endpoint,
                response_body=response_body,
            )

        if status == 429:
            try:
                seconds = float(retry_after) if retry_after else None
            except ValueError:
                seconds = None
            return RateLimitError(
                f"Rate limit exceeded for {endpoint}",
                retry_after=seconds,
                endpoint=endpoint,
                response_body=response_body,
            )

        if status in (400, 422):
            return ValidationError(
                f"Validation failed for {method} {endpoint}",
                status_code=status,
                endpoint=endpoint,
                response_body=response_body,
            )

        if status >= 500:
            return ServerError(
                f"Server error ({status}) for {method} {endpoint}",
                status_code=status,
                endpoint=endpoint,
                response_body=response_body,
            )

        return APIError(
            f"{method} {endpoint} failed",
            status_code=status,
            endpoint=endpoint,
            method=method,
            response_body=response_body,
        )

    async def post(
        self,
        endpoint: str,
        json_body: dict,
        params: Optional[dict] = None,
    ) -> dict[str, Any]:
        """Make a POST request and return the parsed JSON body."""
        return await self._request("POST", endpoint, params=params, json_body=json_body)

    async def search_issues(self, body: dict[str, Any]) -> dict[str, Any]:
        """Run one page of a JQL search.

        Args:
            body: Search request (jql, fields, maxResults, nextPageToken)

        Returns:
            Raw search response with ``issues``, ``isLast`` and ``nextPageToken``
        """
        logger.debug(f"POST {self.SEARCH_ENDPOINT} token={body.get('nextPageToken')!r}")
        return await self.post(self.SEARCH_ENDPOINT, json_body=body)
