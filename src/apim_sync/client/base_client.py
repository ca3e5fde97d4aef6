"""Base HTTP client for APIM Sync.

This module provides a base async HTTP client with bearer authentication,
request/response logging and mapping of HTTP error statuses to exceptions.
Requests are issued one at a time and are never retried.
"""

import time
from typing import Any
from urllib.parse import urljoin

import httpx

from apim_sync.client.exceptions import (
    APIError,
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    NetworkError,
    NotFoundError,
    RateLimitError,
    ServerError,
)
from apim_sync.config import HttpConfig
from apim_sync.utils.logging import (
    get_logger,
    log_api_request,
    sanitize_payload,
    truncate_payload,
)

logger = get_logger(__name__)


class BaseAPIClient:
    """Base async HTTP client for platform management APIs.

    This client provides:
    - Bearer token authentication
    - Request/response logging with secret redaction
    - Error handling and exception mapping
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        http_config: HttpConfig | None = None,
        default_params: dict[str, str] | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize base API client.

        Args:
            base_url: Base URL for API requests
            token: Bearer token
            http_config: Timeout, SSL and payload logging settings
            default_params: Query parameters sent with every request
            transport: Optional transport override (used by tests)
        """
        http_config = http_config or HttpConfig()

        self.base_url = base_url.rstrip("/")
        self.token = token
        self.default_params = default_params or {}
        self.log_payloads = http_config.log_payloads
        self.max_payload_size = http_config.max_payload_size

        self.client = httpx.AsyncClient(
            headers=self._build_headers(),
            timeout=httpx.Timeout(http_config.timeout, connect=10.0),
            verify=http_config.verify_ssl,
            follow_redirects=True,
            transport=transport,
        )

        logger.debug("client_initialized", base_url=self.base_url)

    def _build_headers(self) -> dict[str, str]:
        """Build HTTP headers for requests."""
        return {
            "Authorization": f"Bearer {self.token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def _build_url(self, endpoint: str) -> str:
        """Build full URL from an endpoint path relative to the base URL."""
        if not endpoint:
            return self.base_url
        return urljoin(f"{self.base_url}/", endpoint.lstrip("/"))

    def _handle_error_response(self, response: httpx.Response) -> None:
        """Raise the exception matching an error response.

        Raises:
            AuthenticationError: For 401 responses
            AuthorizationError: For 403 responses
            NotFoundError: For 404 responses
            ConflictError: For 409 responses
            RateLimitError: For 429 responses
            ServerError: For 5xx responses
            APIError: For other error responses
        """
        status_code = response.status_code

        try:
            error_data = response.json()
        except ValueError:
            error_data = {"detail": response.text}

        if not isinstance(error_data, dict):
            error_data = {"detail": str(error_data)}

        error = error_data.get("error")
        if isinstance(error, dict):
            error_message = error.get("message", "Unknown error")
        else:
            error_message = error_data.get("detail", error_data.get("message", "Unknown error"))

        if status_code == 401:
            raise AuthenticationError(
                message="Authentication failed", status_code=status_code, response=error_data
            )
        elif status_code == 403:
            raise AuthorizationError(
                message="Authorization failed", status_code=status_code, response=error_data
            )
        elif status_code == 404:
            raise NotFoundError(
                message="Resource not found", status_code=status_code, response=error_data
            )
        elif status_code == 409:
            raise ConflictError(
                message="Resource conflict (may already exist)",
                status_code=status_code,
                response=error_data,
            )
        elif status_code == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                message="Rate limit exceeded",
                status_code=status_code,
                response=error_data,
                retry_after=int(retry_after) if retry_after and retry_after.isdigit() else None,
            )
        elif 500 <= status_code < 600:
            raise ServerError(
                message=f"Server error: {error_message}",
                status_code=status_code,
                response=error_data,
            )
        else:
            raise APIError(
                message=f"API error: {error_message}",
                status_code=status_code,
                response=error_data,
            )

    async def request(
        self,
        method: str,
        endpoint: str,
        params: dict[str, Any] | None = None,
        json_data: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make an HTTP request and return the decoded JSON body.

        Args:
            method: HTTP method
            endpoint: API endpoint path
            params: Query parameters (merged over the default parameters)
            json_data: JSON request body

        Returns:
            Response JSON data (empty dict for empty bodies)

        Raises:
            NetworkError: For transport failures and timeouts
            APIError: Or one of its subclasses for error statuses
        """
        # A query carried by the endpoint (e.g. a nextLink skip token) is merged into
        # params; httpx drops the URL's own query when params are given
        url, _, url_query = self._build_url(endpoint).partition("?")
        query = {
            **self.default_params,
            **dict(httpx.QueryParams(url_query)),
            **(params or {}),
        }

        if self.log_payloads and json_data is not None:
            logger.debug(
                "api_request_payload",
                method=method,
                url=url,
                payload=truncate_payload(sanitize_payload(json_data), self.max_payload_size),
            )

        start_time = time.time()

        try:
            response = await self.client.request(
                method=method, url=url, params=query or None, json=json_data
            )
        except httpx.TimeoutException as e:
            logger.error("timeout_error", method=method, url=url, error=str(e))
            raise NetworkError(f"Request timeout: {e}") from e
        except httpx.TransportError as e:
            logger.error("network_error", method=method, url=url, error=str(e))
            raise NetworkError(f"Network error: {e}") from e

        log_api_request(
            logger,
            method=method,
            url=url,
            status_code=response.status_code,
            duration_ms=(time.time() - start_time) * 1000,
        )

        if self.log_payloads and response.text:
            logger.debug(
                "api_response_payload",
                method=method,
                url=url,
                status_code=response.status_code,
                payload=response.text[: self.max_payload_size],
            )

        if response.status_code >= 400:
            self._handle_error_response(response)

        if not response.text:
            return {}

        try:
            return response.json()
        except ValueError as e:
            raise APIError(
                message="Response body is not valid JSON", status_code=response.status_code
            ) from e

    async def get(self, endpoint: str, params: dict[str, Any] | None = None) -> dict[str, Any]:
        """Make a GET request."""
        return await self.request("GET", endpoint, params=params)

    async def post(
        self,
        endpoint: str,
        json_data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make a POST request."""
        return await self.request("POST", endpoint, params=params, json_data=json_data)

    async def patch(
        self,
        endpoint: str,
        json_data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """Make a PATCH request."""
        return await self.request("PATCH", endpoint, params=params, json_data=json_data)

    async def close(self) -> None:
        """Close the HTTP client and clean up resources."""
        await self.client.aclose()
        logger.debug("client_closed", base_url=self.base_url)

    async def __aenter__(self) -> "BaseAPIClient":
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        await self.close()
