"""
Todoist API Client - Low-level HTTP client for the Todoist REST API.

This handles the raw HTTP communication with Todoist.
The TodoistAdapter uses this to implement the TaskServicePort.

Todoist REST API documentation:
https://developer.todoist.com/rest/v2/
"""

import logging
import uuid
from typing import Any

import requests
from requests.adapters import HTTPAdapter

from orgsync.core.exceptions import (
    AccessDeniedError,
    AuthenticationError,
    RateLimitError,
    ResourceNotFoundError,
    TransportError,
)


class TodoistApiClient:
    """
    Low-level Todoist REST API client.

    Handles authentication, request/response and error handling.

    Every request honors the configured timeout and fails fast: there are no
    automatic retries. Retrying is a policy decision of the caller.
    """

    DEFAULT_BASE_URL = "https://api.todoist.com/rest/v2"
    DEFAULT_TIMEOUT = 30.0

    # Connection pool settings
    DEFAULT_POOL_CONNECTIONS = 10
    DEFAULT_POOL_MAXSIZE = 10

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float | None = DEFAULT_TIMEOUT,
    ):
        """
        Initialize the Todoist client.

        Args:
            token: Personal API token
            base_url: REST API base URL
            timeout: Request timeout in seconds (None uses the default)
        """
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout if timeout is not None else self.DEFAULT_TIMEOUT
        self.logger = logging.getLogger("TodoistApiClient")

        self.headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {token}",
        }

        # Configure session with connection pooling
        self._session = requests.Session()
        self._session.headers.update(self.headers)

        adapter = HTTPAdapter(
            pool_connections=self.DEFAULT_POOL_CONNECTIONS,
            pool_maxsize=self.DEFAULT_POOL_MAXSIZE,
            max_retries=0,
        )
        self._session.mount("https://", adapter)
        self._session.mount("http://", adapter)

    # -------------------------------------------------------------------------
    # Core Request Methods
    # -------------------------------------------------------------------------

    def request(
        self,
        method: str,
        endpoint: str,
        task_id: str | None = None,
        **kwargs: Any,
    ) -> dict[str, Any] | list[Any]:
        """
        Make an authenticated request to the Todoist API.

        Args:
            method: HTTP method
            endpoint: API endpoint (e.g., 'tasks')
            task_id: Task the request concerns, attached to errors
            **kwargs: Additional arguments for requests

        Returns:
            JSON response (dict or list)

        Raises:
            TransportError: On network errors, timeouts and non-2xx responses
        """
        url = endpoint if endpoint.startswith("http") else f"{self.base_url}/{endpoint.lstrip('/')}"
        kwargs.setdefault("timeout", self.timeout)

        try:
            response = self._session.request(method, url, **kwargs)
        except requests.exceptions.Timeout as e:
            raise TransportError(
                f"Request timed out after {kwargs['timeout']}s: {method} {endpoint}",
                task_id=task_id,
                cause=e,
            ) from e
        except requests.exceptions.RequestException as e:
            raise TransportError(
                f"Connection failed: {method} {endpoint}", task_id=task_id, cause=e
            ) from e

        return self._handle_response(response, endpoint, task_id)

    def get(self, endpoint: str, **kwargs: Any) -> dict[str, Any] | list[Any]:
        """Perform a GET request."""
        return self.request("GET", endpoint, **kwargs)

    def post(
        self,
        endpoint: str,
        json: dict[str, Any] | None = None,
        **kwargs: Any,
    ) -> dict[str, Any] | list[Any]:
        """Perform a POST request with an idempotency key."""
        headers = kwargs.pop("headers", {})
        headers.setdefault("X-Request-Id", str(uuid.uuid4()))
        return self.request("POST", endpoint, json=json, headers=headers, **kwargs)

    def delete(self, endpoint: str, **kwargs: Any) -> dict[str, Any] | list[Any]:
        """Perform a DELETE request."""
        return self.request("DELETE", endpoint, **kwargs)

    # -------------------------------------------------------------------------
    # Response Handling
    # -------------------------------------------------------------------------

    def _handle_response(
        self, response: requests.Response, endpoint: str, task_id: str | None
    ) -> dict[str, Any] | list[Any]:
        """Handle API response and convert errors to typed exceptions."""
        if response.ok:
            if response.text:
                try:
                    json_data = response.json()
                    if isinstance(json_data, (dict, list)):
                        return json_data
                    return {}
                except ValueError:
                    # DELETE and some POSTs answer 204 without a body
                    return {}
            return {}

        status = response.status_code
        error_body = response.text[:500] if response.text else ""

        if status == 401:
            raise AuthenticationError(
                "Todoist authentication failed. Check your API token.",
                task_id=task_id,
                status_code=status,
            )

        if status == 403:
            raise AccessDeniedError(
                f"Permission denied for {endpoint}", task_id=task_id, status_code=status
            )

        if status == 404:
            raise ResourceNotFoundError(
                f"Not found: {endpoint}", task_id=task_id, status_code=status
            )

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                f"Todoist rate limit exceeded for {endpoint}",
                retry_after=float(retry_after) if retry_after and retry_after.isdigit() else None,
                task_id=task_id,
            )

        raise TransportError(
            f"Todoist API error {status}: {error_body}", task_id=task_id, status_code=status
        )

    # -------------------------------------------------------------------------
    # Projects API
    # -------------------------------------------------------------------------

    def get_projects(self) -> list[dict[str, Any]]:
        """Get all projects of the user."""
        result = self.get("projects")
        return result if isinstance(result, list) else []

    # -------------------------------------------------------------------------
    # Tasks API
    # -------------------------------------------------------------------------

    def get_tasks(self, project_id: str | None = None) -> list[dict[str, Any]]:
        """
        Get active tasks.

        Args:
            project_id: Only return tasks of this project
        """
        params = {"project_id": project_id} if project_id else None
        result = self.get("tasks", params=params)
        return result if isinstance(result, list) else []

    def create_task(self, data: dict[str, Any]) -> dict[str, Any]:
        """Create a task; the response carries the assigned id."""
        result = self.post("tasks", json=data)
        return result if isinstance(result, dict) else {}

    def update_task(self, task_id: str, data: dict[str, Any]) -> dict[str, Any]:
        """Update a task."""
        result = self.post(f"tasks/{task_id}", json=data, task_id=task_id)
        return result if isinstance(result, dict) else {}

    def delete_task(self, task_id: str) -> None:
        """Delete a task."""
        self.delete(f"tasks/{task_id}", task_id=task_id)

    # -------------------------------------------------------------------------
    # Resource Cleanup
    # -------------------------------------------------------------------------

    def close(self) -> None:
        """Close the client and release connection pool resources."""
        self._session.close()
        self.logger.debug("Closed HTTP session")

    def __enter__(self) -> "TodoistApiClient":
        """Context manager entry."""
        return self

    def __exit__(
        self,
        exc_type: type | None,
        exc_val: Exception | None,
        exc_tb: Any,
    ) -> None:
        """Context manager exit."""
        self.close()
