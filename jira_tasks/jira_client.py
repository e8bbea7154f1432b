"""JIRA Cloud REST client.

Thin async wrapper over the v3 REST API:
GET  /user/search                 → user candidates
GET  /search                      → issues matching a JQL filter
POST /issue                       → create an issue
POST /issue/{key}/transitions     → move an issue through the workflow
DELETE /issue/{key}               → delete an issue
"""

import base64
import logging
from typing import Any, Optional

import httpx

from .config import Settings

logger = logging.getLogger(__name__)

ISSUE_FIELDS = "summary,status,priority,assignee,reporter,created,description"


class JiraError(Exception):
    """Base exception for JIRA errors."""
    pass


class JiraTimeoutError(JiraError):
    """Timeout communicating with JIRA."""
    pass


class JiraAPIError(JiraError):
    """Non-2xx response from JIRA."""
    def __init__(self, message: str, status_code: int, response_body: str = ""):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class JiraClient:
    """Client for the JIRA Cloud REST API using Basic authentication."""

    def __init__(
        self,
        base_url: str,
        email: str,
        api_token: str,
        api_path: str = "/rest/api/3",
        timeout: int = 30,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.email = email
        self.api_token = api_token
        self.api_path = "/" + api_path.strip("/")
        self.timeout = timeout
        self._transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> "JiraClient":
        return cls(
            base_url=settings.jira_url,
            email=settings.jira_admin_email,
            api_token=settings.jira_api_token,
            api_path=settings.jira_api_path,
            timeout=settings.request_timeout,
            transport=transport,
        )

    @property
    def api_url(self) -> str:
        """Root URL of the REST API."""
        return f"{self.base_url}{self.api_path}"

    def _get_headers(self) -> dict[str, str]:
        """Get headers for API requests."""
        credentials = f"{self.email}:{self.api_token}".encode("utf-8")
        return {
            "Authorization": f"Basic {base64.b64encode(credentials).decode('utf-8')}",
            "Accept": "application/json",
            "Content-Type": "application/json",
        }

    async def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send a request and return the decoded JSON body.

        Returns None for empty bodies (204 responses from transitions and
        deletes). Raises JiraAPIError on non-2xx status, JiraTimeoutError on
        timeout and JiraError on any other transport failure.
        """
        url = f"{self.api_url}/{path.lstrip('/')}"
        logger.debug("%s %s params=%s", method, url, params)

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=json,
                    headers=self._get_headers(),
                )
        except httpx.TimeoutException as e:
            logger.error("%s %s timed out after %d seconds", method, path, self.timeout)
            raise JiraTimeoutError(f"Request timeout: {e}") from e
        except httpx.RequestError as e:
            logger.error("%s %s request error: %s", method, path, str(e))
            raise JiraError(f"Request error: {e}") from e

        logger.info("%s %s -> %d", method, path, response.status_code)

        if not response.is_success:
            error_text = response.text[:500]
            logger.error("JIRA API error: %d - %s", response.status_code, error_text)
            raise JiraAPIError(
                f"JIRA API error {response.status_code}",
                response.status_code,
                error_text,
            )

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise JiraError(f"Invalid JSON in response: {e}") from e

    async def get(self, path: str, params: Optional[dict[str, Any]] = None) -> Any:
        return await self.request("GET", path, params=params)

    async def post(self, path: str, json: dict[str, Any]) -> Any:
        return await self.request("POST", path, json=json)

    async def delete(self, path: str) -> Any:
        return await self.request("DELETE", path)

    # ==========================================
    # ENDPOINTS
    # ==========================================

    async def search_users(self, query: str) -> list[dict[str, Any]]:
        """Search users by name or email."""
        data = await self.get("user/search", params={"query": query})
        return data if isinstance(data, list) else []

    async def search_issues(
        self,
        jql: str,
        max_results: Optional[int] = None,
        start_at: Optional[int] = None,
    ) -> dict[str, Any]:
        """Run a JQL search."""
        params: dict[str, Any] = {"jql": jql, "fields": ISSUE_FIELDS}
        if max_results is not None:
            params["maxResults"] = max_results
        if start_at is not None:
            params["startAt"] = start_at
        data = await self.get("search", params=params)
        return data if isinstance(data, dict) else {}

    async def create_issue(self, fields: dict[str, Any]) -> dict[str, Any]:
        """Create an issue and return the created reference (id, key, self)."""
        data = await self.post("issue", json={"fields": fields})
        if not isinstance(data, dict) or not data.get("key"):
            raise JiraError("Create response did not contain an issue key")
        return data

    async def transition_issue(self, issue_key: str, transition_id: str) -> None:
        await self.post(
            f"issue/{issue_key}/transitions",
            json={"transition": {"id": transition_id}},
        )

    async def delete_issue(self, issue_key: str) -> None:
        await self.delete(f"issue/{issue_key}")
