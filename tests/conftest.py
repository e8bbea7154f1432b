"""
Shared fixtures: a fake JIRA served through httpx.MockTransport.
"""
import json
from typing import Any, Optional
from unittest.mock import AsyncMock

import httpx
import pytest

from jira_tasks.actions import TaskActions
from jira_tasks.config import Settings
from jira_tasks.jira_client import JiraClient
from jira_tasks.state import TurnState

BASE_URL = "https://example.atlassian.net"
API = "/rest/api/3"


def raw_issue(key: str, summary: str, **fields: Any) -> dict:
    """Issue payload shaped like the JIRA search response."""
    data = {"summary": summary}
    if "status" in fields:
        data["status"] = {"name": fields.pop("status")}
    if "priority" in fields:
        data["priority"] = {"name": fields.pop("priority")}
    if "assignee" in fields:
        data["assignee"] = {"displayName": fields.pop("assignee")}
    if "reporter" in fields:
        data["reporter"] = {"displayName": fields.pop("reporter")}
    data.update(fields)
    return {"key": key, "fields": data}


class FakeJira:
    """Records requests and answers them like JIRA Cloud."""

    def __init__(self):
        self.requests: list[httpx.Request] = []
        self.users: dict[str, list[dict]] = {}
        self.issues: list[dict] = []
        self.total: Optional[int] = None
        self.created_key = "PROJ-101"
        self.errors: dict[tuple[str, str], int] = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        method = request.method
        path = request.url.path[len(API):]

        status = self.errors.get((method, path))
        if status:
            return httpx.Response(status, json={"errorMessages": ["boom"]})

        if method == "GET" and path == "/user/search":
            query = request.url.params.get("query")
            return httpx.Response(200, json=self.users.get(query, []))
        if method == "GET" and path == "/search":
            total = self.total if self.total is not None else len(self.issues)
            return httpx.Response(200, json={"issues": self.issues, "total": total})
        if method == "POST" and path == "/issue":
            return httpx.Response(201, json={"id": "10001", "key": self.created_key})
        if method == "POST" and path.endswith("/transitions"):
            return httpx.Response(204)
        if method == "DELETE" and path.startswith("/issue/"):
            return httpx.Response(204)
        return httpx.Response(404, json={"errorMessages": ["not found"]})

    def add_user(self, query: str, account_id: str, name: str = "") -> None:
        self.users[query] = [{"accountId": account_id, "displayName": name or query}]

    def calls(self, method: str, path: str) -> list[httpx.Request]:
        return [
            r for r in self.requests
            if r.method == method and r.url.path == API + path
        ]

    def body(self, request: httpx.Request) -> dict:
        return json.loads(request.content)

    @property
    def mutating_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.method in ("POST", "DELETE")]


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        jira_base_url=BASE_URL + "/",
        jira_admin_email="admin@example.com",
        jira_api_token="secret-token",
        jira_project_key="PROJ",
        display_timezone="UTC",
    )


@pytest.fixture
def jira():
    return FakeJira()


@pytest.fixture
def client(settings, jira):
    return JiraClient.from_settings(settings, transport=httpx.MockTransport(jira.handler))


@pytest.fixture
def actions(settings, client):
    return TaskActions(settings, client=client)


@pytest.fixture
def context():
    ctx = AsyncMock()
    ctx.send_activity = AsyncMock()
    return ctx


@pytest.fixture
def state():
    return TurnState()
