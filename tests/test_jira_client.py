"""
Tests for the JIRA REST client.
"""
import base64

import httpx
import pytest

from jira_tasks.jira_client import JiraAPIError, JiraClient, JiraError, JiraTimeoutError

from tests.conftest import API, BASE_URL


async def test_requests_use_basic_auth(client, jira):
    await client.search_users("alice")

    request = jira.requests[0]
    expected = base64.b64encode(b"admin@example.com:secret-token").decode()
    assert request.headers["Authorization"] == f"Basic {expected}"
    assert request.headers["Content-Type"] == "application/json"
    assert str(request.url).startswith(BASE_URL + API + "/user/search")
    assert request.url.params["query"] == "alice"


async def test_search_issues_sends_pagination(client, jira):
    await client.search_issues('project = "PROJ"', max_results=10, start_at=20)

    params = jira.requests[0].url.params
    assert params["jql"] == 'project = "PROJ"'
    assert params["maxResults"] == "10"
    assert params["startAt"] == "20"
    assert "summary" in params["fields"]


async def test_empty_body_returns_none(client, jira):
    assert await client.delete("issue/PROJ-1") is None


async def test_non_2xx_raises_api_error(client, jira):
    jira.errors[("POST", "/issue")] = 400

    with pytest.raises(JiraAPIError) as exc_info:
        await client.create_issue({"summary": "x"})

    assert exc_info.value.status_code == 400
    assert "boom" in exc_info.value.response_body


async def test_timeout_raises_timeout_error():
    def handler(request):
        raise httpx.ReadTimeout("too slow", request=request)

    client = JiraClient(BASE_URL, "a@b.c", "t", transport=httpx.MockTransport(handler))

    with pytest.raises(JiraTimeoutError):
        await client.get("search")


async def test_connection_error_raises_jira_error():
    def handler(request):
        raise httpx.ConnectError("refused", request=request)

    client = JiraClient(BASE_URL, "a@b.c", "t", transport=httpx.MockTransport(handler))

    with pytest.raises(JiraError):
        await client.get("search")


async def test_create_without_key_is_an_error():
    client = JiraClient(
        BASE_URL, "a@b.c", "t",
        transport=httpx.MockTransport(lambda r: httpx.Response(201, json={"id": "1"})),
    )

    with pytest.raises(JiraError):
        await client.create_issue({"summary": "x"})
