"""
Tests for the Slack /task command surface.
"""
import gc
from unittest.mock import AsyncMock, MagicMock

import pytest

from jira_tasks.db import ConversationStore
from jira_tasks.slack_handler import SlackActivityContext, SlackHandler, to_mrkdwn

from tests.conftest import raw_issue


@pytest.fixture
async def handler(settings, actions, tmp_path):
    store = ConversationStore(str(tmp_path / "slack.db"))
    await store.initialize()
    return SlackHandler(settings=settings, store=store, actions=actions, app=MagicMock())


@pytest.fixture
def slack_client():
    client = MagicMock()
    client.chat_postMessage = AsyncMock(return_value={"ok": True})
    return client


def test_to_mrkdwn():
    assert to_mrkdwn("**Task** created **now**") == "*Task* created *now*"


async def test_activity_context_posts_to_channel(slack_client):
    context = SlackActivityContext(slack_client, "C1", thread_ts="123.4")

    await context.send_activity("**Error**")

    slack_client.chat_postMessage.assert_awaited_once_with(
        channel="C1", thread_ts="123.4", text="*Error*"
    )


async def test_create_command_persists_state(handler, jira, slack_client):
    reply = await handler.handle_command("C1", "U1", "create Fix login bug", slack_client)

    assert reply == "**Task created in JIRA with key PROJ-101.**"
    state = await handler.store.load("C1")
    assert state.get_task("Fix login bug").remote_key == "PROJ-101"


async def test_state_is_per_channel(handler, jira, slack_client):
    await handler.handle_command("C1", "U1", "create Fix login bug", slack_client)

    other = await handler.store.load("C2")
    assert other.get_task("Fix login bug") is None


async def test_delete_command_clears_state(handler, jira, slack_client):
    await handler.handle_command("C1", "U1", "create Fix login bug", slack_client)
    jira.issues = [raw_issue("PROJ-101", "Fix login bug")]

    reply = await handler.handle_command("C1", "U1", "delete Fix login bug", slack_client)

    assert reply == "**Task 'Fix login bug' deleted from JIRA.**"
    assert (await handler.store.load("C1")).get_task("Fix login bug") is None


async def test_bad_command_returns_usage(handler, jira, slack_client):
    reply = await handler.handle_command("C1", "U1", "archive everything", slack_client)

    assert "Unknown action" in reply
    assert jira.requests == []


async def test_state_load_failure_still_replies(handler, jira, slack_client):
    handler.store.load = AsyncMock(side_effect=RuntimeError("database is locked"))

    reply = await handler.handle_command("C1", "U1", "query Fix login bug", slack_client)

    assert reply == "An unexpected error occurred."
    assert jira.requests == []


async def test_channel_lock_is_shared_while_held(handler):
    lock = handler._lock_for("C1")

    assert handler._lock_for("C1") is lock
    assert handler._lock_for("C2") is not lock


async def test_idle_channel_locks_are_released(handler, jira, slack_client):
    await handler.handle_command("C1", "U1", "query Fix login bug", slack_client)
    gc.collect()

    assert "C1" not in handler._locks
