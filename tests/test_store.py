"""
Tests for conversation state persistence.
"""
import pytest

from jira_tasks.db import ConversationStore
from jira_tasks.models import LocalTaskRecord
from jira_tasks.state import TurnState


@pytest.fixture
async def store(tmp_path):
    store = ConversationStore(str(tmp_path / "test.db"))
    await store.initialize()
    return store


async def test_new_conversation_is_empty(store):
    state = await store.load("C1")

    assert state.conversation == {}
    assert await store.get_conversation("C1") is None


async def test_saved_tasks_survive_reload(store):
    state = TurnState(conversation={"topic": "sprint"})
    state.remember_task(
        LocalTaskRecord(title="Fix login bug", assignees=["alice"], remote_key="PROJ-1")
    )
    await store.save("C1", state)

    reloaded = await store.load("C1")

    assert reloaded.conversation["topic"] == "sprint"
    assert reloaded.get_task("Fix login bug") == state.get_task("Fix login bug")
    assert await store.get_stats() == {"conversations": 1, "cached_tasks": 1}


async def test_save_overwrites_and_delete(store):
    state = TurnState()
    state.remember_task(LocalTaskRecord(title="a"))
    await store.save("C1", state)
    state.forget_task("a")
    await store.save("C1", state)

    assert (await store.load("C1")).get_task("a") is None
    assert await store.delete("C1") is True
    assert await store.delete("C1") is False
