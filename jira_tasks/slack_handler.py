"""Slack surface for JIRA Task Actions."""

import asyncio
import logging
import re
import weakref
from typing import Any, Optional

from slack_bolt.async_app import AsyncApp
from slack_sdk.web.async_client import AsyncWebClient

from .actions import TaskActions
from .commands import CommandError, parse_command
from .config import Settings
from .db import ConversationStore

logger = logging.getLogger(__name__)

_BOLD = re.compile(r"\*\*(.+?)\*\*", re.DOTALL)


def to_mrkdwn(text: str) -> str:
    """Convert Markdown bold to Slack mrkdwn bold."""
    return _BOLD.sub(r"*\1*", text)


class SlackActivityContext:
    """Activity sink posting interim messages to a Slack channel."""

    def __init__(
        self,
        client: AsyncWebClient,
        channel_id: str,
        thread_ts: Optional[str] = None,
    ):
        self.client = client
        self.channel_id = channel_id
        self.thread_ts = thread_ts

    async def send_activity(self, message: str) -> Any:
        return await self.client.chat_postMessage(
            channel=self.channel_id,
            thread_ts=self.thread_ts,
            text=to_mrkdwn(message),
        )


class SlackHandler:
    """Handles all Slack interactions for JIRA Task Actions."""

    def __init__(
        self,
        settings: Settings,
        store: ConversationStore,
        actions: TaskActions,
        app: Optional[AsyncApp] = None,
    ):
        self.settings = settings
        self.store = store
        self.actions = actions

        # One turn at a time per conversation; idle locks are dropped
        self._locks: "weakref.WeakValueDictionary[str, asyncio.Lock]" = weakref.WeakValueDictionary()

        # Initialize Slack app
        self.app = app or AsyncApp(token=settings.slack_bot_token)

        # Register handlers
        self._register_handlers()

    def _register_handlers(self) -> None:
        """Register all Slack event handlers."""

        @self.app.command(self.settings.slack_command)
        async def handle_task_command(ack, command: dict, client: AsyncWebClient) -> None:
            """Handle /task command."""
            await ack()

            reply = await self.handle_command(
                channel_id=command["channel_id"],
                user_id=command["user_id"],
                text=command.get("text", ""),
                client=client,
            )
            await client.chat_postMessage(
                channel=command["channel_id"],
                text=to_mrkdwn(reply),
            )

    def _lock_for(self, conversation_id: str) -> asyncio.Lock:
        lock = self._locks.get(conversation_id)
        if lock is None:
            lock = self._locks[conversation_id] = asyncio.Lock()
        return lock

    async def handle_command(
        self,
        channel_id: str,
        user_id: str,
        text: str,
        client: AsyncWebClient,
        thread_ts: Optional[str] = None,
    ) -> str:
        """Run one task command and return the reply text."""
        try:
            action, params = parse_command(text)
        except CommandError as e:
            return str(e)

        logger.info("User %s ran %s in %s", user_id, action, channel_id)

        context = SlackActivityContext(client, channel_id, thread_ts)
        lock = self._lock_for(channel_id)
        async with lock:
            try:
                state = await self.store.load(channel_id)
                reply = await self.actions.dispatch(action, context, state, params)
            except Exception:
                logger.exception("Task action %s failed", action)
                return "An unexpected error occurred."

            try:
                await self.store.save(channel_id, state)
            except Exception:
                logger.exception("Could not save state for %s", channel_id)

        return reply

    async def start(self) -> None:
        """Start the Slack handler."""
        from slack_bolt.adapter.socket_mode.async_handler import AsyncSocketModeHandler

        logger.info("Starting Slack handler in Socket Mode...")

        handler = AsyncSocketModeHandler(self.app, self.settings.slack_app_token)
        await handler.start_async()
