"""Conversation state storage for JIRA Task Actions."""

import json
from datetime import datetime
from typing import Optional
import logging

import aiosqlite

from ..state import TurnState
from .models import StoredConversation

logger = logging.getLogger(__name__)


class ConversationStore:
    """Persists per-conversation state between chat turns."""

    def __init__(self, db_path: str):
        self.db_path = db_path
        self._initialized = False

    async def initialize(self) -> None:
        """Initialize database schema."""
        if self._initialized:
            return

        async with aiosqlite.connect(self.db_path) as db:
            await db.execute("""
                CREATE TABLE IF NOT EXISTS conversations (
                    conversation_id TEXT PRIMARY KEY,
                    state TEXT NOT NULL,
                    updated_at TIMESTAMP NOT NULL
                )
            """)
            await db.commit()

        self._initialized = True
        logger.info("Database initialized at %s", self.db_path)

    async def get_conversation(self, conversation_id: str) -> Optional[StoredConversation]:
        """Get the stored state of a conversation."""
        async with aiosqlite.connect(self.db_path) as db:
            db.row_factory = aiosqlite.Row
            async with db.execute(
                "SELECT * FROM conversations WHERE conversation_id = ?",
                (conversation_id,),
            ) as cursor:
                row = await cursor.fetchone()
                if row:
                    return StoredConversation(
                        conversation_id=row["conversation_id"],
                        state=json.loads(row["state"]),
                        updated_at=datetime.fromisoformat(row["updated_at"]),
                    )
        return None

    async def load(self, conversation_id: str) -> TurnState:
        """Load turn state, empty for a new conversation."""
        stored = await self.get_conversation(conversation_id)
        return TurnState.from_dict(stored.state if stored else None)

    async def save(self, conversation_id: str, state: TurnState) -> None:
        """Insert or replace the state of a conversation."""
        async with aiosqlite.connect(self.db_path) as db:
            await db.execute(
                """
                INSERT INTO conversations (conversation_id, state, updated_at)
                VALUES (?, ?, ?)
                ON CONFLICT(conversation_id) DO UPDATE SET
                    state = excluded.state,
                    updated_at = excluded.updated_at
                """,
                (
                    conversation_id,
                    json.dumps(state.to_dict()),
                    datetime.utcnow().isoformat(),
                ),
            )
            await db.commit()

        logger.debug("Saved state for conversation %s", conversation_id)

    async def delete(self, conversation_id: str) -> bool:
        """Forget a conversation. Returns True if a row was removed."""
        async with aiosqlite.connect(self.db_path) as db:
            cursor = await db.execute(
                "DELETE FROM conversations WHERE conversation_id = ?",
                (conversation_id,),
            )
            await db.commit()
            return cursor.rowcount > 0

    async def get_stats(self) -> dict[str, int]:
        """Counts of stored conversations and cached tasks."""
        conversations = 0
        tasks = 0
        async with aiosqlite.connect(self.db_path) as db:
            async with db.execute("SELECT state FROM conversations") as cursor:
                async for (state_json,) in cursor:
                    conversations += 1
                    tasks += len(json.loads(state_json).get("tasks") or {})
        return {"conversations": conversations, "cached_tasks": tasks}
