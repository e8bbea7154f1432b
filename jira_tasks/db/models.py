"""Database models for JIRA Task Actions."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any


@dataclass
class StoredConversation:
    """Persisted state of one chat conversation."""
    conversation_id: str
    state: dict[str, Any] = field(default_factory=dict)
    updated_at: datetime = field(default_factory=datetime.utcnow)
