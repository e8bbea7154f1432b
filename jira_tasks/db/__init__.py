"""Database module for JIRA Task Actions."""

from .models import StoredConversation
from .manager import ConversationStore

__all__ = [
    "StoredConversation",
    "ConversationStore",
]
