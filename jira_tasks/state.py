"""Per-conversation state shared with the surrounding bot."""

from dataclasses import dataclass, field
from typing import Any, Optional

from .models import LocalTaskRecord

TASKS_KEY = "tasks"


@dataclass
class TurnState:
    """Mutable state of one conversation.

    Actions only read and write ``conversation["tasks"]``, a map from task
    title to LocalTaskRecord. The map is created on first write.
    """
    conversation: dict[str, Any] = field(default_factory=dict)

    def get_task(self, title: str) -> Optional[LocalTaskRecord]:
        tasks = self.conversation.get(TASKS_KEY) or {}
        return tasks.get(title)

    def remember_task(self, record: LocalTaskRecord) -> None:
        tasks = self.conversation.setdefault(TASKS_KEY, {})
        tasks[record.title] = record

    def forget_task(self, title: str) -> bool:
        """Drop the cached task with this exact title, if present."""
        tasks = self.conversation.get(TASKS_KEY)
        if tasks and title in tasks:
            del tasks[title]
            return True
        return False

    def to_dict(self) -> dict[str, Any]:
        data = {k: v for k, v in self.conversation.items() if k != TASKS_KEY}
        if TASKS_KEY in self.conversation:
            data[TASKS_KEY] = {
                title: record.to_dict()
                for title, record in self.conversation[TASKS_KEY].items()
            }
        return data

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "TurnState":
        conversation = dict(data or {})
        if TASKS_KEY in conversation:
            conversation[TASKS_KEY] = {
                title: LocalTaskRecord.from_dict(record)
                for title, record in (conversation[TASKS_KEY] or {}).items()
            }
        return cls(conversation=conversation)
