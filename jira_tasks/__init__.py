"""JIRA task actions for conversational bots."""

from .actions import ActivityContext, TaskActions
from .config import Settings, get_settings
from .jira_client import JiraAPIError, JiraClient, JiraError, JiraTimeoutError
from .models import Issue, LocalTaskRecord, SearchResult, TaskParameters, TaskStatus, UserRef
from .state import TurnState

__all__ = [
    "ActivityContext",
    "TaskActions",
    "Settings",
    "get_settings",
    "JiraAPIError",
    "JiraClient",
    "JiraError",
    "JiraTimeoutError",
    "Issue",
    "LocalTaskRecord",
    "SearchResult",
    "TaskParameters",
    "TaskStatus",
    "UserRef",
    "TurnState",
]
