"""Task actions invoked by the conversational bot.

Each action takes ``(context, state, parameters)`` and returns a Markdown
string for the chat surface. Not-found and ambiguous outcomes are plain
return values. The context's ``send_activity`` is used only for error
notifications that carry the underlying JIRA error.
"""

import logging
from typing import Any, Mapping, Optional, Protocol, Sequence

from .config import Settings
from .finder import IssueFinder
from .formatting import (
    format_candidates,
    format_existing,
    format_issue_details,
    format_listing,
    format_not_found,
    format_search_error,
    text_to_adf,
)
from .jira_client import JiraClient, JiraError
from .models import LocalTaskRecord, SearchResult, TaskParameters
from .state import TurnState
from .users import UserResolver

logger = logging.getLogger(__name__)

TITLE_REQUIRED = "**A task title is required.**"


class ActivityContext(Protocol):
    """Anything able to push an interim message to the chat."""

    async def send_activity(self, message: str) -> Any:
        ...


class TaskActions:
    """Create, update, delete, query and list JIRA tasks."""

    # Bot-facing action names
    ACTIONS = {
        "createTask": "create_task",
        "updateTask": "update_task",
        "deleteTask": "delete_task",
        "queryTask": "query_task",
        "listTasks": "list_tasks",
    }

    def __init__(self, settings: Settings, client: Optional[JiraClient] = None):
        self.settings = settings
        self.client = client or JiraClient.from_settings(settings)
        self.users = UserResolver(self.client)
        self.finder = IssueFinder(
            self.client,
            project_key=settings.jira_project_key,
            issue_type=settings.jira_issue_type,
        )

    async def dispatch(
        self,
        name: str,
        context: ActivityContext,
        state: TurnState,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Run an action by its bot-facing or snake_case name."""
        method_name = self.ACTIONS.get(name, name)
        if method_name not in self.ACTIONS.values():
            raise KeyError(f"Unknown task action: {name}")
        action = getattr(self, method_name)
        return await action(context, state, parameters)

    async def _notify(self, context: ActivityContext, message: str) -> None:
        try:
            await context.send_activity(message)
        except Exception as e:
            logger.warning("Could not send activity: %s", str(e))

    async def _resolve_assignee(self, assignees: Sequence[str]) -> Optional[str]:
        """Account id of the primary assignee, else the admin, else None."""
        admin = self.settings.jira_admin_email
        primary = assignees[0] if assignees else admin

        user = await self.users.resolve(primary)
        if user is None and primary != admin:
            logger.info("Assignee %r not found, falling back to admin", primary)
            user = await self.users.resolve(admin)
        return user.account_id if user else None

    async def _find_single(self, title: str, verb: str) -> tuple[Optional[str], Optional[SearchResult]]:
        """Resolve a title to exactly one issue.

        Returns ``(message, None)`` when there is nothing to act on, or
        ``(None, result)`` with a single issue in ``result.issues``.
        """
        result = await self.finder.find_by_title(title)
        if not result.ok:
            return format_search_error(result.error), None
        if not result.issues:
            return format_not_found(title), None
        if len(result.issues) > 1:
            return format_candidates(title, result.issues, verb), None
        return None, result

    # ==========================================
    # ACTIONS
    # ==========================================

    async def create_task(
        self,
        context: ActivityContext,
        state: TurnState,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Create a task unless one with the same title already exists."""
        params = TaskParameters.from_dict(parameters)
        title = params.title
        if not title.strip():
            return TITLE_REQUIRED

        existing = await self.finder.find_by_title(title)
        if not existing.ok:
            return format_search_error(existing.error)
        if existing.issues and not params.force_create:
            logger.info("Skipping create, %r already exists", title)
            return format_existing(title, existing.issues)

        account_id = await self._resolve_assignee(params.assignees)

        fields: dict[str, Any] = {
            "project": {"key": self.settings.jira_project_key},
            "summary": title,
            "issuetype": {"name": self.settings.jira_issue_type},
        }
        # ADF rejects empty text runs
        if params.description.strip():
            fields["description"] = text_to_adf(params.description)
        if account_id:
            fields["assignee"] = {"accountId": account_id}

        try:
            created = await self.client.create_issue(fields)
        except JiraError as e:
            logger.error("Error creating JIRA task %r: %s", title, e)
            await self._notify(context, f"**Error creating task in JIRA: {e}**")
            return "**Failed to create task in JIRA.**"

        issue_key = created["key"]
        logger.info("Created %s for task %r", issue_key, title)

        try:
            state.remember_task(
                LocalTaskRecord(
                    title=title,
                    description=params.description,
                    assignees=params.assignees,
                    remote_key=issue_key,
                    remote_url=self.settings.browse_url(issue_key),
                )
            )
        except Exception:
            logger.exception("Created %s but could not cache it locally", issue_key)

        return f"**Task created in JIRA with key {issue_key}.**"

    async def update_task(
        self,
        context: ActivityContext,
        state: TurnState,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Move the single task matching the title to a new status.

        Only the remote issue changes; the locally cached task is left as is.
        """
        params = TaskParameters.from_dict(parameters)
        title, status = params.title, params.status
        if not title.strip():
            return TITLE_REQUIRED

        message, result = await self._find_single(title, "update")
        if message:
            return message

        issue_key = result.issues[0].key
        transition_id = self.settings.status_transitions.get(status)
        if not transition_id:
            message = f"**Invalid status '{status}'.**"
            await self._notify(context, message)
            return message

        try:
            await self.client.transition_issue(issue_key, transition_id)
        except JiraError as e:
            logger.error("Error updating JIRA task %s: %s", issue_key, e)
            await self._notify(context, f"**Error updating task '{title}': {e}**")
            return f"**Failed to update task '{title}'.**"

        logger.info("Transitioned %s to %s", issue_key, status)
        return f"**Task '{title}' updated to '{status}'.**"

    async def delete_task(
        self,
        context: ActivityContext,
        state: TurnState,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Delete the single task matching the title."""
        params = TaskParameters.from_dict(parameters)
        title = params.title
        if not title.strip():
            return TITLE_REQUIRED

        message, result = await self._find_single(title, "delete")
        if message:
            return message

        issue_key = result.issues[0].key
        try:
            await self.client.delete_issue(issue_key)
        except JiraError as e:
            logger.error("Error deleting JIRA task %s: %s", issue_key, e)
            await self._notify(context, f"**Error deleting task '{title}': {e}**")
            return f"**Failed to delete task '{title}'.**"

        logger.info("Deleted %s", issue_key)
        try:
            state.forget_task(title)
        except Exception:
            logger.exception("Deleted %s but could not drop the cached task", issue_key)

        return f"**Task '{title}' deleted from JIRA.**"

    async def query_task(
        self,
        context: ActivityContext,
        state: TurnState,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """Describe every task matching the title."""
        params = TaskParameters.from_dict(parameters)
        title = params.title
        if not title.strip():
            return TITLE_REQUIRED

        result = await self.finder.find_by_title(title)
        if not result.ok:
            return format_search_error(result.error)
        if not result.issues:
            return format_not_found(title)
        return format_issue_details(title, result.issues, self.settings.display_timezone)

    async def list_tasks(
        self,
        context: ActivityContext,
        state: TurnState,
        parameters: Optional[Mapping[str, Any]] = None,
    ) -> str:
        """List one page of tasks filtered by status, assignee and priority."""
        if context is None or not callable(getattr(context, "send_activity", None)):
            raise TypeError("Invalid context provided to list_tasks")

        params = TaskParameters.from_dict(parameters)

        account_id = None
        if params.assignee:
            user = await self.users.resolve(params.assignee)
            if user is None:
                return f"**No user found matching '{params.assignee}'.**"
            account_id = user.account_id

        result = await self.finder.list_by_filters(
            statuses=params.statuses,
            assignee_account_id=account_id,
            priorities=params.priorities,
            start_at=params.start_at,
            page_size=self.settings.list_page_size,
        )
        if not result.ok:
            return f"**Error listing tasks: {result.error}**"
        return format_listing(result, params.start_at, self.settings.display_timezone)
