"""Markdown rendering of task action results."""

from datetime import datetime
from typing import Any, Optional, Sequence
from zoneinfo import ZoneInfo

from .models import Issue, SearchResult

NO_DESCRIPTION = "No description provided."


def text_to_adf(text: str) -> dict[str, Any]:
    """Wrap plain text in a minimal Atlassian Document Format document."""
    return {
        "type": "doc",
        "version": 1,
        "content": [
            {
                "type": "paragraph",
                "content": [{"type": "text", "text": text}],
            }
        ],
    }


def adf_to_text(description: Any) -> str:
    """Extract readable text from an issue description.

    Plain strings are returned as-is. For ADF documents the text runs of each
    paragraph are concatenated and block nodes (paragraphs, list items,
    nested lists) are joined with newlines.
    """
    if isinstance(description, str):
        return description or NO_DESCRIPTION
    if not isinstance(description, dict) or not description.get("content"):
        return NO_DESCRIPTION
    return _node_text(description)


# Nodes whose children are inline runs
_INLINE_PARENTS = ("paragraph", "heading")


def _node_text(node: Any) -> str:
    if not isinstance(node, dict):
        return ""
    kind = node.get("type")
    if kind == "text":
        return str(node.get("text", ""))
    if kind == "hardBreak":
        return "\n"

    children = node.get("content")
    if not isinstance(children, list):
        return ""
    if kind in _INLINE_PARENTS:
        return "".join(_node_text(child) for child in children)

    text = "\n".join(_node_text(child) for child in children if isinstance(child, dict))
    if kind == "listItem":
        return f"- {text}"
    return text


def format_timestamp(value: Optional[datetime], timezone: str = "UTC") -> str:
    """Render a timestamp in the display timezone."""
    if value is None:
        return "Unknown"
    if value.tzinfo is not None:
        value = value.astimezone(ZoneInfo(timezone))
    return value.strftime("%Y-%m-%d %H:%M %Z").strip()


def format_not_found(title: str) -> str:
    return f"**No issue found in JIRA matching '{title}'.**"


def format_search_error(error: str) -> str:
    return f"**Error searching JIRA: {error}**"


def format_existing(title: str, issues: Sequence[Issue]) -> str:
    keys = ", ".join(issue.key for issue in issues)
    return f"**Task with title '{title}' already exists in JIRA with key(s): {keys}.**"


def format_candidates(title: str, issues: Sequence[Issue], verb: str) -> str:
    """Ask the user to pick one of several matching issues."""
    lines = [f"**Multiple issues found matching '{title}':**"]
    for issue in issues:
        lines.append(f"- **{issue.key}**: {issue.summary or 'No summary'}")
    lines.append("")
    lines.append(
        f"**Please provide a more specific title or the issue key to {verb}.**"
    )
    return "\n".join(lines)


def format_issue_details(title: str, issues: Sequence[Issue], timezone: str = "UTC") -> str:
    message = f"**There are {len(issues)} issues related to '{title}':**\n\n"
    for index, issue in enumerate(issues, start=1):
        message += f"{index}. **{issue.summary or 'No summary'} ({issue.key})**\n"
        message += f"   - **Status:** {issue.status or 'Unknown'}\n"
        message += f"   - **Description:** {adf_to_text(issue.description)}\n"
        message += f"   - **Assignee:** {issue.assignee or 'Unassigned'}\n"
        message += f"   - **Created:** {format_timestamp(issue.created, timezone)}\n\n"
    return message


def format_listing(result: SearchResult, start_at: int, timezone: str = "UTC") -> str:
    if not result.issues:
        return "**No tasks found matching the specified criteria.**"

    first = start_at + 1
    last = start_at + len(result.issues)
    message = f"**Found {result.total} task(s) matching your criteria.**\n\n"
    message += f"**Showing tasks {first} to {last}:**\n\n"

    for issue in result.issues:
        message += f"**Issue Key   :** {issue.key}\n\n"
        message += f"**Summary     :** {issue.summary or 'No summary'}\n\n"
        message += f"**Status      :** {issue.status or 'Unknown'}\n\n"
        message += f"**Priority    :** {issue.priority or 'Not Specified'}\n\n"
        message += f"**Assignee    :** {issue.assignee or 'Unassigned'}\n\n"
        message += f"**Reporter    :** {issue.reporter or 'Unknown'}\n\n"
        message += f"**Created     :** {format_timestamp(issue.created, timezone)}\n\n --- \n\n"
    return message
