"""Issue lookups: JQL construction and searches."""

import logging
import re
from typing import Optional, Sequence

from .jira_client import JiraClient, JiraError
from .models import DEFAULT_LIST_STATUSES, Issue, SearchResult

logger = logging.getLogger(__name__)

_CONTROL_CHARS = re.compile(r"[\x00-\x1f\x7f]+")

# Characters with meaning in text search (``~``) terms
_TEXT_RESERVED = re.compile(r'([+\-&|!(){}\[\]^~*?:\\/"])')
_TEXT_OPERATORS = re.compile(r"\b(AND|OR|NOT)\b")


def jql_quote(value: str) -> str:
    """Quote a value as a JQL string literal.

    Backslashes and double quotes are escaped so user text cannot close the
    literal and inject extra clauses; control characters become spaces.
    """
    value = _CONTROL_CHARS.sub(" ", str(value))
    value = value.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{value}"'


def jql_text(value: str) -> str:
    """Quote a free-text search term for ``summary ~``.

    Text-search operators are neutralised first: reserved characters get a
    backslash and the boolean words are lowercased, then the term is quoted
    as a JQL string literal.
    """
    value = _CONTROL_CHARS.sub(" ", str(value)).strip()
    value = _TEXT_RESERVED.sub(r"\\\1", value)
    value = _TEXT_OPERATORS.sub(lambda m: m.group(1).lower(), value)
    return jql_quote(value)


def jql_in(values: Sequence[str]) -> str:
    return "(" + ", ".join(jql_quote(v) for v in values) + ")"


def build_title_jql(project_key: str, title: str) -> str:
    return f"project = {jql_quote(project_key)} AND summary ~ {jql_text(title)}"


def build_listing_jql(
    project_key: str,
    issue_type: str = "Task",
    statuses: Optional[Sequence[str]] = None,
    assignee_account_id: Optional[str] = None,
    priorities: Optional[Sequence[str]] = None,
) -> str:
    conditions = [
        f"project = {jql_quote(project_key)}",
        f"issuetype = {jql_quote(issue_type)}",
        f"status in {jql_in(statuses or DEFAULT_LIST_STATUSES)}",
    ]
    if assignee_account_id:
        conditions.append(f"assignee = {jql_quote(assignee_account_id)}")
    if priorities:
        conditions.append(f"priority in {jql_in(priorities)}")
    return " AND ".join(conditions)


class IssueFinder:
    """Searches issues of one project."""

    def __init__(self, client: JiraClient, project_key: str, issue_type: str = "Task"):
        self.client = client
        self.project_key = project_key
        self.issue_type = issue_type

    async def _search(
        self,
        jql: str,
        max_results: Optional[int] = None,
        start_at: Optional[int] = None,
    ) -> SearchResult:
        try:
            data = await self.client.search_issues(
                jql, max_results=max_results, start_at=start_at
            )
        except JiraError as e:
            logger.error("Error searching issues in JIRA (jql=%s): %s", jql, e)
            return SearchResult.failed(str(e))

        raw_issues = data.get("issues")
        issues = [
            Issue.from_api(issue)
            for issue in (raw_issues if isinstance(raw_issues, list) else [])
            if isinstance(issue, dict)
        ]
        total = data.get("total")
        return SearchResult(
            issues=issues,
            total=total if isinstance(total, int) else len(issues),
        )

    async def find_by_title(self, title: str) -> SearchResult:
        """All issues of the project whose summary matches ``title``."""
        return await self._search(build_title_jql(self.project_key, title))

    async def list_by_filters(
        self,
        statuses: Optional[Sequence[str]] = None,
        assignee_account_id: Optional[str] = None,
        priorities: Optional[Sequence[str]] = None,
        start_at: int = 0,
        page_size: int = 10,
    ) -> SearchResult:
        """One page of tasks filtered by status, assignee and priority."""
        jql = build_listing_jql(
            self.project_key,
            issue_type=self.issue_type,
            statuses=statuses,
            assignee_account_id=assignee_account_id,
            priorities=priorities,
        )
        return await self._search(jql, max_results=page_size, start_at=start_at)
