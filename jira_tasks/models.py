"""Domain models for JIRA Task Actions."""

from dataclasses import asdict, dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Mapping, Optional, Sequence, Union


class TaskStatus(str, Enum):
    """Status values a task can be moved to."""
    IN_PROGRESS = "inProgress"
    DONE = "done"


DEFAULT_LIST_STATUSES = ("To Do", "In Progress")


def as_list(value: Union[None, str, Sequence[str]]) -> list[str]:
    """Accept a single value or a sequence and return a clean list."""
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    return [str(v).strip() for v in value if v is not None and str(v).strip()]


def _first(data: Mapping[str, Any], *keys: str, default: Any = None) -> Any:
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "y", "on")
    return bool(value)


def _status_value(value: Any) -> Optional[str]:
    if isinstance(value, Enum):
        return value.value
    return str(value).strip() if value is not None else None


@dataclass
class TaskParameters:
    """Parameters supplied by the bot for a task action."""
    title: str = ""
    description: str = ""
    assignees: list[str] = field(default_factory=list)
    force_create: bool = False
    status: Optional[str] = None

    # Listing filters
    start_at: int = 0
    statuses: list[str] = field(default_factory=list)
    assignee: Optional[str] = None
    priorities: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "TaskParameters":
        """Build parameters from a loose mapping (camelCase or snake_case keys)."""
        if isinstance(data, TaskParameters):
            return data
        data = data or {}

        start_at = _first(data, "start_at", "startAt", default=0)
        try:
            start_at = max(int(start_at), 0)
        except (TypeError, ValueError):
            start_at = 0

        assignee = str(_first(data, "assignee", default="")).strip()
        return cls(
            title=str(_first(data, "title", default="")),
            description=str(_first(data, "description", default="")),
            assignees=as_list(_first(data, "assignees")),
            force_create=_as_bool(_first(data, "force_create", "forceCreate", default=False)),
            status=_status_value(_first(data, "status")),
            start_at=start_at,
            statuses=as_list(_first(data, "statuses")),
            assignee=assignee or None,
            priorities=as_list(_first(data, "priorities")),
        )


@dataclass
class UserRef:
    """A JIRA user returned by user search."""
    account_id: str
    display_name: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "UserRef":
        return cls(
            account_id=data["accountId"],
            display_name=data.get("displayName"),
            email=data.get("emailAddress"),
        )


def parse_jira_datetime(value: Optional[str]) -> Optional[datetime]:
    """Parse a JIRA timestamp such as ``2024-03-01T10:15:30.000+0000``."""
    if not value:
        return None
    for fmt in ("%Y-%m-%dT%H:%M:%S.%f%z", "%Y-%m-%dT%H:%M:%S%z"):
        try:
            return datetime.strptime(value, fmt)
        except ValueError:
            continue
    try:
        return datetime.fromisoformat(value)
    except ValueError:
        return None


def _name(fields: Mapping[str, Any], name: str, attr: str = "name") -> Optional[str]:
    value = fields.get(name)
    if isinstance(value, Mapping):
        return value.get(attr)
    return None


@dataclass
class Issue:
    """A remote JIRA issue, reduced to the fields the actions display."""
    key: str
    summary: Optional[str] = None
    status: Optional[str] = None
    priority: Optional[str] = None
    assignee: Optional[str] = None
    reporter: Optional[str] = None
    created: Optional[datetime] = None
    # Plain string or an ADF document
    description: Union[None, str, dict[str, Any]] = None

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> "Issue":
        fields = data.get("fields") or {}
        return cls(
            key=data.get("key") or "Unknown",
            summary=fields.get("summary"),
            status=_name(fields, "status"),
            priority=_name(fields, "priority"),
            assignee=_name(fields, "assignee", "displayName"),
            reporter=_name(fields, "reporter", "displayName"),
            created=parse_jira_datetime(fields.get("created")),
            description=fields.get("description"),
        )


@dataclass
class SearchResult:
    """Outcome of an issue search.

    ``error`` is set when the search itself failed, which keeps
    "nothing matched" apart from "could not ask".
    """
    issues: list[Issue] = field(default_factory=list)
    total: int = 0
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def failed(cls, error: str) -> "SearchResult":
        return cls(error=error)


@dataclass
class LocalTaskRecord:
    """Task cached in conversation state, keyed by its title."""
    title: str
    description: str = ""
    assignees: list[str] = field(default_factory=list)
    remote_key: Optional[str] = None
    remote_url: Optional[str] = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "LocalTaskRecord":
        return cls(
            title=data.get("title", ""),
            description=data.get("description", ""),
            assignees=list(data.get("assignees") or []),
            remote_key=data.get("remote_key"),
            remote_url=data.get("remote_url"),
        )
