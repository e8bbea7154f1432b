"""Configuration management for JIRA Task Actions."""

from pathlib import Path
from typing import Optional
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # ==========================================
    # JIRA CONFIGURATION
    # ==========================================
    jira_base_url: str
    jira_admin_email: str
    jira_api_token: str
    jira_project_key: str

    jira_api_path: str = "/rest/api/3"
    jira_issue_type: str = "Task"

    # Workflow transition ids (project specific)
    transition_in_progress_id: str = "31"
    transition_done_id: str = "41"

    # ==========================================
    # SLACK CONFIGURATION
    # Only needed when running the bot, not for library use
    # ==========================================
    slack_bot_token: Optional[str] = None
    slack_app_token: Optional[str] = None
    slack_command: str = "/task"

    # ==========================================
    # DATABASE CONFIGURATION
    # ==========================================
    database_path: str = "./data/jira_tasks.db"

    # ==========================================
    # APPLICATION CONFIGURATION
    # ==========================================
    list_page_size: int = 10
    request_timeout: int = 30
    display_timezone: str = "UTC"
    log_level: str = "INFO"

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    @field_validator("display_timezone")
    @classmethod
    def check_display_timezone(cls, value: str) -> str:
        """Reject unknown IANA timezone names at load time."""
        try:
            ZoneInfo(value)
        except (ZoneInfoNotFoundError, ValueError, OSError) as e:
            raise ValueError(f"Unknown timezone: {value!r}") from e
        return value

    @property
    def jira_url(self) -> str:
        """Base URL without trailing slash."""
        return self.jira_base_url.rstrip("/")

    @property
    def status_transitions(self) -> dict[str, str]:
        """Map of accepted status values to workflow transition ids."""
        return {
            "inProgress": self.transition_in_progress_id,
            "done": self.transition_done_id,
        }

    def browse_url(self, issue_key: str) -> str:
        """Human-facing URL of an issue."""
        return f"{self.jira_url}/browse/{issue_key}"

    def ensure_data_directory(self) -> None:
        """Ensure the database directory exists."""
        db_path = Path(self.database_path)
        db_path.parent.mkdir(parents=True, exist_ok=True)


# Global settings instance
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Get or create settings instance."""
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings
