"""Main entry point for JIRA Task Actions."""

import asyncio
import logging
import sys

from .actions import TaskActions
from .config import get_settings
from .db import ConversationStore
from .jira_client import JiraClient
from .slack_handler import SlackHandler

logger = logging.getLogger(__name__)


def setup_logging(level: str = "INFO") -> None:
    """Configure logging."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(sys.stdout)],
    )

    # Reduce noise from libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    logging.getLogger("slack_bolt").setLevel(logging.WARNING)
    logging.getLogger("slack_sdk").setLevel(logging.WARNING)


async def main() -> None:
    """Main application entry point."""
    # Load settings
    try:
        settings = get_settings()
    except Exception as e:
        print(f"Failed to load settings: {e}")
        print("Make sure all required environment variables are set.")
        sys.exit(1)

    setup_logging(settings.log_level)
    logger.info("Starting JIRA Task Actions...")

    if not settings.slack_bot_token or not settings.slack_app_token:
        logger.error("SLACK_BOT_TOKEN and SLACK_APP_TOKEN are required to run the bot")
        sys.exit(1)

    # Ensure directories exist
    settings.ensure_data_directory()

    store = ConversationStore(settings.database_path)
    await store.initialize()

    client = JiraClient.from_settings(settings)
    actions = TaskActions(settings, client=client)
    handler = SlackHandler(settings=settings, store=store, actions=actions)

    # Log configuration summary
    logger.info("=" * 50)
    logger.info("JIRA Task Actions Configuration")
    logger.info("=" * 50)
    logger.info("JIRA: %s (project %s)", settings.jira_url, settings.jira_project_key)
    logger.info("Slash command: %s", settings.slack_command)
    logger.info("Request Timeout: %ds", settings.request_timeout)
    logger.info("Database: %s", settings.database_path)
    logger.info("=" * 50)

    stats = await store.get_stats()
    logger.info("Database stats: %s", stats)

    try:
        # Blocks until shutdown
        await handler.start()
    except KeyboardInterrupt:
        logger.info("Received keyboard interrupt")
    finally:
        logger.info("Shutdown complete")


def run() -> None:
    """Entry point for the application."""
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    run()
