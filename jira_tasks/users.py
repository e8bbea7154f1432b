"""Resolve free-text names or emails to JIRA users."""

import logging
from typing import Optional

from .jira_client import JiraClient, JiraError
from .models import UserRef

logger = logging.getLogger(__name__)


class UserResolver:
    """Looks up a JIRA user by name or email.

    The first candidate returned by JIRA wins; several matches are not
    ranked or disambiguated. Lookups never raise: failures are logged and
    reported as no match.
    """

    def __init__(self, client: JiraClient):
        self.client = client

    async def resolve(self, query: Optional[str]) -> Optional[UserRef]:
        if not query or not query.strip():
            return None

        try:
            users = await self.client.search_users(query.strip())
        except JiraError as e:
            logger.error("Error searching user %r in JIRA: %s", query, e)
            return None

        if not users:
            logger.info("No JIRA user matches %r", query)
            return None

        try:
            user = UserRef.from_api(users[0])
        except (KeyError, TypeError) as e:
            logger.error("Unexpected user search payload for %r: %s", query, e)
            return None

        if len(users) > 1:
            logger.debug(
                "%d users match %r, using %s", len(users), query, user.display_name
            )
        return user
