"""
User authorization for Term Relay
"""

from typing import Iterable, Optional

from ..utils.logging_setup import get_logger

logger = get_logger('auth')

REFUSAL_NOTICE = "Sorry, it's a bot for private usage."
WILDCARD = "*"


class UserAuthorizer:
    """Checks users against the configured allow-list.

    An empty list, or one containing "*", allows everybody.
    """

    def __init__(self, users: Optional[Iterable[str]] = None):
        self.users = [user for user in (users or []) if user]

    @property
    def allows_everyone(self) -> bool:
        return not self.users or WILDCARD in self.users

    def is_allowed(self, *identities: str) -> bool:
        """Check whether any of the user's identities (name, id) is allowed"""
        if self.allows_everyone:
            return True

        allowed = any(identity in self.users for identity in identities if identity)
        logger.info(f"Authorization check for {', '.join(identities)}: {'pass' if allowed else 'denied'}")
        return allowed
