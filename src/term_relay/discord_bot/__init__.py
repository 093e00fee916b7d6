"""
Discord Bot components for Term Relay

Contains the Discord bot, its transport and user authorization.
"""

from .bot import TermRelayBot
from .transport import DiscordTransport
from .auth import UserAuthorizer, REFUSAL_NOTICE

__all__ = [
    "TermRelayBot",
    "DiscordTransport",
    "UserAuthorizer",
    "REFUSAL_NOTICE"
]
