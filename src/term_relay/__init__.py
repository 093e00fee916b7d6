"""
Term Relay - live command output relay for Discord

Runs commands on the host and relays their output into a Discord channel:
a live message edited in place while the command runs, replaced by the
complete output once it finishes.
"""

__version__ = "1.0.0"

from .core.context import RelayContext
from .core.relay import LiveRelay, RelayState, run_command
from .core.sender import ReliableSender
from .core.transport import SendOptions, Transport
from .process_control.process_controller import Command, ProcessController, ProcessOutcome
from .discord_bot.bot import TermRelayBot

__all__ = [
    "RelayContext",
    "LiveRelay",
    "RelayState",
    "run_command",
    "ReliableSender",
    "SendOptions",
    "Transport",
    "Command",
    "ProcessController",
    "ProcessOutcome",
    "TermRelayBot"
]
