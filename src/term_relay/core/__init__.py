"""
Core components for Term Relay

Contains the live relay, its context, the transport interface and the
reliable sender.
"""

from .transport import Transport, SendOptions
from .sender import ReliableSender, DELIVERY_FAILED_NOTICE
from .context import RelayContext
from .relay import LiveRelay, RelayState, run_command

__all__ = [
    "Transport",
    "SendOptions",
    "ReliableSender",
    "DELIVERY_FAILED_NOTICE",
    "RelayContext",
    "LiveRelay",
    "RelayState",
    "run_command"
]
