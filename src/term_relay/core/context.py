"""
Relay context for Term Relay

Bundles the collaborators every relay needs so they are passed explicitly.
"""

from dataclasses import dataclass, field
from typing import Optional

from .sender import ReliableSender
from .transport import SendOptions, Transport
from ..output_handling.collapser import OutputCollapser
from ..output_handling.discord_formatter import DiscordFormatter
from ..process_control.process_controller import ProcessController
from ..utils.config import RelayConfig
from ..utils.error_handler import ErrorHandler


@dataclass
class RelayContext:
    """Transport, configuration and shared helpers for running relays"""
    transport: Transport
    config: RelayConfig = field(default_factory=RelayConfig)
    options: SendOptions = field(default_factory=SendOptions)
    error_handler: ErrorHandler = field(default_factory=ErrorHandler)
    sender: Optional[ReliableSender] = None
    process_controller: Optional[ProcessController] = None
    formatter: Optional[DiscordFormatter] = None
    collapser: OutputCollapser = field(default_factory=OutputCollapser)

    def __post_init__(self):
        if self.sender is None:
            self.sender = ReliableSender(
                self.transport,
                max_retries=self.config.max_retries,
                error_handler=self.error_handler
            )
        if self.process_controller is None:
            self.process_controller = ProcessController(
                read_chunk_size=self.config.read_chunk_size,
                error_handler=self.error_handler
            )
        if self.formatter is None:
            self.formatter = DiscordFormatter(self.config.max_message_length)
