"""
Messaging transport interface for Term Relay

The relay only needs to send, edit and delete text messages. Concrete
transports raise an exception when an operation fails.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Optional


@dataclass(frozen=True)
class SendOptions:
    """Delivery flags shared by every message of a relay"""
    silent: bool = True           # Deliver without a notification
    suppress_embeds: bool = True  # No link previews


class Transport(ABC):
    """Send/edit/delete access to the messaging platform"""

    @abstractmethod
    async def send(self, recipient: Any, text: str,
                   options: Optional[SendOptions] = None) -> Any:
        """Send a new message and return its handle"""

    @abstractmethod
    async def edit(self, handle: Any, text: str,
                   options: Optional[SendOptions] = None) -> None:
        """Replace the text of a previously sent message"""

    @abstractmethod
    async def delete(self, handle: Any) -> None:
        """Delete a previously sent message"""
