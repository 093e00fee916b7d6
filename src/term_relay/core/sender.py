"""
Reliable Sender for Term Relay

Delivers messages through a transport with a bounded number of immediate
retries, falling back to a failure notice the user can see.
"""

from typing import Any, List, Optional

from .transport import SendOptions, Transport
from ..output_handling.chunker import split_by_lines
from ..utils.error_handler import ErrorCategory, ErrorHandler
from ..utils.logging_setup import get_logger

logger = get_logger('sender')

DELIVERY_FAILED_NOTICE = (
    "Messages not sent, please check your terminal log. "
    "(it may not be an issue with networking)"
)


class ReliableSender:
    """Sends one message at a time, retrying failed attempts"""

    def __init__(self, transport: Transport, max_retries: int = 5,
                 error_handler: Optional[ErrorHandler] = None):
        if max_retries <= 0:
            raise ValueError(f"max_retries must be positive, got {max_retries}")
        self.transport = transport
        self.max_retries = max_retries
        self.error_handler = error_handler or ErrorHandler()

    async def send(self, recipient: Any, text: str, prefix: str = "", postfix: str = "",
                   options: Optional[SendOptions] = None) -> Optional[Any]:
        """Send ``prefix + text + postfix``.

        Each call has its own budget of ``max_retries`` attempts. When every
        attempt fails, a plain failure notice is sent once and None is
        returned; otherwise the message handle is returned.
        """
        message = prefix + text + postfix
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_retries + 1):
            try:
                handle = await self.transport.send(recipient, message, options)
            except Exception as e:
                last_error = e
                logger.warning(f"Send attempt {attempt}/{self.max_retries} failed: {e}")
                logger.debug(f"Undelivered message ({len(message)} chars): {message[:200]!r}")
                continue

            if attempt > 1:
                logger.info(f"Message delivered after {attempt} attempts")
            return handle

        self.error_handler.handle_error(
            last_error,
            context={'attempts': self.max_retries, 'length': len(message), 'severity': 'high'},
            category=ErrorCategory.TRANSPORT
        )
        logger.error(f"Gave up sending message after {self.max_retries} attempts")
        await self._send_failure_notice(recipient, options)
        return None

    async def send_long(self, recipient: Any, text: str, prefix: str = "", postfix: str = "",
                        options: Optional[SendOptions] = None,
                        limit: int = 1900) -> List[Optional[Any]]:
        """Split ``text`` to fit ``limit`` once wrapped and send every piece in order"""
        content_limit = limit - len(prefix) - len(postfix)
        pieces = split_by_lines(text, content_limit)
        logger.debug(f"Sending {len(pieces)} piece(s) of output")

        handles = []
        for piece in pieces:
            handles.append(await self.send(recipient, piece, prefix, postfix, options))
        return handles

    async def _send_failure_notice(self, recipient: Any, options: Optional[SendOptions]):
        try:
            await self.transport.send(recipient, DELIVERY_FAILED_NOTICE, options)
        except Exception as e:
            logger.error(f"Failed to send delivery failure notice: {e}")
