"""
Shared fixtures for Term Relay tests
"""

from dataclasses import dataclass
from typing import Any, List, Optional, Tuple

import pytest

from term_relay.core.transport import SendOptions, Transport
from term_relay.process_control.process_controller import ProcessController


@dataclass
class FakeMessage:
    """Stand-in for a sent platform message"""
    id: int
    recipient: Any
    text: str


class RecordingTransport(Transport):
    """In-memory transport that records every call and can fail on demand"""

    def __init__(self, fail_sends: int = 0, fail_edits: bool = False,
                 fail_deletes: bool = False):
        self.fail_sends = fail_sends
        self.fail_edits = fail_edits
        self.fail_deletes = fail_deletes
        self.attempts: List[str] = []
        self.sent: List[FakeMessage] = []
        self.edits: List[Tuple[int, str]] = []
        self.deleted: List[int] = []
        self.history: List[Tuple[str, int]] = []
        self.options: List[Optional[SendOptions]] = []
        self._next_id = 0

    async def send(self, recipient, text, options=None):
        self.attempts.append(text)
        self.options.append(options)
        if self.fail_sends > 0:
            self.fail_sends -= 1
            raise ConnectionError("network unreachable")
        self._next_id += 1
        message = FakeMessage(self._next_id, recipient, text)
        self.sent.append(message)
        self.history.append(('send', message.id))
        return message

    async def edit(self, handle, text, options=None):
        if self.fail_edits:
            raise ConnectionError("edit failed")
        handle.text = text
        self.edits.append((handle.id, text))
        self.history.append(('edit', handle.id))

    async def delete(self, handle):
        if self.fail_deletes:
            raise ConnectionError("delete failed")
        self.deleted.append(handle.id)
        self.history.append(('delete', handle.id))

    def remaining(self) -> List[FakeMessage]:
        """Messages that were sent and not deleted"""
        return [message for message in self.sent if message.id not in self.deleted]


class BrokenAfterFirstRead:
    """Stream wrapper whose reads fail after the first one"""

    def __init__(self, stream):
        self.stream = stream
        self.reads = 0

    async def read(self, n: int = -1) -> bytes:
        self.reads += 1
        if self.reads > 1:
            raise OSError("stream broken")
        return await self.stream.read(n)


class BrokenStreamController(ProcessController):
    """Process controller whose output stream breaks after one read"""

    async def _read_output(self, stream, buffer, command):
        await super()._read_output(BrokenAfterFirstRead(stream), buffer, command)


@pytest.fixture
def transport():
    """Transport that always succeeds"""
    return RecordingTransport()


@pytest.fixture
def make_transport():
    """Factory for transports with injected failures"""
    return RecordingTransport


@pytest.fixture
def broken_stream_controller():
    """Factory for controllers whose output stream fails mid-run"""
    return BrokenStreamController
