"""
Output Buffer for Term Relay

Append-only byte buffer shared between the process reader and the relay.
"""

from typing import Union


class OutputBuffer:
    """Append-only capture of a command's combined output.

    There is exactly one writer (the process reader task) and one reader
    (the relay). Data is only ever appended, so a snapshot taken at any
    point is a consistent prefix of the final output. Adding a second
    writer requires adding a lock.
    """

    def __init__(self):
        self._data = bytearray()

    def append(self, data: Union[bytes, bytearray]) -> None:
        """Append bytes read from the process"""
        if data:
            self._data.extend(data)

    def snapshot(self) -> bytes:
        """Return the bytes captured so far"""
        return bytes(self._data)

    def text(self) -> str:
        """Decode the current snapshot, replacing undecodable bytes"""
        return self.snapshot().decode('utf-8', errors='replace')

    def __len__(self) -> int:
        return len(self._data)

    def __bool__(self) -> bool:
        return len(self._data) > 0
