"""Byte-counting write sink.

``SizeCounter`` quacks like a writable binary stream but keeps nothing except
the number of bytes it has been handed. It is used to size a serialized
request without materialising the serialized form.
"""

from __future__ import annotations

from typing import Union

BytesLike = Union[bytes, bytearray, memoryview]


class SizeCounter:
    """Accumulate the length of everything written; discard the content."""

    def __init__(self) -> None:
        self._size = 0

    @property
    def size(self) -> int:
        return self._size

    def write(self, data: BytesLike) -> int:
        """Count *data* and report it as fully written. Never raises for bytes-like input."""
        written = memoryview(data).nbytes
        self._size += written
        return written

    def writable(self) -> bool:
        return True

    def __repr__(self) -> str:
        return f"SizeCounter(size={self._size})"
