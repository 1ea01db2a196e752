from __future__ import annotations

import io
from collections.abc import Iterator
from typing import TYPE_CHECKING, Any

from .reader import DEFAULT_CHUNK_SIZE

if TYPE_CHECKING:
    from .multipart import FormBody


def iter_chunks(source: Any, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """
    Iterate over a readable source in chunks.

    Args:
        source: Anything with readinto(), such as a FormBody or SegmentReader
        chunk_size: Maximum size of each chunk (default: 8192)

    Yields:
        Non-empty bytes chunks, until the source reports end of stream
    """
    if chunk_size <= 0:
        raise ValueError("chunk_size must be positive")
    buf = bytearray(chunk_size)
    while True:
        n = source.readinto(buf)
        if not n:
            break
        yield bytes(buf[:n])


class BodyStream(io.RawIOBase):
    """
    Read-only raw file object over a FormBody.

    Hands a body to code that expects a binary file, for example an HTTP
    client sending a file-like request body. Closing the stream releases
    whatever the body has not been read yet.

    Args:
        body: The body to read
        chunk_size: Buffer size used by readall() (default: body.chunk_size)
    """

    def __init__(self, body: FormBody, chunk_size: int | None = None) -> None:
        super().__init__()
        self._body = body
        self.chunk_size = chunk_size or body.chunk_size

    @property
    def body(self) -> FormBody:
        return self._body

    def readable(self) -> bool:
        return True

    def readinto(self, buffer: Any) -> int:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        return self._body.readinto(buffer)

    def readall(self) -> bytes:
        if self.closed:
            raise ValueError("I/O operation on closed stream")
        return b"".join(iter_chunks(self._body, self.chunk_size))

    def close(self) -> None:
        try:
            if not self.closed:
                self._body.abort()
        finally:
            super().close()
