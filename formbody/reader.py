"""
Sequential reader over an ordered queue of byte sources.

Sources are in-memory snapshots, caller-supplied binary streams, or other
SegmentReader instances. They are drained strictly in the order they were
queued; a source that reports end of data is closed (when it can be) and
dropped, and the end of the whole stream is only reported once every source
has been drained.
"""

from __future__ import annotations

import logging
import os
import stat
from collections import deque
from typing import Any

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 8192


class _Exhausted:
    """Placeholder left behind by a drained source."""

    __slots__ = ()

    def readinto(self, view: memoryview) -> int:
        return 0

    def remaining(self) -> int:
        return 0

    def __repr__(self) -> str:
        return "<exhausted>"


_EXHAUSTED = _Exhausted()


class _Snapshot:
    """Frozen bytes read through a moving offset."""

    __slots__ = ("_data", "_pos")

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self._pos = 0

    def readinto(self, view: memoryview) -> int:
        n = min(len(view), len(self._data) - self._pos)
        view[:n] = self._data[self._pos : self._pos + n]
        self._pos += n
        return n

    def remaining(self) -> int:
        return len(self._data) - self._pos

    def __repr__(self) -> str:
        return f"<snapshot {self.remaining()}/{len(self._data)} bytes>"


class _Stream:
    """Borrowed binary file-like object; closed once drained."""

    __slots__ = ("handle",)

    def __init__(self, handle: Any) -> None:
        self.handle = handle

    def readinto(self, view: memoryview) -> int:
        readinto = getattr(self.handle, "readinto", None)
        if readinto is not None:
            n = readinto(view)
            if n is None:
                raise BlockingIOError("Stream has no data available")
            return n
        data = self.handle.read(len(view))
        if isinstance(data, str):
            raise TypeError("Stream sources must be opened in binary mode")
        if data is None:
            raise BlockingIOError("Stream has no data available")
        n = len(data)
        view[:n] = data
        return n

    def remaining(self) -> int | None:
        handle = self.handle
        try:
            pos = handle.tell()
        except (AttributeError, OSError, ValueError):
            return None
        try:
            st = os.fstat(handle.fileno())
        except (AttributeError, OSError, ValueError):
            getbuffer = getattr(handle, "getbuffer", None)
            if getbuffer is None:
                return None
            with getbuffer() as buf:
                return max(buf.nbytes - pos, 0)
        # Pipes and sockets report a meaningless st_size.
        if not stat.S_ISREG(st.st_mode):
            return None
        return max(st.st_size - pos, 0)

    def close(self) -> None:
        close = getattr(self.handle, "close", None)
        if close is not None:
            close()

    def __repr__(self) -> str:
        return f"<stream {self.handle!r}>"


def _as_source(source: Any) -> Any:
    if isinstance(source, (SegmentReader, _Snapshot, _Stream)):
        return source
    if isinstance(source, (bytes, bytearray, memoryview)):
        return _Snapshot(bytes(source))
    if hasattr(source, "readinto") or hasattr(source, "read"):
        return _Stream(source)
    raise TypeError(f"Cannot read from {type(source).__name__!r}")


class SegmentReader:
    """
    FIFO of byte sources presented as one continuous stream.

    `readinto` follows the raw I/O convention: it returns the number of
    bytes written into the buffer, at most one source's worth per call, and
    0 only once every source is drained.
    """

    def __init__(self, *sources: Any) -> None:
        self._sources: deque = deque()
        for source in sources:
            self.enqueue(source)

    def __len__(self) -> int:
        return len(self._sources)

    def __repr__(self) -> str:
        return f"<SegmentReader {len(self._sources)} sources>"

    def enqueue(self, source: Any) -> None:
        """
        Append a source. Bytes-like objects are copied into a snapshot;
        objects with `readinto` or `read` are borrowed and closed when drained.
        """
        self._sources.append(_as_source(source))

    def readinto(self, buffer: Any) -> int:
        with memoryview(buffer) as raw, raw.cast("B") as view:
            if not view:
                return 0
            while self._sources:
                sources = self._sources
                if len(sources) == 1 and isinstance(sources[0], SegmentReader):
                    # Adopt the nested queue instead of recursing into it.
                    inner = sources[0]
                    self._sources, inner._sources = inner._sources, deque()
                    continue
                head = sources[0]
                n = head.readinto(view)
                if n:
                    return n
                sources[0] = _EXHAUSTED
                sources.popleft()
                logger.debug("Segment source drained: %r", head)
                _close_source(head)
            return 0

    def read(self, size: int | None = -1) -> bytes:
        if size is not None and size >= 0:
            buf = bytearray(size)
            n = self.readinto(buf)
            return bytes(buf[:n])
        chunks: list[bytes] = []
        buf = bytearray(DEFAULT_CHUNK_SIZE)
        while True:
            n = self.readinto(buf)
            if not n:
                break
            chunks.append(bytes(buf[:n]))
        return b"".join(chunks)

    def remaining(self) -> int | None:
        """Bytes left to read, or None when a stream's size is unknown."""
        total = 0
        for source in self._sources:
            size = source.remaining()
            if size is None:
                return None
            total += size
        return total

    def close(self) -> None:
        """Drop every queued source, closing the closable ones."""
        error: BaseException | None = None
        while self._sources:
            source = self._sources.popleft()
            try:
                _close_source(source)
            except OSError as exc:
                if error is None:
                    error = exc
        if error is not None:
            raise error


def _close_source(source: Any) -> None:
    close = getattr(source, "close", None)
    if close is None:
        return
    close()
    logger.debug("Segment source closed: %r", source)
