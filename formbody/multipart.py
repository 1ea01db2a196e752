from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from typing import Any, BinaryIO

from .errors import ClosedError, WriteError
from .headers import PartHeaders, serialize_part_headers
from .reader import DEFAULT_CHUNK_SIZE, SegmentReader
from .streaming import iter_chunks
from .utils import escape_quotes, random_boundary, validate_boundary

logger = logging.getLogger(__name__)

OCTET_STREAM = "application/octet-stream"


class PartWriter:
    """
    Sink for the body bytes of one part.

    Only the most recently opened part accepts writes; the bytes land in the
    body's pending buffer and are frozen into a segment when the next part
    is opened or the body is closed.
    """

    def __init__(self, body: FormBody, index: int) -> None:
        self._body = body
        self._index = index

    def write(self, data: bytes | bytearray | memoryview) -> int:
        if isinstance(data, str):
            raise TypeError("PartWriter.write() takes bytes, not str")
        body = self._body
        if body.closed:
            raise ClosedError("Body is closed")
        if body._parts != self._index:
            raise WriteError(f"Part {self._index} is no longer the current part")
        with memoryview(data) as view:
            body._pending += view
            return view.nbytes


class FormBody:
    """
    Incrementally built multipart/form-data body, read lazily as one stream.

    Headers and small field values are accumulated in memory and frozen into
    segments; streamed files are queued as they are and only read when the
    body itself is read. The first read finalizes the body by appending the
    closing boundary, so calling close() beforehand is optional.

    Args:
        boundary: Explicit boundary token (default: random)
        chunk_size: Chunk size used when iterating the body (default: 8192)
    """

    def __init__(self, boundary: str | None = None, chunk_size: int = DEFAULT_CHUNK_SIZE) -> None:
        self._boundary = validate_boundary(boundary) if boundary is not None else random_boundary()
        self.chunk_size = chunk_size
        self._pending = bytearray()
        self._reader = SegmentReader()
        self._parts = 0
        self._flushed = False
        self._closed = False

    @property
    def boundary(self) -> str:
        return self._boundary

    @property
    def content_type(self) -> str:
        return f"multipart/form-data; boundary={self._boundary}"

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def content_length(self) -> int | None:
        """
        Number of bytes a full read would still yield, or None when a
        streamed part has no determinable size. An open body is measured as
        if it were closed now.
        """
        remaining = self._reader.remaining()
        if remaining is None:
            return None
        if not self._closed and self._flushed:
            remaining += len(self._pending) + len(self._terminator())
        return remaining

    def _terminator(self) -> bytes:
        return f"\r\n--{self._boundary}--\r\n".encode("ascii")

    def _flush(self) -> bool:
        if not self._pending:
            return False
        self._reader.enqueue(bytes(self._pending))
        self._pending.clear()
        self._flushed = True
        return True

    def open_part(self, headers: PartHeaders) -> PartWriter:
        """
        Start a new part with the given headers and return its body sink.
        """
        if self._closed:
            raise ClosedError("Body is closed")
        self._flush()
        if self._parts:
            self._pending += f"\r\n--{self._boundary}\r\n".encode("ascii")
        else:
            self._pending += f"--{self._boundary}\r\n".encode("ascii")
        self._pending += serialize_part_headers(headers)
        # Headers become readable before any body bytes are written.
        self._flush()
        self._parts += 1
        logger.debug("Opened part %d with headers %s", self._parts, sorted(headers))
        return PartWriter(self, self._parts)

    def create_form_field(self, field_name: str) -> PartWriter:
        return self.open_part(
            {"Content-Disposition": f'form-data; name="{escape_quotes(field_name)}"'}
        )

    def create_form_file(
        self, field_name: str, file_name: str, content_type: str = OCTET_STREAM
    ) -> PartWriter:
        disposition = (
            f'form-data; name="{escape_quotes(field_name)}"; '
            f'filename="{escape_quotes(file_name)}"'
        )
        return self.open_part({"Content-Disposition": disposition, "Content-Type": content_type})

    def write_field(self, field_name: str, value: str | bytes) -> None:
        part = self.create_form_field(field_name)
        if isinstance(value, str):
            value = value.encode("utf-8")
        part.write(value)

    def add_field_from_stream(
        self,
        field_name: str,
        file_name: str,
        stream: BinaryIO,
        content_type: str = OCTET_STREAM,
    ) -> None:
        """
        Add a file part whose content is read lazily from `stream`.

        The body takes ownership of `stream` and closes it once it has been
        read to the end; callers must not close it themselves.
        """
        self.create_form_file(field_name, file_name, content_type)
        self._reader.enqueue(stream)
        logger.debug("Queued stream for field %r (%s)", field_name, file_name)

    def add_field_from_path(
        self,
        field_name: str,
        file_name: str,
        path: str,
        content_type: str = OCTET_STREAM,
    ) -> None:
        if self._closed:
            raise ClosedError("Body is closed")
        stream = open(path, "rb")
        try:
            self.add_field_from_stream(field_name, file_name, stream, content_type)
        except BaseException:
            stream.close()
            raise

    def close(self) -> None:
        """Append the closing boundary. Further calls do nothing."""
        if self._closed:
            return
        self._pending += self._terminator()
        self._flush()
        self._closed = True
        logger.debug("Closed body after %d parts", self._parts)

    def abort(self) -> None:
        """
        Give up on the body: no terminator is written and every stream still
        queued is closed. Reads return end of stream afterwards.
        """
        self._closed = True
        self._pending.clear()
        logger.debug("Aborted body with %d unread sources", len(self._reader))
        self._reader.close()

    def readinto(self, buffer: Any) -> int:
        if not self._flushed:
            return 0
        if not self._closed:
            self.close()
        return self._reader.readinto(buffer)

    def read(self, size: int | None = -1) -> bytes:
        if not self._flushed:
            return b""
        if not self._closed:
            self.close()
        return self._reader.read(size)

    def iter_bytes(self, chunk_size: int | None = None) -> Iterator[bytes]:
        return iter_chunks(self, chunk_size or self.chunk_size)

    def __iter__(self) -> Iterator[bytes]:
        return self.iter_bytes()

    def __repr__(self) -> str:
        state = "closed" if self._closed else "open"
        return f"<FormBody {self._boundary} {self._parts} parts {state}>"


def build_multipart(
    data: Mapping[str, str] | None,
    files: Mapping[str, bytes | tuple[str, Any, str | None]],
    boundary: str | None = None,
) -> tuple[str, FormBody]:
    """
    Build a multipart/form-data body.
    `files` values can be bytes or (filename, bytes | binary stream, content_type|None).
    Streams are read lazily and closed by the body once drained.
    """
    body = FormBody(boundary=boundary)
    if data:
        for k, v in data.items():
            body.write_field(k, v)
    for field, val in files.items():
        if isinstance(val, (bytes, bytearray)):
            body.create_form_file(field, field).write(val)
            continue
        filename, content, ctype = val
        if isinstance(content, (bytes, bytearray)):
            body.create_form_file(field, filename, ctype or OCTET_STREAM).write(content)
        else:
            body.add_field_from_stream(field, filename, content, ctype or OCTET_STREAM)
    return body.content_type, body
