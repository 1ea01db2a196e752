"""Pytest configuration and fixtures."""

import io

import pytest
from formbody.multipart import FormBody


class TrackedStream:
    """Binary stream that records closing and can fail on close."""

    def __init__(self, data: bytes, close_error: Exception | None = None):
        self._buf = io.BytesIO(data)
        self.close_error = close_error
        self.closed = False
        self.reads = 0

    def read(self, size=-1):
        self.reads += 1
        return self._buf.read(size)

    def close(self):
        self.closed = True
        if self.close_error is not None:
            raise self.close_error


@pytest.fixture
def body():
    """Create a body with a fixed boundary."""
    return FormBody(boundary="B")


@pytest.fixture
def make_stream():
    """Factory for TrackedStream instances."""
    return TrackedStream


@pytest.fixture
def upload_file(tmp_path):
    """Create a small file on disk."""
    path = tmp_path / "upload.bin"
    path.write_bytes(b"file-bytes\x00\x01")
    return path
