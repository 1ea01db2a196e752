"""Tests for formbody.streaming module."""

import io

import pytest
from formbody.multipart import FormBody
from formbody.reader import SegmentReader
from formbody.streaming import BodyStream, iter_chunks


class TestIterChunks:
    """Tests for iter_chunks()."""

    def test_chunks_respect_size(self):
        """Test no chunk is larger than chunk_size."""
        reader = SegmentReader(b"a" * 10, b"b" * 3)
        chunks = list(iter_chunks(reader, chunk_size=4))

        assert chunks == [b"aaaa", b"aaaa", b"aa", b"bbb"]

    def test_invalid_chunk_size(self):
        """Test chunk_size must be positive."""
        with pytest.raises(ValueError, match="positive"):
            list(iter_chunks(SegmentReader(b"a"), chunk_size=0))

    def test_body_iteration(self, body):
        """Test iterating a body yields the whole stream."""
        body.write_field("f", "v" * 100)
        expected = FormBody(boundary="B")
        expected.write_field("f", "v" * 100)

        assert b"".join(body) == expected.read()

    def test_iter_bytes_chunk_size(self):
        """Test iter_bytes honours the configured chunk size."""
        body = FormBody(boundary="B", chunk_size=8)
        body.write_field("f", "value")

        assert all(len(chunk) <= 8 for chunk in body.iter_bytes())
        assert body.chunk_size == 8

    def test_empty_body_yields_nothing(self, body):
        """Test an empty body produces no chunks."""
        assert list(body.iter_bytes()) == []


class TestBodyStream:
    """Tests for BodyStream."""

    def test_read_all(self, body):
        """Test a BodyStream reads the full body."""
        body.write_field("f", "v")
        stream = BodyStream(body)

        assert stream.readable() is True
        assert stream.read().endswith(b"\r\n--B--\r\n")
        assert stream.body is body

    def test_buffered_reader(self, body, make_stream):
        """Test the stream works under io.BufferedReader."""
        body.write_field("f", "v")
        body.add_field_from_stream("s", "s", make_stream(b"x" * 50000))
        expected = FormBody(boundary="B")
        expected.write_field("f", "v")
        expected.add_field_from_stream("s", "s", make_stream(b"x" * 50000))

        with io.BufferedReader(BodyStream(body)) as fh:
            assert fh.read() == expected.read()

    def test_close_aborts_body(self, body, make_stream):
        """Test closing the stream releases unread sources."""
        source = make_stream(b"unread")
        body.add_field_from_stream("s", "s", source)
        stream = BodyStream(body)

        stream.close()

        assert stream.closed is True
        assert source.closed is True
        assert body.closed is True

    def test_readall_uses_chunk_size(self, body, mocker):
        """Test readall() reads the body in chunk_size pieces."""
        body.write_field("f", "v" * 100)
        spy = mocker.spy(body, "readinto")
        stream = BodyStream(body, chunk_size=16)

        data = stream.read()

        assert data.endswith(b"\r\n--B--\r\n")
        assert stream.chunk_size == 16
        assert all(len(call.args[0]) == 16 for call in spy.call_args_list)

    def test_chunk_size_defaults_to_body(self):
        """Test the stream inherits the body's chunk size."""
        body = FormBody(boundary="B", chunk_size=32)

        assert BodyStream(body).chunk_size == 32

    def test_close_when_abort_fails(self, body, make_stream):
        """Test the stream is closed even if releasing a source fails."""
        body.add_field_from_stream("s", "s", make_stream(b"x", close_error=OSError("close failed")))
        stream = BodyStream(body)

        with pytest.raises(OSError, match="close failed"):
            stream.close()
        assert stream.closed is True

    def test_read_after_close_raises(self, body):
        """Test a closed stream refuses reads."""
        stream = BodyStream(body)
        stream.close()

        with pytest.raises(ValueError):
            stream.read()
