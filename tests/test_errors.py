"""Tests for formbody.errors module."""

import pytest
from formbody.errors import ClosedError, FormBodyError, WriteError


class TestErrorHierarchy:
    """Tests for error class hierarchy."""

    def test_form_body_error_is_exception(self):
        """Test FormBodyError inherits from Exception."""
        assert issubclass(FormBodyError, Exception)

    def test_closed_error_inherits_form_body_error(self):
        """Test ClosedError inherits from FormBodyError."""
        assert issubclass(ClosedError, FormBodyError)

    def test_write_error_inherits_form_body_error(self):
        """Test WriteError inherits from FormBodyError."""
        assert issubclass(WriteError, FormBodyError)

    def test_not_os_errors(self):
        """Test builder errors are distinct from I/O failures."""
        assert not issubclass(ClosedError, OSError)
        assert not issubclass(WriteError, OSError)


class TestErrorCatching:
    """Tests for catching errors raised by a body."""

    def test_catch_closed_as_base(self, body):
        """Test ClosedError from a closed body can be caught as FormBodyError."""
        body.close()
        with pytest.raises(FormBodyError, match="closed"):
            body.write_field("f", "v")

    def test_catch_write_error_as_base(self, body):
        """Test WriteError from a stale writer can be caught as FormBodyError."""
        part = body.create_form_field("a")
        body.create_form_field("b")
        with pytest.raises(FormBodyError):
            part.write(b"x")
