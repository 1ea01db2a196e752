class FormBodyError(Exception):
    """Base error for formbody."""


class ClosedError(FormBodyError):
    """Raised when a part is opened or written after the body was closed."""


class WriteError(FormBodyError):
    """Raised when writing through a part sink that is no longer current."""
