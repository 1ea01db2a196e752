from formbody.errors import FormBodyError, ClosedError, WriteError
from formbody.multipart import FormBody, PartWriter, build_multipart
from formbody.reader import SegmentReader
from formbody.streaming import BodyStream, iter_chunks
from formbody.utils import escape_quotes, random_boundary

__all__ = [
    "FormBody",
    "PartWriter",
    "SegmentReader",
    "BodyStream",
    "build_multipart",
    "iter_chunks",
    "escape_quotes",
    "random_boundary",
    "FormBodyError",
    "ClosedError",
    "WriteError",
]
