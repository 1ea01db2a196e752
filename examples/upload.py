#!/usr/bin/env python3
"""
Example: Uploading a large file without loading it into memory.

The body is built from a couple of fields and a file on disk, then handed
to http.client, which pulls it chunk by chunk. Pass a file path as the first
argument (defaults to this script).
"""
from __future__ import annotations

import http.client
import sys

from formbody import FormBody, BodyStream


def upload(path: str) -> None:
    body = FormBody()
    body.write_field("purpose", "example")
    body.write_field("note", 'quoted "name" fields are escaped')
    body.add_field_from_path("file", path.rsplit("/", 1)[-1], path)

    headers = {"Content-Type": body.content_type}
    length = body.content_length
    if length is not None:
        headers["Content-Length"] = str(length)

    conn = http.client.HTTPSConnection("httpbin.org", timeout=30)
    try:
        with BodyStream(body) as stream:
            conn.request("POST", "/post", body=stream, headers=headers,
                         encode_chunked=length is None)
        response = conn.getresponse()
        print(f"Status: {response.status}")
        print(response.read()[:300].decode(errors="replace"))
    finally:
        conn.close()


def dump(path: str) -> None:
    """Print the encoded body instead of sending it."""
    body = FormBody(boundary="example-boundary")
    body.write_field("purpose", "example")
    body.add_field_from_path("file", "payload", path)
    for chunk in body.iter_bytes(chunk_size=1024):
        sys.stdout.buffer.write(chunk)


if __name__ == "__main__":
    target = sys.argv[1] if len(sys.argv) > 1 else __file__
    if "--dump" in sys.argv:
        dump(target)
    else:
        upload(target)
