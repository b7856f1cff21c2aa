"""
Body extraction: turns the body of a source object into text, or None if there is no body.
"""

import logging

from httpsnap import exceptions
from httpsnap.http import ClientRequest
from httpsnap.http import Request
from httpsnap.http import Response
from httpsnap.streams import ReadableStream

logger = logging.getLogger(__name__)

BODY_ENCODING = "utf-8"


async def extract_fetch_body(source: Request | Response) -> str | None:
    """
    Decode the body of a fully-buffered request or response.

    Callers that want to keep using the source afterwards should hand in a copy.
    """
    if source.body is None:
        return None
    return await source.text()


async def extract_readable_body(stream: ReadableStream) -> str | None:
    """
    Read a stream until its end and decode everything as UTF-8.

    Returns None if the stream ended without emitting a single chunk.
    Errors raised by the stream are propagated unchanged.

    Raises:
        StreamAlreadyConsumed, if the stream has already been read from.
    """
    if not stream.readable:
        raise exceptions.StreamAlreadyConsumed(
            f"Failed to read the body of {type(stream).__name__}: message already read."
        )
    return await _collect(stream)


async def extract_writable_body(request: ClientRequest) -> str | None:
    """
    Capture everything written to an outgoing request until it is finished.

    Like `extract_readable_body`, this returns None if nothing was written.
    This waits until `end()` or `abort()` is called on the request.

    Raises:
        StreamAlreadyConsumed, if the written body has already been captured.
    """
    if not request.written.readable:
        raise exceptions.StreamAlreadyConsumed(
            f"Failed to capture the body of {type(request).__name__}: body already captured."
        )
    return await _collect(request.written)


async def _collect(stream: ReadableStream) -> str | None:
    buf = bytearray()
    chunks = 0
    while (chunk := await stream.read()) is not None:
        buf += chunk
        chunks += 1
    logger.debug(f"Read {chunks} chunks ({len(buf)} bytes) from {stream!r}.")
    if chunks == 0:
        return None
    return buf.decode(BODY_ENCODING, "replace")
