"""
A textual HTTP message: start line, header block and body, as they would appear on the wire,
together with their sizes in bytes (as reported in HAR captures).

Messages are created from the objects in `httpsnap.http`:

>>> message = await HttpMessage.from_response(Response("Hello world"))
>>> print(message)
HTTP/1.0 200 OK
Content-Type: text/plain;charset=UTF-8

Hello world

The rendition always uses HTTP/1.0, except for streamed responses that
know the version they were received with.
"""

import codecs
import dataclasses
import logging
import sys
from collections.abc import Mapping
from types import MappingProxyType

from httpsnap import exceptions
from httpsnap.body import BODY_ENCODING
from httpsnap.body import extract_fetch_body
from httpsnap.body import extract_readable_body
from httpsnap.body import extract_writable_body
from httpsnap.coretypes import serializable
from httpsnap.http import ClientRequest
from httpsnap.http import IncomingMessage
from httpsnap.http import Request
from httpsnap.http import Response
from httpsnap.net.http import status_codes
from httpsnap.net.http.headers import assemble_header_lines
from httpsnap.net.http.headers import get_header
from httpsnap.net.http.headers import headers_from_mapping
from httpsnap.net.http.headers import headers_from_multidict

if sys.version_info < (3, 11):
    from typing_extensions import assert_never
else:
    from typing import assert_never

logger = logging.getLogger(__name__)

HTTP_VERSION = "HTTP/1.0"
"""The protocol version every message is rendered with."""

TARGET_PLACEHOLDER = "???"
"""
Request target used for outgoing streamed requests.
`ClientRequest` does not expose its resolved URL, so there is nothing better to show.
"""

CRLF = "\r\n"

Source = Request | ClientRequest | Response | IncomingMessage


def start_line(source: Source) -> str:
    """
    Build the request line or status line for a source object.
    Status lines fall back to the standard reason phrase if the source has none.
    """
    match source:
        case Request():
            return f"{source.method} {source.url} {HTTP_VERSION}"
        case ClientRequest():
            return f"{source.method} {TARGET_PLACEHOLDER} {HTTP_VERSION}"
        case Response():
            reason = source.reason or status_codes.RESPONSES.get(source.status_code, "")
            return f"{HTTP_VERSION} {source.status_code} {reason}"
        case IncomingMessage():
            status_code = source.status_code or status_codes.OK
            reason = source.reason or status_codes.RESPONSES.get(status_code, "")
            http_version = source.http_version or HTTP_VERSION
            return f"{http_version} {status_code} {reason}"
        case _:  # pragma: no cover
            assert_never(source)


def _byte_length(text: str, encoding: str | None) -> int:
    if encoding:
        try:
            codec = codecs.lookup(encoding).name
            # Body sizes never include a byte order mark.
            if codec in ("utf-16", "utf-32"):
                codec += "-le"
            return len(text.encode(codec, "replace"))
        except (LookupError, UnicodeError):
            # Content codings such as gzip are no text encodings.
            logger.debug(f"Unusable text encoding {encoding!r}, measuring body as {BODY_ENCODING}.")
    return len(text.encode(BODY_ENCODING))


@dataclasses.dataclass(frozen=True, eq=False, repr=False)
class HttpMessage(serializable.Serializable):
    """
    An immutable textual HTTP message.

    All derived attributes are computed once, from `start_line`, `raw_headers` and `body`.
    """

    start_line: str
    """
    Start line of the message, without line break.

    For requests: ``"GET https://example.com/ HTTP/1.0"``,
    for responses: ``"HTTP/1.0 200 OK"``.
    """
    raw_headers: Mapping[str, str]
    """Header names (original casing) mapped to their value, in order of appearance. Read-only."""
    body: str | None
    """The body text, or None if the message has no body. An empty body is not the same as no body."""

    headers: str = dataclasses.field(init=False)
    """
    The header block: one CRLF-terminated line per header,
    followed by another CRLF if a body follows. Empty if there are no headers.
    """
    mime_type: str = dataclasses.field(init=False)
    """Value of the Content-Type header, or an empty string."""
    encoding: str | None = dataclasses.field(init=False)
    """Value of the Content-Encoding header, or None. Used to measure the body size."""
    headers_size: int = dataclasses.field(init=False)
    """Number of bytes from the start of the message up to and including the header block."""
    body_size: int = dataclasses.field(init=False)
    """Number of bytes of the body."""

    def __post_init__(self) -> None:
        raw_headers = MappingProxyType(dict(self.raw_headers))
        encoding = get_header(raw_headers, "Content-Encoding") or None
        body_size = 0 if self.body is None else _byte_length(self.body, encoding)

        lines = assemble_header_lines(raw_headers)
        if not lines:
            headers = ""
        else:
            headers = CRLF.join(lines) + CRLF
            if self.body is not None:
                headers += CRLF

        object.__setattr__(self, "raw_headers", raw_headers)
        object.__setattr__(self, "headers", headers)
        object.__setattr__(self, "mime_type", get_header(raw_headers, "Content-Type") or "")
        object.__setattr__(self, "encoding", encoding)
        object.__setattr__(self, "body_size", body_size)
        object.__setattr__(
            self,
            "headers_size",
            len((self.start_line + CRLF + headers).encode("utf-8")),
        )

    @classmethod
    async def from_request(cls, request: Request | ClientRequest) -> "HttpMessage":
        """
        Create a message from a fully-buffered `Request` or a streamed `ClientRequest`.

        A `ClientRequest` is captured until it is ended. Its request target is not known
        and rendered as `TARGET_PLACEHOLDER`.

        Raises:
            UnsupportedSourceType, if the request is of neither type.
            StreamAlreadyConsumed, if the body of a `ClientRequest` has already been captured.
        """
        match request:
            case Request():
                line = start_line(request)
                raw_headers = headers_from_multidict(request.headers)
                body = await extract_fetch_body(request)
            case ClientRequest():
                line = start_line(request)
                raw_headers = headers_from_mapping(request.get_headers())
                body = await extract_writable_body(request)
            case _:
                raise exceptions.UnsupportedSourceType(
                    "Failed to create HTTP message from request: "
                    f"expected a Request or ClientRequest, but got {type(request).__name__}."
                )
        logger.debug(f"Created HTTP message from {request!r}.")
        return cls(line, raw_headers, body)

    @classmethod
    async def from_response(cls, response: Response | IncomingMessage) -> "HttpMessage":
        """
        Create a message from a fully-buffered `Response` or a streamed `IncomingMessage`.

        An `IncomingMessage` is read until the end of its stream,
        so it must not have been read from before.

        Raises:
            UnsupportedSourceType, if the response is of neither type.
            StreamAlreadyConsumed, if the `IncomingMessage` has already been read from.
        """
        match response:
            case Response():
                line = start_line(response)
                raw_headers = headers_from_multidict(response.headers)
                body = await extract_fetch_body(response)
            case IncomingMessage():
                line = start_line(response)
                raw_headers = headers_from_mapping(response.headers)
                body = await extract_readable_body(response)
            case _:
                raise exceptions.UnsupportedSourceType(
                    "Failed to create HTTP message from response: "
                    f"expected a Response or IncomingMessage, but got {type(response).__name__}."
                )
        logger.debug(f"Created HTTP message from {response!r}.")
        return cls(line, raw_headers, body)

    @property
    def total_size(self) -> int:
        """Total size of the message in bytes."""
        return self.headers_size + self.body_size

    def serialize(self) -> str:
        """
        Render the message as text:

        ```
        HTTP/1.0 200 OK
        content-type: text/plain;charset=UTF-8

        Hello world
        ```
        """
        message = self.start_line + CRLF + self.headers
        if self.body is not None:
            message += self.body
        elif self.headers:
            message += CRLF
        return message

    def __str__(self) -> str:
        return self.serialize()

    def __repr__(self) -> str:
        return f"HttpMessage({self.start_line}, {self.total_size}b)"

    def __eq__(self, other) -> bool:
        if isinstance(other, HttpMessage):
            return (
                self.start_line == other.start_line
                and list(self.raw_headers.items()) == list(other.raw_headers.items())
                and self.body == other.body
            )
        return False

    def __hash__(self) -> int:
        return hash((self.start_line, tuple(self.raw_headers.items()), self.body))

    def get_state(self) -> serializable.State:
        return {
            "start_line": self.start_line,
            "headers": [[name, value] for name, value in self.raw_headers.items()],
            "body": self.body,
        }

    def set_state(self, state):
        raise dataclasses.FrozenInstanceError("HttpMessage is immutable.")

    @classmethod
    def from_state(cls, state) -> "HttpMessage":
        return cls(
            state["start_line"],
            {name: value for name, value in state["headers"]},
            state["body"],
        )
