"""
The HTTP objects httpsnap knows how to turn into messages.

There are two families:

 - fully-buffered objects (`Request`, `Response`), modelled after fetch-style clients:
   headers live in a case-insensitive `Headers` multi-map and the body is decoded in one step.
 - streaming objects (`IncomingMessage`, `ClientRequest`), modelled after socket-based clients:
   headers are plain mappings and the body is a byte stream.
"""

from collections.abc import AsyncIterable
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping
from collections.abc import MutableMapping

from httpsnap.net.http.headers import HeaderValue
from httpsnap.streams import ReadableStream
from httpsnap.streams import WritableStream

DEFAULT_TEXT_CONTENT_TYPE = "text/plain;charset=UTF-8"

# Status codes for which a fetch-style response must not carry a body.
NULL_BODY_STATUS = frozenset({204, 205, 304})


# While headers _should_ be ASCII, it's not uncommon for certain headers to be utf-8 encoded.
# Anything else is taken as latin-1, which is what HTTP/1.x historically allowed.
def _native(x: str | bytes) -> str:
    if isinstance(x, str):
        return x
    elif isinstance(x, bytes):
        try:
            return x.decode("utf-8")
        except UnicodeDecodeError:
            return x.decode("latin-1")
    else:
        raise TypeError(f"Expected str or bytes, but got {type(x).__name__}.")


class Headers(MutableMapping[str, str]):
    """
    Header class which allows both convenient access to individual headers as well as
    direct access to the underlying fields. Provides a full dictionary interface.

    Create headers from a list of (header_name, header_value) tuples:
    >>> h = Headers([
        ("Host", "example.com"),
        ("Accept", "text/html"),
        ("accept", "application/xml")
    ])

    Headers are case insensitive:
    >>> h["host"]
    "example.com"

    Multiple headers are folded into a single header:
    >>> h["Accept"]
    "text/html, application/xml"

    Iteration yields each header name once, with the casing of its first occurrence:
    >>> list(h)
    ["Host", "Accept"]

    Raw bytes are accepted as well and decoded as UTF-8, falling back to latin-1.
    """

    fields: tuple[tuple[str, str], ...]
    """The (name, value) pairs in order of appearance, including repeated names."""

    def __init__(self, fields: Iterable[tuple[str | bytes, str | bytes]] = ()):
        self.fields = tuple((_native(name), _native(value)) for name, value in fields)

    def __repr__(self) -> str:
        return f"Headers[{', '.join(repr(field) for field in self.fields)}]"

    def __getitem__(self, name: str | bytes) -> str:
        values = self.get_all(name)
        if not values:
            raise KeyError(name)
        return ", ".join(values)

    def __setitem__(self, name: str | bytes, value: str | bytes) -> None:
        self.set_all(name, [value])

    def __delitem__(self, name: str | bytes) -> None:
        if name not in self:
            raise KeyError(name)
        key = _native(name).lower()
        self.fields = tuple(field for field in self.fields if field[0].lower() != key)

    def __iter__(self) -> Iterator[str]:
        seen = set()
        for name, _ in self.fields:
            if name.lower() not in seen:
                seen.add(name.lower())
                yield name

    def __len__(self) -> int:
        return len({name.lower() for name, _ in self.fields})

    def __eq__(self, other) -> bool:
        if isinstance(other, Headers):
            return self.fields == other.fields
        return False

    def get_all(self, name: str | bytes) -> list[str]:
        """
        Like `Headers.get`, but does not fold multiple headers into a single one.
        Returns an empty list if there is no such header.
        """
        key = _native(name).lower()
        return [value for n, value in self.fields if n.lower() == key]

    def set_all(self, name: str | bytes, values: Iterable[str | bytes]) -> None:
        """
        Replace all headers for the given name.
        Existing fields keep their position and casing, surplus values are appended.
        """
        name = _native(name)
        key = name.lower()
        pending = [_native(v) for v in values]

        fields: list[tuple[str, str]] = []
        for field in self.fields:
            if field[0].lower() != key:
                fields.append(field)
            elif pending:
                fields.append((field[0], pending.pop(0)))
        fields.extend((name, value) for value in pending)
        self.fields = tuple(fields)

    def add(self, name: str | bytes, value: str | bytes) -> None:
        """
        Add another header with the given name at the bottom, without replacing existing ones.
        """
        self.fields += ((_native(name), _native(value)),)

    def items(self, multi: bool = False):
        """
        Get all (name, value) tuples.

        If `multi` is True, repeated headers are returned separately.
        Otherwise, there is one tuple per name with the folded value.
        """
        if multi:
            return self.fields
        else:
            return super().items()


HeadersLike = Headers | Mapping[str, str] | Iterable[tuple[str | bytes, str | bytes]]


def make_headers(headers: HeadersLike) -> Headers:
    if isinstance(headers, Headers):
        return headers
    elif isinstance(headers, Mapping):
        return Headers(headers.items())
    elif isinstance(headers, Iterable):
        return Headers(headers)
    else:
        raise TypeError(
            "Expected headers to be an iterable or dict, but is {}.".format(
                type(headers).__name__
            )
        )


class _BufferedMessage:
    headers: Headers
    content: bytes | None

    def _set_body(self, body: str | bytes | None) -> None:
        if isinstance(body, str):
            if "content-type" not in self.headers:
                self.headers["Content-Type"] = DEFAULT_TEXT_CONTENT_TYPE
            body = body.encode("utf-8")
        elif body is not None and not isinstance(body, bytes):
            raise TypeError(
                f"Expected body to be str or bytes, but is {type(body).__name__}."
            )
        self.content = body

    @property
    def body(self) -> bytes | None:
        """
        The raw payload, or None if this message carries no body at all.
        """
        return self.content

    async def text(self) -> str:
        """
        The payload decoded as UTF-8, or an empty string if there is none.
        """
        if not self.content:
            return ""
        return self.content.decode("utf-8", "replace")


class Request(_BufferedMessage):
    """
    A fully-buffered HTTP request.

    A `str` body without an explicit content type implies
    ``Content-Type: text/plain;charset=UTF-8``.
    """

    def __init__(
        self,
        url: str,
        method: str = "GET",
        headers: HeadersLike = (),
        body: str | bytes | None = None,
    ):
        self.url = url
        self.method = method.upper()
        self.headers = Headers(make_headers(headers).fields)
        if body is not None and self.method in ("GET", "HEAD"):
            raise TypeError(f"Request with {self.method} method cannot have a body.")
        self._set_body(body)

    def __repr__(self) -> str:
        return f"Request({self.method} {self.url})"


class Response(_BufferedMessage):
    """
    A fully-buffered HTTP response.
    """

    def __init__(
        self,
        body: str | bytes | None = None,
        status_code: int = 200,
        reason: str = "",
        headers: HeadersLike = (),
    ):
        if not 200 <= status_code <= 599:
            raise ValueError(f"Invalid response status code: {status_code}")
        if body is not None and status_code in NULL_BODY_STATUS:
            raise TypeError(f"Response with status {status_code} cannot have a body.")
        self.status_code = status_code
        self.reason = reason
        self.headers = Headers(make_headers(headers).fields)
        self._set_body(body)

    def __repr__(self) -> str:
        return f"Response({self.status_code})"


class IncomingMessage(ReadableStream):
    """
    A received HTTP response whose body is read from a stream.

    `http_version` is the version the response was received with (e.g. ``"HTTP/1.1"``),
    if known. `headers` is a plain mapping from header names to a value or a list of values.
    """

    def __init__(
        self,
        status_code: int | None = None,
        reason: str | None = None,
        http_version: str | None = None,
        headers: Mapping[str, HeaderValue] | None = None,
        source: AsyncIterable[bytes] | None = None,
    ):
        super().__init__(source)
        self.status_code = status_code
        self.reason = reason
        self.http_version = http_version
        self.headers: dict[str, HeaderValue] = dict(headers or {})

    def __repr__(self) -> str:
        return f"IncomingMessage({self.status_code})"


class ClientRequest(WritableStream):
    """
    An outgoing HTTP request whose body is written to it in chunks.

    The target of the request is not exposed by this object.
    """

    def __init__(
        self,
        method: str = "GET",
        headers: Mapping[str, HeaderValue] | None = None,
    ):
        super().__init__()
        self.method = method.upper()
        self._headers: dict[str, HeaderValue] = dict(headers or {})

    def set_header(self, name: str, value: HeaderValue) -> None:
        self.remove_header(name)
        self._headers[name] = value

    def get_header(self, name: str) -> HeaderValue:
        name = name.lower()
        for key, value in self._headers.items():
            if key.lower() == name:
                return value
        return None

    def remove_header(self, name: str) -> None:
        name = name.lower()
        for key in [k for k in self._headers if k.lower() == name]:
            del self._headers[key]

    def get_headers(self) -> dict[str, HeaderValue]:
        """
        A copy of the outgoing headers, in insertion order.
        """
        return dict(self._headers)

    def __repr__(self) -> str:
        return f"ClientRequest({self.method})"
