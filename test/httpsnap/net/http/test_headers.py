from httpsnap.http import Headers
from httpsnap.net.http.headers import assemble_header_lines
from httpsnap.net.http.headers import get_header
from httpsnap.net.http.headers import headers_from_mapping
from httpsnap.net.http.headers import headers_from_multidict


def test_headers_from_multidict():
    h = Headers(
        [
            (b"Content-Type", b"text/html"),
            (b"Set-Cookie", b"a=1"),
            (b"set-cookie", b"b=2"),
        ]
    )
    assert headers_from_multidict(h) == {
        "Content-Type": "text/html",
        "Set-Cookie": "a=1, b=2",
    }
    assert headers_from_multidict(Headers()) == {}


def test_headers_from_mapping():
    raw = headers_from_mapping(
        {
            "X-B": "b",
            "x-a": ["1", "2", 3],
            "Missing": None,
            "Content-Length": 42,
            "Empty": "",
            "Tuple": ("x",),
        }
    )
    assert list(raw.items()) == [
        ("X-B", "b"),
        ("x-a", "1, 2, 3"),
        ("Content-Length", "42"),
        ("Empty", ""),
        ("Tuple", "x"),
    ]


def test_get_header():
    raw = {"content-TYPE": "text/plain", "Content-Type": "application/json"}
    assert get_header(raw, "Content-Type") == "text/plain"
    assert get_header(raw, "content-encoding") is None


def test_assemble_header_lines():
    assert assemble_header_lines({"A": "1", "b": ""}) == ["A: 1", "b: "]
    assert assemble_header_lines({}) == []
