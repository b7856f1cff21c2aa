"""
Exceptions that may reach users of httpsnap.

Everything raised on purpose by the message factories is a subclass of
HttpSnapException. Programming errors in the stream primitives use builtin
exceptions, and errors raised by a source stream are passed through unchanged.
"""


class HttpSnapException(Exception):
    """
    Base class for all exceptions thrown by httpsnap.
    """

    def __init__(self, message=None):
        super().__init__(message)


class UnsupportedSourceType(HttpSnapException, TypeError):
    """
    A message factory received a value that is neither of the request
    nor of the response shapes it knows about.
    """


class StreamAlreadyConsumed(HttpSnapException):
    """
    A streaming body was requested from a stream that has already been read from.
    Streams are consumed destructively, so callers need to pass a fresh one.
    """
