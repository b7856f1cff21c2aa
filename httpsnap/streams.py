"""
Byte streams for message bodies that arrive, or leave, in chunks.

Both stream types are pull-based on the consuming side: `await stream.read()`
returns the next chunk, or None once the stream has ended. An error signalled
by the producer is raised from `read()` as-is.
"""

import asyncio
from collections.abc import AsyncIterable
from collections.abc import AsyncIterator


class ReadableStream:
    """
    A readable byte stream.

    Chunks are either pushed by the producer (`push`, `fail`) or pulled from an
    async iterable passed as `source`. The stream is consumed destructively:
    once a consumer has started reading, it is no longer `readable`.
    """

    def __init__(self, source: AsyncIterable[bytes] | None = None) -> None:
        self._source: AsyncIterator[bytes] | None = (
            aiter(source) if source is not None else None
        )
        self._queue: asyncio.Queue = asyncio.Queue()
        self._disturbed = False
        self._ended = False
        self._closed = False

    @property
    def readable(self) -> bool:
        """
        True as long as no consumer has started to read from this stream.
        """
        return not self._disturbed

    @property
    def ended(self) -> bool:
        """
        True once the producer has signalled the end of the stream or an error.
        """
        return self._ended

    def push(self, chunk: bytes | str | None) -> None:
        """
        Queue a chunk of data, or signal the end of the stream by pushing None.
        `str` chunks are encoded as UTF-8, empty chunks are dropped.
        """
        if self._source is not None:
            raise ValueError("Cannot push to a stream that reads from a source.")
        if self._ended:
            raise ValueError("Cannot push to a stream after it has ended.")
        if chunk is None:
            self._ended = True
            self._queue.put_nowait(None)
            return
        if isinstance(chunk, str):
            chunk = chunk.encode("utf-8")
        if chunk:
            self._queue.put_nowait(bytes(chunk))

    def fail(self, error: Exception) -> None:
        """
        Signal an error to the consumer. Chunks that are still queued are delivered first.
        """
        if self._source is not None:
            raise ValueError("Cannot fail a stream that reads from a source.")
        if self._ended:
            raise ValueError("Cannot fail a stream after it has ended.")
        self._ended = True
        self._queue.put_nowait(error)

    async def read(self) -> bytes | None:
        """
        Return the next chunk, or None at the end of the stream.
        Keeps returning None once the end has been reached.
        """
        self._disturbed = True
        if self._closed:
            return None
        if self._source is not None:
            return await self._read_source()
        item = await self._queue.get()
        if item is None:
            self._closed = True
            return None
        if isinstance(item, Exception):
            self._closed = True
            raise item
        return item

    async def _read_source(self) -> bytes | None:
        assert self._source is not None
        while True:
            try:
                chunk = await anext(self._source)
            except StopAsyncIteration:
                self._ended = self._closed = True
                return None
            except Exception:
                self._ended = self._closed = True
                raise
            if chunk:
                return bytes(chunk)

    def __aiter__(self) -> AsyncIterator[bytes]:
        return self._iter_chunks()

    async def _iter_chunks(self) -> AsyncIterator[bytes]:
        while (chunk := await self.read()) is not None:
            yield chunk


class WritableStream:
    """
    A writable byte stream that keeps everything written to it,
    so that the payload can be captured before it is sent anywhere.
    The captured chunks are available as a ReadableStream in `written`.
    """

    def __init__(self) -> None:
        self.written = ReadableStream()
        self._ending = False

    @property
    def writable(self) -> bool:
        return not self._ending

    @property
    def finished(self) -> bool:
        """
        True once `end()` or `abort()` has been called.
        """
        return self._ending

    def write(self, data: bytes | str) -> None:
        if self._ending:
            raise ValueError("Cannot write to a stream after end() has been called.")
        self.written.push(data)

    def end(self, data: bytes | str | None = None) -> None:
        """
        Finish the stream, optionally writing one last chunk.
        """
        if data is not None:
            self.write(data)
        self._ending = True
        self.written.push(None)

    def abort(self, error: Exception) -> None:
        if self._ending:
            raise ValueError("Cannot abort a stream after end() has been called.")
        self._ending = True
        self.written.fail(error)
