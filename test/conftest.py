from __future__ import annotations

from collections.abc import AsyncIterator
from collections.abc import Iterable

import pytest


async def achunks(chunks: Iterable[bytes | Exception]) -> AsyncIterator[bytes]:
    """
    Yield the given chunks asynchronously. Exceptions are raised instead of yielded.
    """
    for chunk in chunks:
        if isinstance(chunk, Exception):
            raise chunk
        yield chunk


@pytest.fixture
def chunk_source():
    return achunks
