import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from typing import Any

import httpx

from app.jobs.exceptions import PatchSourceConsumedException, PatchTooLargeException

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 64 * 1024


class PatchSource(ABC):
    """
    Forward-only, single-consumer stream of patch bytes.
    It can be iterated once and releases its resource exactly once.
    """

    def __init__(self, max_bytes: int | None = None):
        self.max_bytes = max_bytes
        self.bytes_read = 0
        self._consumed = False
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    async def iter_chunks(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise PatchSourceConsumedException("Patch source has already been read.")
        self._consumed = True

        async for chunk in self._read_chunks():
            self.bytes_read += len(chunk)
            if self.max_bytes is not None and self.bytes_read > self.max_bytes:
                raise PatchTooLargeException(f"Patch exceeds the {self.max_bytes} bytes limit.")
            yield chunk

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._release()

    async def __aenter__(self) -> "PatchSource":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    @abstractmethod
    def _read_chunks(self) -> AsyncIterator[bytes]:
        ...

    @abstractmethod
    async def _release(self) -> None:
        ...


class SpooledPatchSource(PatchSource):
    """Patch bytes held in an async (aiofiles) spooled temporary file owned by the job."""

    def __init__(self, file: Any, chunk_size: int = DEFAULT_CHUNK_SIZE, max_bytes: int | None = None):
        super().__init__(max_bytes=max_bytes)
        self.file = file
        self.chunk_size = chunk_size

    async def _read_chunks(self) -> AsyncIterator[bytes]:
        await self.file.seek(0)
        while chunk := await self.file.read(self.chunk_size):
            yield chunk

    async def _release(self) -> None:
        await self.file.close()


class RemotePatchSource(PatchSource):
    """Patch bytes streamed straight from an open httpx response."""

    def __init__(self, response: httpx.Response, chunk_size: int = DEFAULT_CHUNK_SIZE, max_bytes: int | None = None):
        super().__init__(max_bytes=max_bytes)
        self.response = response
        self.chunk_size = chunk_size

    async def _read_chunks(self) -> AsyncIterator[bytes]:
        async for chunk in self.response.aiter_bytes(self.chunk_size):
            yield chunk

    async def _release(self) -> None:
        logger.debug(f"Closing patch download from {self.response.url}")
        await self.response.aclose()
