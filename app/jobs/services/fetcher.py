import logging

import httpx

from app.jobs.exceptions import PatchSourceUnavailableException
from app.jobs.sources import DEFAULT_CHUNK_SIZE, RemotePatchSource

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_SECONDS = 30.0


class PatchFetcher:
    """Opens a streaming GET on a patch URL without buffering the body."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        *,
        max_bytes: int | None = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.client = client
        self.max_bytes = max_bytes
        self.chunk_size = chunk_size

    async def open(self, url: str) -> RemotePatchSource:
        request = self.client.build_request("GET", url)
        try:
            response = await self.client.send(request, stream=True)
        except httpx.HTTPError as e:
            logger.warning(f"HTTP error fetching {url}: {e}")
            raise PatchSourceUnavailableException(f"Failed to fetch patch from {url}: {e}") from e

        if not response.is_success:
            await response.aclose()
            raise PatchSourceUnavailableException(f"Fetching {url} returned HTTP {response.status_code}")

        declared = response.headers.get("content-length")
        if self.max_bytes is not None and declared and declared.isdigit() and int(declared) > self.max_bytes:
            await response.aclose()
            raise PatchSourceUnavailableException(
                f"Patch at {url} declares {declared} bytes, above the {self.max_bytes} bytes limit"
            )

        return RemotePatchSource(response, chunk_size=self.chunk_size, max_bytes=self.max_bytes)


def build_http_client(timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        timeout=httpx.Timeout(timeout_seconds, connect=10.0),
        follow_redirects=True,
    )
