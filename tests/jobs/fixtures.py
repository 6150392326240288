from collections.abc import AsyncIterator
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pytest_mock import MockerFixture

from app.jobs.dependencies import get_job_queue, get_patch_fetcher
from app.jobs.queue import JobQueue
from app.jobs.schemas import Job
from app.jobs.services import PatchFetcher, WorkspaceService
from app.jobs.sources import PatchSource

PATCH_BYTES = (
    b"From 1111111111111111111111111111111111111111 Mon Sep 17 00:00:00 2001\n"
    b"From: Dev <dev@example.test>\n"
    b"Subject: [PATCH] Fix typo\n"
    b"\n"
    b"---\n"
    b" README | 2 +-\n"
    b"\n"
    b"diff --git a/README b/README\n"
    b"--- a/README\n"
    b"+++ b/README\n"
    b"@@ -1 +1 @@\n"
    b"-helo\n"
    b"+hello\n"
)


class InMemoryPatchSource(PatchSource):
    """Patch source backed by a list of chunks; counts releases."""

    def __init__(self, chunks: list[bytes], max_bytes: int | None = None):
        super().__init__(max_bytes=max_bytes)
        self.chunks = chunks
        self.release_count = 0

    async def _read_chunks(self) -> AsyncIterator[bytes]:
        for chunk in self.chunks:
            yield chunk

    async def _release(self) -> None:
        self.release_count += 1


async def drain(source: PatchSource) -> bytes:
    return b"".join([chunk async for chunk in source.iter_chunks()])


@pytest.fixture
def patch_source() -> InMemoryPatchSource:
    return InMemoryPatchSource([PATCH_BYTES[:40], PATCH_BYTES[40:]])


@pytest.fixture
def job(patch_source: InMemoryPatchSource) -> Job:
    return Job(repository="https://example.test/r.git", branch="main", source=patch_source)


@pytest.fixture
def job_queue() -> JobQueue:
    return JobQueue()


@pytest.fixture
def job_queue_mock(mocker: MockerFixture) -> MagicMock:
    return mocker.create_autospec(JobQueue, instance=True)


@pytest.fixture
def patch_fetcher_mock(mocker: MockerFixture) -> MagicMock:
    return mocker.create_autospec(PatchFetcher, instance=True)


@pytest.fixture
def workspace_service(tmp_path: Path) -> WorkspaceService:
    root = tmp_path / "workspace"
    root.mkdir()
    return WorkspaceService(root=root)


@pytest.fixture
def override_get_job_queue(client, job_queue_mock: MagicMock):
    client.app.dependency_overrides[get_job_queue] = lambda: job_queue_mock
    yield
    client.app.dependency_overrides.clear()


@pytest.fixture
def override_get_patch_fetcher(client, patch_fetcher_mock: MagicMock):
    client.app.dependency_overrides[get_patch_fetcher] = lambda: patch_fetcher_mock
    yield
    client.app.dependency_overrides.clear()
