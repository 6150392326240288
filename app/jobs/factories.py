import httpx

from app.core.config import settings
from app.git.factories import build_git_runner
from app.jobs.queue import JobQueue
from app.jobs.services import IntakeService, JobWorker, PatchFetcher, WorkspaceService
from app.jobs.services.fetcher import build_http_client


def build_job_queue() -> JobQueue:
    return JobQueue()


def build_patch_http_client() -> httpx.AsyncClient:
    return build_http_client(timeout_seconds=settings.FETCH_TIMEOUT_SECONDS)


def build_patch_fetcher(client: httpx.AsyncClient) -> PatchFetcher:
    return PatchFetcher(
        client,
        max_bytes=settings.MAX_PATCH_BYTES,
        chunk_size=settings.STREAM_CHUNK_SIZE,
    )


def build_workspace_service() -> WorkspaceService:
    return WorkspaceService(root=settings.WORKSPACE_DIR)


def build_job_worker(queue: JobQueue) -> JobWorker:
    return JobWorker(
        queue=queue,
        git_runner=build_git_runner(),
        workspace_service=build_workspace_service(),
    )


def build_intake_service(queue: JobQueue, fetcher: PatchFetcher) -> IntakeService:
    return IntakeService(
        queue=queue,
        fetcher=fetcher,
        max_form_memory=settings.MAX_FORM_MEMORY,
        max_patch_bytes=settings.MAX_PATCH_BYTES,
        chunk_size=settings.STREAM_CHUNK_SIZE,
    )
