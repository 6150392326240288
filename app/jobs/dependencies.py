from fastapi import Depends, Request

from app.jobs.factories import build_intake_service, build_patch_fetcher
from app.jobs.queue import JobQueue, get_global_queue
from app.jobs.services import IntakeService, PatchFetcher


async def get_job_queue() -> JobQueue:
    return get_global_queue()


async def get_patch_fetcher(request: Request) -> PatchFetcher:
    return build_patch_fetcher(request.app.state.http_client)


async def get_intake_service(
    queue: JobQueue = Depends(get_job_queue),
    fetcher: PatchFetcher = Depends(get_patch_fetcher),
) -> IntakeService:
    return build_intake_service(queue=queue, fetcher=fetcher)
