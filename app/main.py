import asyncio
import contextlib
import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from app.core.config import settings
from app.jobs.factories import build_job_queue, build_job_worker, build_patch_http_client
from app.jobs.queue import initialize_global_queue
from app.jobs.routes.http import router as jobs_http_router

logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):  # noqa
    """
    Creates the process-wide job queue and starts its single worker.
    The worker is cancelled on shutdown; an in-flight job is abandoned.
    """
    queue = build_job_queue()
    initialize_global_queue(queue)

    app.state.http_client = build_patch_http_client()

    worker = build_job_worker(queue)
    worker_task = asyncio.create_task(worker.run(), name="job-worker")

    yield

    worker_task.cancel()
    with contextlib.suppress(asyncio.CancelledError):
        await worker_task
    await app.state.http_client.aclose()


app = FastAPI(lifespan=lifespan, docs_url=None, redoc_url=None, openapi_url=None)

app.include_router(jobs_http_router)


def run() -> None:
    uvicorn.run(app, host=settings.HOST, port=settings.PORT, log_level=settings.LOG_LEVEL.lower())
