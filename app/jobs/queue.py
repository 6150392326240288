import asyncio
import logging

from app.jobs.schemas import Job

logger = logging.getLogger(__name__)


class JobQueue:
    """
    Zero-capacity hand-off between producers and the single worker.

    `put` returns only after the worker has taken the job. Pending producers
    are served in arrival order; one that is cancelled before the hand-off
    withdraws its job.
    """

    def __init__(self) -> None:
        # the slot only holds a job while its producer waits for the worker
        self._slot: asyncio.Queue[tuple[Job, asyncio.Future[None]]] = asyncio.Queue(maxsize=1)

    async def put(self, job: Job) -> None:
        handoff: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        try:
            await self._slot.put((job, handoff))
            await handoff
        except asyncio.CancelledError:
            if not handoff.done() or handoff.cancelled():
                handoff.cancel()
                logger.info(f"Withdrawn before hand-off {job.describe()}")
                await job.source.aclose()
            raise

    async def get(self) -> Job:
        while True:
            job, handoff = await self._slot.get()
            if handoff.done():
                # producer gave up while waiting
                continue
            handoff.set_result(None)
            return job


_queue: JobQueue | None = None

def initialize_global_queue(queue: JobQueue) -> None:
    global _queue
    _queue = queue

def get_global_queue() -> JobQueue:
    if _queue is None:
        raise RuntimeError("JobQueue is not initialized. Call initialize_global_queue() first.")
    return _queue
