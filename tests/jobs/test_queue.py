import asyncio

import pytest

from app.jobs.queue import JobQueue, get_global_queue, initialize_global_queue
from app.jobs.schemas import Job
from tests.jobs.fixtures import InMemoryPatchSource


def _job(name: str) -> Job:
    return Job(repository=f"https://example.test/{name}.git", branch="main", source=InMemoryPatchSource([b"x"]))


class TestJobQueue:
    async def test_put_blocks_until_worker_takes_the_job(self, job_queue: JobQueue, job: Job):
        producer = asyncio.create_task(job_queue.put(job))
        await asyncio.sleep(0.01)

        assert not producer.done()

        taken = await job_queue.get()
        await asyncio.wait_for(producer, timeout=1)

        assert taken is job

    async def test_jobs_are_delivered_in_enqueue_order(self, job_queue: JobQueue):
        jobs = [_job("a"), _job("b"), _job("c")]
        producers = []
        for job in jobs:
            producers.append(asyncio.create_task(job_queue.put(job)))
            await asyncio.sleep(0)

        taken = [await job_queue.get() for _ in jobs]
        await asyncio.gather(*producers)

        assert taken == jobs

    async def test_second_producer_waits_while_first_is_pending(self, job_queue: JobQueue):
        first = asyncio.create_task(job_queue.put(_job("a")))
        second = asyncio.create_task(job_queue.put(_job("b")))
        await asyncio.sleep(0.01)

        await job_queue.get()
        await asyncio.wait_for(first, timeout=1)

        assert not second.done()
        await job_queue.get()
        await asyncio.wait_for(second, timeout=1)

    async def test_cancelled_producer_withdraws_and_releases_its_job(self, job_queue: JobQueue):
        withdrawn = _job("withdrawn")
        producer = asyncio.create_task(job_queue.put(withdrawn))
        await asyncio.sleep(0.01)

        producer.cancel()
        with pytest.raises(asyncio.CancelledError):
            await producer

        assert withdrawn.source.closed

        kept = _job("kept")
        second = asyncio.create_task(job_queue.put(kept))
        taken = await asyncio.wait_for(job_queue.get(), timeout=1)
        await second

        assert taken is kept


class TestGlobalQueue:
    def test_initialize_and_get_global_queue(self, job_queue: JobQueue):
        initialize_global_queue(job_queue)

        assert get_global_queue() is job_queue
