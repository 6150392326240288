import logging
import time

from app.git.exceptions import GitException
from app.git.services import GitCommandRunner
from app.jobs.enums import JobState, JobStep
from app.jobs.exceptions import JobStepException
from app.jobs.queue import JobQueue
from app.jobs.schemas import Job, JobOutcome
from app.jobs.services.workspace import WorkspaceService

logger = logging.getLogger(__name__)

FAILURE_MESSAGES = {
    JobStep.CLONE: "Failed to clone repository.",
    JobStep.APPLY: "Failed to apply patch.",
    JobStep.PUSH: "Failed to push changes.",
    JobStep.CLEANUP: "Failed to remove working directory.",
}


class JobWorker:
    """
    The single consumer of the job queue.
    Owns every filesystem and git side effect: clone, apply, push, cleanup.
    """

    def __init__(self, queue: JobQueue, git_runner: GitCommandRunner, workspace_service: WorkspaceService):
        self.queue = queue
        self.git_runner = git_runner
        self.workspace_service = workspace_service

    async def run(self) -> None:
        """Drains the queue forever, one job at a time. Returns only on cancellation."""
        logger.info("Job worker started.")
        while True:
            job = await self.queue.get()
            try:
                outcome = await self.process(job)
            except Exception:
                logger.exception(f"Unexpected error while processing {job.describe()}")
                continue
            if not outcome.succeeded:
                logger.warning(
                    f"Request failed at {outcome.failed_step} {job.describe()} after {outcome.elapsed:.2f}s"
                )

    async def process(self, job: Job) -> JobOutcome:
        logger.info(f"Started processing request {job.describe()}")
        started = time.monotonic()
        state = JobState.RECEIVED
        failed_step: JobStep | None = None
        workdir = self.workspace_service.allocate()

        try:
            async with job.source:
                await self._run_step(
                    job, JobStep.CLONE,
                    "clone", "--depth", "1", "--branch", job.branch, job.repository, str(workdir),
                    cwd=self.workspace_service.root,
                )
                state = JobState.CLONED

                await self._run_step(job, JobStep.APPLY, "am", "-", cwd=workdir, stdin=job.source.iter_chunks())
                state = JobState.PATCHED
                logger.info(f"Patch applied {job.describe()} bytes={job.source.bytes_read}")

            await self._run_step(job, JobStep.PUSH, "push", cwd=workdir)
            state = JobState.PUSHED
        except JobStepException as e:
            failed_step = JobStep(e.step)
            state = JobState.FAILED
        finally:
            try:
                await self.workspace_service.release(workdir)
            except OSError as e:
                logger.error(
                    f"{FAILURE_MESSAGES[JobStep.CLEANUP]} {job.describe()} "
                    f"step={JobStep.CLEANUP} path={workdir} error={e}"
                )
                failed_step = failed_step or JobStep.CLEANUP
                state = JobState.FAILED

        elapsed = time.monotonic() - started
        if state == JobState.PUSHED:
            state = JobState.CLEANED
            logger.info(f"Request served {job.describe()} in {elapsed:.2f}s")

        return JobOutcome(job_id=job.job_id, state=state, failed_step=failed_step, elapsed=elapsed)

    async def _run_step(self, job: Job, step: JobStep, command: str, *args: str, **kwargs) -> None:
        step_started = time.monotonic()
        try:
            await self.git_runner.run(command, *args, **kwargs)
        except GitException as e:
            elapsed = time.monotonic() - step_started
            logger.error(
                f"{FAILURE_MESSAGES[step]} {job.describe()} step={step} elapsed={elapsed:.2f}s error={e}"
            )
            raise JobStepException(step, str(e)) from e
        elapsed = time.monotonic() - step_started
        logger.info(f"Step {step} finished {job.describe()} in {elapsed:.2f}s")
