import logging

import aiofiles.tempfile
from fastapi import Request
from pydantic import ValidationError
from starlette.datastructures import FormData, UploadFile
from starlette.exceptions import HTTPException
from starlette.formparsers import MultiPartException

from app.jobs.exceptions import InvalidSubmissionException, PatchSourceUnavailableException
from app.jobs.queue import JobQueue
from app.jobs.schemas import Job, PatchSubmission
from app.jobs.services.fetcher import PatchFetcher
from app.jobs.sources import DEFAULT_CHUNK_SIZE, PatchSource, SpooledPatchSource

logger = logging.getLogger(__name__)

MULTIPART_CONTENT_TYPE = "multipart/form-data"


class IntakeService:
    """
    Turns one multipart request into a Job and hands it to the worker.
    Returns only once the worker has taken the job.
    """

    def __init__(
        self,
        queue: JobQueue,
        fetcher: PatchFetcher,
        *,
        max_form_memory: int,
        max_patch_bytes: int,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ):
        self.queue = queue
        self.fetcher = fetcher
        self.max_form_memory = max_form_memory
        self.max_patch_bytes = max_patch_bytes
        self.chunk_size = chunk_size

    async def submit(self, request: Request) -> Job:
        form = await self._parse_form(request)
        try:
            job = await self.build_job(form)
        finally:
            await form.close()

        await self.queue.put(job)
        logger.info(f"Queued a valid request {job.describe()}")
        return job

    async def build_job(self, form: FormData) -> Job:
        """
        Validates the form fields and materializes the patch source.

        Raises:
            InvalidSubmissionException: missing, duplicated or conflicting fields.
            PatchSourceUnavailableException: the upload could not be spooled or the URL fetched.
        """
        patch = self._get_single(form, "patch")
        if patch is not None and not isinstance(patch, UploadFile):
            raise InvalidSubmissionException("Field 'patch' must be a file part.")

        try:
            submission = PatchSubmission(
                repository=self._get_text(form, "repository") or "",
                branch=self._get_text(form, "branch") or "",
                url=self._get_text(form, "url") or None,
            )
        except ValidationError as e:
            raise InvalidSubmissionException(f"Invalid submission: {e}") from e

        if patch is not None and submission.url is not None:
            raise InvalidSubmissionException("Provide either 'patch' or 'url', not both.")
        if patch is None and submission.url is None:
            raise InvalidSubmissionException("One of 'patch' or 'url' is required.")

        if patch is not None:
            source = await self._spool_upload(patch)
        else:
            source = await self.fetcher.open(str(submission.url))

        return Job(repository=submission.repository, branch=submission.branch, source=source)

    async def _parse_form(self, request: Request) -> FormData:
        content_type = request.headers.get("content-type", "")
        if not content_type.lower().startswith(MULTIPART_CONTENT_TYPE):
            raise InvalidSubmissionException(f"Expected {MULTIPART_CONTENT_TYPE}, got '{content_type}'.")
        try:
            return await request.form(max_part_size=self.max_form_memory)
        except (MultiPartException, HTTPException) as e:
            raise InvalidSubmissionException(f"Malformed multipart body: {e}") from e

    @staticmethod
    def _get_single(form: FormData, name: str) -> str | UploadFile | None:
        values = form.getlist(name)
        if len(values) > 1:
            raise InvalidSubmissionException(f"Field '{name}' was given {len(values)} times.")
        return values[0] if values else None

    def _get_text(self, form: FormData, name: str) -> str | None:
        value = self._get_single(form, name)
        if isinstance(value, UploadFile):
            raise InvalidSubmissionException(f"Field '{name}' must be a text value.")
        return value

    async def _spool_upload(self, upload: UploadFile) -> PatchSource:
        """Copies the uploaded part into a temporary file owned by the job."""
        try:
            spool = await aiofiles.tempfile.SpooledTemporaryFile(max_size=self.max_form_memory)
        except OSError as e:
            raise PatchSourceUnavailableException(f"Failed to open a spool for the patch: {e}") from e

        try:
            size = 0
            await upload.seek(0)
            while chunk := await upload.read(self.chunk_size):
                size += len(chunk)
                if size > self.max_patch_bytes:
                    raise InvalidSubmissionException(f"Patch exceeds the {self.max_patch_bytes} bytes limit.")
                await spool.write(chunk)
        except OSError as e:
            await spool.close()
            raise PatchSourceUnavailableException(f"Failed to read uploaded patch: {e}") from e
        except Exception:
            await spool.close()
            raise

        return SpooledPatchSource(spool, chunk_size=self.chunk_size, max_bytes=self.max_patch_bytes)
