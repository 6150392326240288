import uuid
from dataclasses import dataclass, field

from pydantic import AnyHttpUrl, BaseModel, Field

from app.jobs.enums import JobState, JobStep
from app.jobs.sources import PatchSource


class PatchSubmission(BaseModel):
    repository: str = Field(min_length=1)
    branch: str = Field(min_length=1)
    url: AnyHttpUrl | None = None


@dataclass(slots=True)
class Job:
    repository: str
    branch: str
    source: PatchSource
    job_id: str = field(default_factory=lambda: uuid.uuid4().hex)

    def describe(self) -> str:
        return f"[job={self.job_id} repository={self.repository} branch={self.branch}]"


@dataclass(slots=True)
class JobOutcome:
    job_id: str
    state: JobState
    failed_step: JobStep | None = None
    elapsed: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.state == JobState.CLEANED and self.failed_step is None
