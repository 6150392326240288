from .fetcher import PatchFetcher
from .intake import IntakeService
from .worker import JobWorker
from .workspace import WorkspaceService

__all__ = [
    "PatchFetcher",
    "IntakeService",
    "JobWorker",
    "WorkspaceService",
]
