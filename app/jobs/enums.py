from enum import StrEnum


class JobState(StrEnum):
    RECEIVED = "RECEIVED"
    CLONED = "CLONED"
    PATCHED = "PATCHED"
    PUSHED = "PUSHED"
    CLEANED = "CLEANED"
    FAILED = "FAILED"


class JobStep(StrEnum):
    CLONE = "clone"
    APPLY = "apply"
    PUSH = "push"
    CLEANUP = "cleanup"
