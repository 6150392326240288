class JobException(Exception):
    """Base exception for jobs application."""


class InvalidSubmissionException(JobException):
    """Raised when a patch submission is malformed or incomplete."""


class PatchSourceUnavailableException(JobException):
    """Raised when the patch bytes cannot be opened or fetched."""


class PatchSourceConsumedException(JobException):
    """Raised when a patch source is read more than once."""


class PatchTooLargeException(JobException):
    """Raised when a patch source exceeds the configured byte ceiling."""


class JobStepException(JobException):
    """Raised when one step of a job fails."""

    def __init__(self, step: str, message: str):
        super().__init__(message)
        self.step = step
