class GitException(Exception):
    """Base exception for git application."""


class GitSpawnException(GitException):
    """Raised when the git binary cannot be launched."""


class GitInputException(GitException):
    """Raised when the stdin payload cannot be delivered to git."""


class GitCommandFailedException(GitException):
    """Raised when git exits with a non-zero status."""

    def __init__(self, command: str, returncode: int):
        super().__init__(f"git {command} exited with status {returncode}")
        self.command = command
        self.returncode = returncode
