from functools import lru_cache

from app.core.config import settings
from app.git.services import GitCommandRunner


@lru_cache
def build_git_runner() -> GitCommandRunner:
    return GitCommandRunner(binary=settings.GIT_BINARY)
