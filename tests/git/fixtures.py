import stat
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from pytest_mock import MockerFixture

from app.git.services import GitCommandRunner

FAKE_GIT_SCRIPT = """#!/bin/sh
# records its argv and stdin in the working directory
printf '%s\\n' "$@" > args.txt
if [ -n "$FAKE_GIT_SKIP_STDIN" ]; then
    exit "${FAKE_GIT_EXIT:-0}"
fi
cat > stdin.bin
exit "${FAKE_GIT_EXIT:-0}"
"""


@pytest.fixture
def fake_git_binary(tmp_path: Path) -> Path:
    script = tmp_path / "fake-git"
    script.write_text(FAKE_GIT_SCRIPT)
    script.chmod(script.stat().st_mode | stat.S_IEXEC)
    return script


@pytest.fixture
def git_runner(fake_git_binary: Path) -> GitCommandRunner:
    return GitCommandRunner(binary=str(fake_git_binary))


@pytest.fixture
def git_runner_mock(mocker: MockerFixture) -> MagicMock:
    return mocker.create_autospec(GitCommandRunner, instance=True)
