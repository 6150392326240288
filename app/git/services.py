import asyncio
import contextlib
import logging
from collections.abc import AsyncIterable
from pathlib import Path

from app.git.exceptions import GitCommandFailedException, GitInputException, GitSpawnException

logger = logging.getLogger(__name__)

QUIET_FLAG = "--quiet"


class GitCommandRunner:
    """
    Thin driver around the git binary.
    Output is inherited from the host process; only the exit status is interpreted.
    """

    def __init__(self, binary: str = "git"):
        self.binary = binary

    def build_argv(self, command: str, *args: str) -> list[str]:
        return [self.binary, command, QUIET_FLAG, *args]

    async def run(
        self,
        command: str,
        *args: str,
        cwd: str | Path | None = None,
        stdin: AsyncIterable[bytes] | None = None,
    ) -> None:
        """
        Runs `git <command> --quiet <args...>` and waits for it to exit.

        When `stdin` is given it is copied in full into the child's standard input,
        which is closed before waiting so the child observes end-of-input.

        Raises:
            GitSpawnException: the binary could not be started.
            GitInputException: the payload failed mid-copy (the child is killed),
                or the child exited cleanly without reading all of it.
            GitCommandFailedException: the child exited with a non-zero status.
        """
        argv = self.build_argv(command, *args)
        logger.debug(f"Running {argv} in {cwd or '.'}")

        try:
            process = await asyncio.create_subprocess_exec(
                *argv,
                cwd=str(cwd) if cwd else None,
                stdin=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            raise GitSpawnException(f"Failed to start {self.binary}: {e}") from e

        input_error: Exception | None = None
        input_truncated = False
        try:
            if stdin is not None:
                await self._copy_to_stdin(process, stdin)
        except (BrokenPipeError, ConnectionResetError):
            # the child stopped reading before the payload ended
            logger.debug(f"git {command} closed its stdin early")
            input_truncated = True
        except Exception as e:
            input_error = e
            # never let git act on a truncated payload
            with contextlib.suppress(ProcessLookupError):
                process.kill()
        finally:
            await self._close_stdin(process)

        returncode = await process.wait()

        if input_error is not None:
            raise GitInputException(f"Failed to feed git {command}: {input_error}") from input_error
        if returncode != 0:
            raise GitCommandFailedException(command, returncode)
        if input_truncated:
            raise GitInputException(f"git {command} exited before reading its whole input")

    @staticmethod
    async def _copy_to_stdin(process: asyncio.subprocess.Process, stdin: AsyncIterable[bytes]) -> None:
        async for chunk in stdin:
            if not chunk:
                continue
            process.stdin.write(chunk)
            await process.stdin.drain()

    @staticmethod
    async def _close_stdin(process: asyncio.subprocess.Process) -> None:
        if process.stdin is None or process.stdin.is_closing():
            return
        process.stdin.close()
        try:
            await process.stdin.wait_closed()
        except (BrokenPipeError, ConnectionResetError):
            pass
