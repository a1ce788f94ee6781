"""Git command execution for git-worktree-keeper."""

import asyncio
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Dict, List, Optional, Sequence, Tuple, Union

from git_worktree_keeper.config import Config
from git_worktree_keeper.constants import GIT_ENV
from git_worktree_keeper.exceptions import ExecutionError, GitCommandError, GitTimeoutError
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

_READ_CHUNK = 64 * 1024


class _OutputLimitExceeded(Exception):
    pass


@dataclass(frozen=True)
class CommandResult:
    """Captured output of one git invocation.

    A non-zero ``returncode`` is a controlled failure ("branch not found"),
    not an exception; callers that need one call :meth:`check`.
    """

    stdout: str
    stderr: str
    returncode: int = 0
    args: Tuple[str, ...] = ()

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    def check(self) -> "CommandResult":
        """Return self, or raise GitCommandError if the command exited non-zero."""
        if self.returncode != 0:
            raise GitCommandError(self.args, self.returncode, self.stdout, self.stderr)
        return self


class CommandExecutor:
    """Runs git subcommands as subprocesses.

    Arguments are always handed to the git binary as a discrete vector, never
    through a shell, so branch names cannot smuggle in shell syntax.
    """

    def __init__(self, config: Optional[Config] = None):
        """Initialize the executor.

        Args:
            config: Engine configuration (timeouts, output cap, git binary)
        """
        self.config = config or Config()

    def build_env(self) -> Dict[str, str]:
        """Environment for git: the caller's environment with GIT_ENV forced on top."""
        env = dict(os.environ)
        env.update(GIT_ENV)
        return env

    async def run(
        self,
        cwd: Union[str, Path],
        args: Sequence[str],
        timeout_ms: Optional[int] = None,
    ) -> CommandResult:
        """Run ``git <args>`` in ``cwd``.

        Args:
            cwd: Working directory for the command
            args: Arguments following the git executable
            timeout_ms: Deadline in milliseconds (defaults to config.timeout_ms)

        Returns:
            CommandResult, including for non-zero exits

        Raises:
            GitTimeoutError: The process exceeded its deadline and was killed
            ExecutionError: git could not be started, or its output exceeded the cap
        """
        argv = [str(arg) for arg in args]
        timeout_ms = timeout_ms or self.config.timeout_ms
        logger.debug(f"Executing: git {argv} (cwd={cwd})")

        try:
            process = await asyncio.create_subprocess_exec(
                self.config.git_executable,
                *argv,
                cwd=str(cwd),
                env=self.build_env(),
                stdin=asyncio.subprocess.DEVNULL,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except (OSError, ValueError) as e:  # ValueError: NUL byte in an argument
            raise ExecutionError(argv, f"could not run {self.config.git_executable} in {cwd}: {e}") from e

        try:
            stdout, stderr = await asyncio.wait_for(
                self._communicate(process), timeout=timeout_ms / 1000
            )
        except asyncio.TimeoutError:
            await self._kill(process)
            logger.warning(f"git {argv} timed out after {timeout_ms}ms, process killed")
            raise GitTimeoutError(argv, timeout_ms) from None
        except _OutputLimitExceeded:
            await self._kill(process)
            raise ExecutionError(
                argv, f"output exceeded {self.config.max_output_bytes} bytes"
            ) from None

        returncode = await process.wait()
        if returncode != 0:
            logger.debug(f"git {argv} exited {returncode}: {stderr.strip()}")

        return CommandResult(
            stdout=stdout,
            stderr=stderr,
            returncode=returncode,
            args=tuple(argv),
        )

    async def _communicate(self, process: asyncio.subprocess.Process) -> Tuple[str, str]:
        """Drain stdout and stderr concurrently, enforcing the combined size cap."""
        limit = self.config.max_output_bytes
        captured: List[bytearray] = [bytearray(), bytearray()]
        total = 0

        async def pump(stream: asyncio.StreamReader, buffer: bytearray) -> None:
            nonlocal total
            while True:
                chunk = await stream.read(_READ_CHUNK)
                if not chunk:
                    return
                total += len(chunk)
                if total > limit:
                    raise _OutputLimitExceeded()
                buffer.extend(chunk)

        readers = [
            asyncio.ensure_future(pump(process.stdout, captured[0])),
            asyncio.ensure_future(pump(process.stderr, captured[1])),
        ]
        try:
            await asyncio.gather(*readers)
        finally:
            for reader in readers:
                reader.cancel()

        return (
            captured[0].decode("utf-8", errors="replace"),
            captured[1].decode("utf-8", errors="replace"),
        )

    @staticmethod
    async def _kill(process: asyncio.subprocess.Process) -> None:
        if process.returncode is None:
            try:
                process.kill()
            except ProcessLookupError:
                pass  # already exited
        await process.wait()
