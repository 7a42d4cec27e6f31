"""Asynchronous git command execution for git-worktree-keeper."""

import asyncio
import signal
from contextlib import contextmanager, suppress
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Sequence, Tuple, Union

import git

from git_worktree_keeper.exceptions import ExternalCommandError
from git_worktree_keeper.logging_config import get_logger

logger = get_logger(__name__)

PathLike = Union[str, Path]

# Signals forwarded to git children while the runner waits on them
INTERRUPT_SIGNALS: Tuple[int, ...] = (signal.SIGINT, signal.SIGTERM)

# Interactive passthrough commands also get job-control signals
PASSTHROUGH_SIGNALS: Tuple[int, ...] = INTERRUPT_SIGNALS + tuple(
    getattr(signal, name) for name in ("SIGTSTP", "SIGCONT") if hasattr(signal, name)
)


def git_executable() -> str:
    """The git executable GitPython resolved (honours GIT_PYTHON_GIT_EXECUTABLE)."""
    return git.Git.GIT_PYTHON_GIT_EXECUTABLE or "git"


@dataclass(frozen=True)
class CommandResult:
    """Exit status and captured output of one git invocation."""

    args: Tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return self.stdout.strip()

    @property
    def diagnostic(self) -> str:
        return self.stderr.strip()

    def check(self, operation: str, hint: Optional[str] = None) -> "CommandResult":
        """Return self, or raise ExternalCommandError on a nonzero exit."""
        if not self.ok:
            raise ExternalCommandError(operation, self.diagnostic, self.returncode, hint)
        return self


class GitRunner:
    """Runs git commands as asyncio subprocesses.

    Commands never raise on a nonzero exit; callers inspect the returned
    CommandResult. While children are running, SIGINT/SIGTERM received by this
    process are forwarded to them, and KeyboardInterrupt is raised once they
    have exited.
    """

    def __init__(self, cwd: Optional[PathLike] = None, executable: Optional[str] = None):
        self.cwd = cwd
        self.executable = executable or git_executable()
        self._children: set = set()
        self._installed: list = []
        self._interrupted: Optional[int] = None

    async def run(self, *args: str, cwd: Optional[PathLike] = None) -> CommandResult:
        """Run ``git <args>`` and capture its output."""
        command = [self.executable, *args]
        workdir = cwd if cwd is not None else self.cwd
        logger.debug(f"Running: git {' '.join(args)}" + (f" (in {workdir})" if workdir else ""))

        proc = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
            cwd=str(workdir) if workdir is not None else None,
        )
        with self._forwarding(proc, INTERRUPT_SIGNALS):
            stdout, stderr = await proc.communicate()

        if self._interrupted is not None:
            raise KeyboardInterrupt

        result = CommandResult(
            args=tuple(args),
            returncode=proc.returncode,
            stdout=stdout.decode("utf-8", errors="replace"),
            stderr=stderr.decode("utf-8", errors="replace"),
        )
        if not result.ok:
            logger.debug(f"git {args[0] if args else ''} exited {result.returncode}: {result.diagnostic}")
        return result

    async def passthrough(self, command: Sequence[str], cwd: PathLike) -> int:
        """Run an arbitrary command with inherited stdio and return its exit code.

        Signals are forwarded to the child, which decides how to exit.
        """
        logger.debug(f"Running in {cwd}: {' '.join(command)}")
        proc = await asyncio.create_subprocess_exec(*command, cwd=str(cwd))
        with self._forwarding(proc, PASSTHROUGH_SIGNALS):
            returncode = await proc.wait()
        self._interrupted = None
        return returncode

    @contextmanager
    def _forwarding(self, proc, signals: Tuple[int, ...]):
        if not self._children:
            self._interrupted = None
            self._install(signals)
        self._children.add(proc)
        try:
            yield
        finally:
            self._children.discard(proc)
            if not self._children:
                self._uninstall()

    def _install(self, signals: Tuple[int, ...]) -> None:
        loop = asyncio.get_running_loop()
        for signum in signals:
            try:
                loop.add_signal_handler(signum, self._forward, signum)
            except (NotImplementedError, RuntimeError):
                # Windows loops and non-main threads keep default handling
                logger.debug(f"Cannot forward signal {signum} on this platform")
                continue
            self._installed.append(signum)

    def _uninstall(self) -> None:
        loop = asyncio.get_running_loop()
        for signum in self._installed:
            loop.remove_signal_handler(signum)
        self._installed = []

    def _forward(self, signum: int) -> None:
        logger.debug(f"Forwarding signal {signum} to {len(self._children)} child process(es)")
        if signum in INTERRUPT_SIGNALS:
            self._interrupted = signum
        for proc in list(self._children):
            if proc.returncode is None:
                with suppress(ProcessLookupError):
                    proc.send_signal(signum)
