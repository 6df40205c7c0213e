# ═══════════════════════════════════════════════════════════════
# cmdrunner - Base Runner
# Abstract contract shared by every runner
# ═══════════════════════════════════════════════════════════════

from abc import ABC, abstractmethod
from typing import IO, Any, Iterable, List, Optional, Tuple, Union

from ..core.exceptions import ConfigurationError
from ..core.logging import get_logger
from .cancellation import CancellationToken
from .models import RunnerType

# What callers may hand in as stdin: a binary readable object or raw bytes.
Input = Union[IO[bytes], bytes, bytearray, None]
# What callers may hand in as stdout / stderr: any object with write().
Output = Optional[IO[Any]]


class Runner(ABC):
    """
    Abstract base class for all runners.

    A runner executes a program with arguments and forwards the child's
    standard streams. Some runners spawn the process themselves
    (LocalRunner); others rewrite the command and delegate to an inner
    runner (SudoRunner, SSHCLIRunner, LoggingRunner), so runners nest:

        LoggingRunner(SSHCLIRunner(LocalRunner(), config), sink)

    Every layer honours the same contract:
    - ``run`` returns None on success and raises on failure
      (ExitError, SignalError, ConfigurationError, OSError from spawning)
    - ``stdout``/``stderr`` of None discard output, ``stdin`` of None gives
      the child no input
    - a ``token`` that fires kills the child and raises SignalError

    Environment set with ``env()`` is mutable state on the instance. Do not
    call ``env()`` on an instance while invocations are in flight on it.
    """

    runner_type: RunnerType = RunnerType.LOCAL

    def __init__(self):
        self.logger = get_logger(f"cmdrunner.runners.{self.runner_type.value}")
        self._env: Optional[List[str]] = None

    # ═══════════════════════════════════════════════════════════
    # Invocation
    # ═══════════════════════════════════════════════════════════

    @abstractmethod
    async def run(
        self,
        command: str,
        *args: str,
        stdin: Input = None,
        stdout: Output = None,
        stderr: Output = None,
        token: Optional[CancellationToken] = None,
    ) -> None:
        """
        Execute a command and wait for it to finish.

        Args:
            command: Program to execute
            *args: Program arguments, in order
            stdin: Input for the child, or None for no input
            stdout: Destination for the child's stdout, or None to discard
            stderr: Destination for the child's stderr, or None to discard
            token: Kills the child when it fires

        Raises:
            ExitError: Child exited with a nonzero status
            SignalError: Child was killed, e.g. because ``token`` fired
            ConfigurationError: Runner is missing required configuration
            OSError: Child could not be spawned
        """
        pass

    async def run_context(
        self,
        token: CancellationToken,
        command: str,
        *args: str,
        stdin: Input = None,
        stdout: Output = None,
        stderr: Output = None,
    ) -> None:
        """Cancellation-aware variant of ``run`` taking the token first."""
        await self.run(
            command, *args,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
            token=token,
        )

    # ═══════════════════════════════════════════════════════════
    # Environment
    # ═══════════════════════════════════════════════════════════

    def env(self, *entries: str) -> None:
        """
        Replace the environment used for executed commands.

        Each entry has the form "KEY=VALUE". Calling ``env()`` with no
        entries sets an empty environment, which differs from never calling
        it at all. Duplicate keys are kept here; the last one wins when the
        process is spawned.
        """
        self._env = list(entries)

    @property
    def environment(self) -> Optional[Tuple[str, ...]]:
        """Entries given to the last ``env()`` call, or None if never called."""
        if self._env is None:
            return None
        return tuple(self._env)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(env={self.environment})>"


class WrappingRunner(Runner):
    """Base for runners that delegate to an inner runner."""

    def __init__(self, runner: Runner):
        """
        Args:
            runner: Inner runner that receives the (rewritten) command

        Raises:
            ConfigurationError: If ``runner`` is None
        """
        if runner is None:
            raise ConfigurationError(self.runner_type.value, "runner must be set")

        super().__init__()
        self.runner = runner

    def _delegate_env(self, entries: Iterable[str]) -> None:
        self.runner.env(*entries)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(runner={self.runner!r})>"
