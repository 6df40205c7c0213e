# ═══════════════════════════════════════════════════════════════
# cmdrunner - Logging Runner
# Record executed commands, then delegate unchanged
# ═══════════════════════════════════════════════════════════════

import json
import logging
from typing import Any, Optional, Protocol, runtime_checkable

from .base import Input, Output, Runner, WrappingRunner
from .cancellation import CancellationToken
from .models import RunnerType


def _encode(values) -> str:
    """Compact JSON list with non-ASCII text left unescaped."""
    return json.dumps(list(values), separators=(',', ':'), ensure_ascii=False)


@runtime_checkable
class LogSink(Protocol):
    """Anything accepting printf-style log lines."""

    def log(self, fmt: str, *args: Any) -> None:
        ...


class LoggerSink:
    """LogSink writing to a standard library logger."""

    def __init__(self, logger: logging.Logger, level: int = logging.INFO):
        self.logger = logger
        self.level = level

    def log(self, fmt: str, *args: Any) -> None:
        self.logger.log(self.level, fmt, *args)


class LoggingRunner(WrappingRunner):
    """
    Logging Runner - observes commands without changing them.

    Before delegating, one line with the command and its JSON encoded
    arguments is written to ``log_sink``. env() calls are logged too when
    ``log_env`` is set. Without a sink commands still run.

    Usage:
        sink = LoggerSink(logging.getLogger("deploy"))
        runner = LoggingRunner(LocalRunner(), sink)
        await runner.run("uname", "-a")
        # runner.run: command=uname args=["-a"]
    """

    runner_type = RunnerType.LOGGING

    def __init__(
        self,
        runner: Runner,
        log_sink: Optional[LogSink] = None,
        log_env: bool = False,
    ):
        """
        Initialize logging runner.

        Args:
            runner: Inner runner that executes commands
            log_sink: Destination for log lines
            log_env: Whether env() calls are logged

        Raises:
            ConfigurationError: If ``runner`` is None
        """
        super().__init__(runner)
        self.log_sink = log_sink
        self.log_env = log_env

    async def run(
        self,
        command: str,
        *args: str,
        stdin: Input = None,
        stdout: Output = None,
        stderr: Output = None,
        token: Optional[CancellationToken] = None,
    ) -> None:
        """Log the command, then execute it with the inner runner."""
        operation = "runner.run" if token is None else "runner.run_context"
        self._emit(f"{operation}: command=%s args=%s", command, _encode(args))

        await self.runner.run(
            command, *args,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
            token=token,
        )

    def env(self, *entries: str) -> None:
        """Set the environment on the inner runner, logging it if enabled."""
        if self.log_env:
            self._emit("runner.env: vars=%s", _encode(entries))

        super().env(*entries)
        self._delegate_env(entries)

    def _emit(self, fmt: str, *args: Any) -> None:
        if self.log_sink is None:
            return
        try:
            self.log_sink.log(fmt, *args)
        except Exception as e:
            self.logger.warning(
                f"Log sink failed: {e}",
                extra_fields={'sink': type(self.log_sink).__name__},
            )
