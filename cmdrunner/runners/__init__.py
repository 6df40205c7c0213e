# ═══════════════════════════════════════════════════════════════
# cmdrunner - Runners
# Interchangeable ways of delivering a command
# ═══════════════════════════════════════════════════════════════
#
# Every runner exposes the same contract (run / run_context / env).
# Wrapping runners rewrite the command and hand it to the runner they
# wrap, so they compose by nesting:
#
# ┌─────────────────────────────────────────────────────────────┐
# │  LoggingRunner   records command + args, changes nothing    │
# └──────────────────────────┬──────────────────────────────────┘
#                            ▼
# ┌─────────────────────────────────────────────────────────────┐
# │  SudoRunner      sudo -n [-u USER] [ARGS] -- CMD ...        │
# └──────────────────────────┬──────────────────────────────────┘
#                            ▼
# ┌─────────────────────────────────────────────────────────────┐
# │  SSHCLIRunner    ssh [OPTS] DEST -- [env K=V ...] CMD ...   │
# └──────────────────────────┬──────────────────────────────────┘
#                            ▼
# ┌─────────────────────────────────────────────────────────────┐
# │  LocalRunner     spawns the process, forwards streams       │
# └─────────────────────────────────────────────────────────────┘
#
# ═══════════════════════════════════════════════════════════════

from .models import (
    RunnerType,
    Command,
    SudoConfig,
    SSHCLIConfig,
    RunnerConfig,
)
from .cancellation import CancellationToken
from .base import Runner, WrappingRunner
from .local import LocalRunner, run_local
from .sudo import SudoRunner
from .ssh_cli import SSHCLIRunner
from .logged import LogSink, LoggerSink, LoggingRunner
from .factory import create_runner

__all__ = [
    # Models
    "RunnerType",
    "Command",
    "SudoConfig",
    "SSHCLIConfig",
    "RunnerConfig",

    # Cancellation
    "CancellationToken",

    # Runners
    "Runner",
    "WrappingRunner",
    "LocalRunner",
    "SudoRunner",
    "SSHCLIRunner",
    "LoggingRunner",
    "LogSink",
    "LoggerSink",

    # Factory & convenience
    "create_runner",
    "run_local",
]
