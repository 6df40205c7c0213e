# ═══════════════════════════════════════════════════════════════
# cmdrunner - Command Runners
# Run external programs locally, through sudo, or over ssh behind
# one interface
# ═══════════════════════════════════════════════════════════════
#
# Usage Example:
# --------------
#   import io
#   from cmdrunner import LocalRunner, SSHCLIRunner, SSHCLIConfig
#
#   out = io.BytesIO()
#   await LocalRunner().run("echo", "Hello world!", stdout=out)
#
#   remote = SSHCLIRunner(LocalRunner(), SSHCLIConfig(destination="narnia.local"))
#   remote.env("FOO=BAR")
#   await remote.run("docker", "ps", "-a", stdout=out)
#
# ═══════════════════════════════════════════════════════════════

from .core.exceptions import (
    RunnerException,
    ExitError,
    SignalError,
    InvocationCancelledError,
    ConfigurationError,
    DestinationNotSetError,
)
from .core.config import Settings, get_settings
from .core.logging import configure_logging, get_logger, logging_context
from .runners import (
    RunnerType,
    Command,
    SudoConfig,
    SSHCLIConfig,
    RunnerConfig,
    CancellationToken,
    Runner,
    WrappingRunner,
    LocalRunner,
    SudoRunner,
    SSHCLIRunner,
    LoggingRunner,
    LogSink,
    LoggerSink,
    create_runner,
    run_local,
)

__all__ = [
    # Errors
    "RunnerException",
    "ExitError",
    "SignalError",
    "InvocationCancelledError",
    "ConfigurationError",
    "DestinationNotSetError",

    # Configuration & logging
    "Settings",
    "get_settings",
    "configure_logging",
    "get_logger",
    "logging_context",

    # Models
    "RunnerType",
    "Command",
    "SudoConfig",
    "SSHCLIConfig",
    "RunnerConfig",

    # Runners
    "CancellationToken",
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

__version__ = "1.0.0"
__description__ = "Composable local, sudo and ssh command runners"
