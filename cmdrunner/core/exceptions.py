# ═══════════════════════════════════════════════════════════════
# cmdrunner - Exceptions
# Error taxonomy shared by every runner
# ═══════════════════════════════════════════════════════════════

import signal
from typing import Any, Dict, Optional

# Stable marker every configuration error message starts with.
ERROR_PREFIX = "runner"


class RunnerException(Exception):
    """
    Base exception for all cmdrunner errors.

    Callers that only care whether something went wrong inside cmdrunner
    can catch this; callers that need to tell a failed command apart from a
    cancelled one catch the concrete subclasses.

    Attributes:
        message: Human-readable error message
        error_code: Machine-readable error code
        details: Additional error details
        original_error: Original exception if wrapping another error
    """

    def __init__(
        self,
        message: str,
        error_code: str = "RUNNER_ERROR",
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.original_error = original_error
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to a dictionary, e.g. for structured logs."""
        return {
            "error": True,
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.error_code}, message='{self.message}')"


# ═══════════════════════════════════════════════════════════════
# Process Outcome Exceptions
# ═══════════════════════════════════════════════════════════════

class ExitError(RunnerException):
    """The child ran and exited with a nonzero status."""

    def __init__(
        self,
        returncode: int,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=f"exit status {returncode}",
            error_code="EXIT_ERROR",
            details={"returncode": returncode, **(details or {})}
        )
        self.returncode = returncode


class SignalError(RunnerException):
    """
    The child was terminated by a signal.

    This is what a cancelled invocation raises, since cancellation kills the
    child with SIGKILL.
    """

    def __init__(
        self,
        signum: int = signal.SIGKILL,
        details: Optional[Dict[str, Any]] = None
    ):
        description = describe_signal(signum)
        super().__init__(
            message=f"signal: {description}",
            error_code="SIGNAL_ERROR",
            details={"signal": int(signum), **(details or {})}
        )
        self.signum = int(signum)


class InvocationCancelledError(RunnerException):
    """The cancellation token had already fired before anything was spawned."""

    def __init__(
        self,
        reason: str = "cancelled",
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=f"invocation cancelled before start: {reason}",
            error_code="INVOCATION_CANCELLED",
            details={"reason": reason, **(details or {})}
        )
        self.reason = reason


# ═══════════════════════════════════════════════════════════════
# Configuration Exceptions
# ═══════════════════════════════════════════════════════════════

class ConfigurationError(RunnerException):
    """A runner is missing required configuration. Nothing was executed."""

    def __init__(
        self,
        component: str,
        message: str,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(
            message=f"{ERROR_PREFIX}: {component}: {message}",
            error_code="CONFIGURATION_ERROR",
            details={"component": component, **(details or {})}
        )
        self.component = component


class DestinationNotSetError(ConfigurationError):
    """The SSH CLI runner was invoked without a destination."""

    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            component="sshcli",
            message="destination must be set",
            details=details
        )
        self.error_code = "DESTINATION_NOT_SET"


# ═══════════════════════════════════════════════════════════════
# Utility Functions
# ═══════════════════════════════════════════════════════════════

# Same wording on every platform for the signals a runner normally sees.
_SIGNAL_DESCRIPTIONS = {
    signal.SIGHUP: "hangup",
    signal.SIGINT: "interrupt",
    signal.SIGQUIT: "quit",
    signal.SIGABRT: "aborted",
    signal.SIGKILL: "killed",
    signal.SIGSEGV: "segmentation fault",
    signal.SIGPIPE: "broken pipe",
    signal.SIGALRM: "alarm clock",
    signal.SIGTERM: "terminated",
}


def describe_signal(signum: int) -> str:
    """
    Lowercase, human readable name of a signal, e.g. 9 -> "killed".

    Args:
        signum: Signal number

    Returns:
        Signal description
    """
    if signum in _SIGNAL_DESCRIPTIONS:
        return _SIGNAL_DESCRIPTIONS[signum]

    try:
        description = signal.strsignal(signum)
    except ValueError:
        description = None

    if not description:
        return f"signal {int(signum)}"

    return description.lower()
