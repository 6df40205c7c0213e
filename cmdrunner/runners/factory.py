# ═══════════════════════════════════════════════════════════════
# cmdrunner - Runner Factory
# Compose runner chains from configuration
# ═══════════════════════════════════════════════════════════════

from typing import Optional

from ..core.logging import get_logger
from .base import Runner
from .local import LocalRunner
from .logged import LoggingRunner, LogSink
from .models import RunnerConfig
from .ssh_cli import SSHCLIRunner
from .sudo import SudoRunner

logger = get_logger("cmdrunner.runners.factory")


def create_runner(
    config: Optional[RunnerConfig] = None,
    log_sink: Optional[LogSink] = None,
    base: Optional[Runner] = None,
) -> Runner:
    """
    Build a runner chain.

    Layers, innermost first:
    - ``base`` (a new LocalRunner by default)
    - SSHCLIRunner, if ``config.ssh`` is set
    - SudoRunner, if ``config.sudo`` is set; sitting outside ssh, sudo runs
      on the remote host
    - LoggingRunner, if ``log_sink`` is given

    ``config.env`` is applied through the outermost layer so every layer
    sees it.

    Usage:
        runner = create_runner(RunnerConfig(
            ssh=SSHCLIConfig(destination="narnia.local"),
            sudo=SudoConfig(user="root"),
        ))
        await runner.run("systemctl", "restart", "nginx")
        # ssh narnia.local -- sudo -n -u root -- systemctl restart nginx

    Args:
        config: Chain configuration
        log_sink: Sink for a LoggingRunner on the outside
        base: Innermost runner

    Returns:
        The outermost runner
    """
    config = config or RunnerConfig()
    runner: Runner = base if base is not None else LocalRunner()
    layers = [type(runner).__name__]

    if config.ssh is not None:
        runner = SSHCLIRunner(runner, config.ssh)
        layers.append(type(runner).__name__)

    if config.sudo is not None:
        runner = SudoRunner(runner, config.sudo)
        layers.append(type(runner).__name__)

    if log_sink is not None:
        runner = LoggingRunner(runner, log_sink, log_env=config.log_env)
        layers.append(type(runner).__name__)

    if config.env is not None:
        runner.env(*config.env)

    logger.debug(f"Created runner chain: {' -> '.join(reversed(layers))}")

    return runner
