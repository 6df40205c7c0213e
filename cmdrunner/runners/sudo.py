# ═══════════════════════════════════════════════════════════════
# cmdrunner - Sudo Runner
# Run commands with escalated privileges
# ═══════════════════════════════════════════════════════════════

from typing import Optional, Sequence

from .base import Input, Output, Runner, WrappingRunner
from .cancellation import CancellationToken
from .models import Command, RunnerType, SudoConfig


class SudoRunner(WrappingRunner):
    """
    Sudo Runner - wraps another runner and runs commands via sudo.

    The command is rewritten to:

        sudo -n [-u USER] [ARGS...] -- COMMAND [COMMAND_ARGS...]

    and handed to the inner runner. ``-n`` is always passed, so sudo fails
    instead of prompting for a password; commands must be allowed NOPASSWD
    in sudoers.

    Environment given to env() is not put on the sudo command line. It is
    handed to the inner runner instead.

    Usage:
        runner = SudoRunner(LocalRunner(), SudoConfig(user="postgres"))
        await runner.run("psql", "-c", "SELECT 1")
    """

    runner_type = RunnerType.SUDO

    def __init__(self, runner: Runner, config: Optional[SudoConfig] = None):
        """
        Initialize sudo runner.

        Args:
            runner: Inner runner executing the sudo command
            config: Sudo configuration

        Raises:
            ConfigurationError: If ``runner`` is None
        """
        super().__init__(runner)
        self.config: SudoConfig = config or SudoConfig()

    def build_command(self, command: str, args: Sequence[str] = ()) -> Command:
        """
        Build the sudo command wrapping ``command``.

        Args:
            command: Target program
            args: Target program arguments

        Returns:
            The rewritten command
        """
        sudo_args = ["-n"]
        if self.config.user:
            sudo_args += ["-u", self.config.user]
        sudo_args += self.config.args
        sudo_args += ["--", command]
        sudo_args += args

        return Command(program=self.config.program, args=tuple(sudo_args))

    async def run(
        self,
        command: str,
        *args: str,
        stdin: Input = None,
        stdout: Output = None,
        stderr: Output = None,
        token: Optional[CancellationToken] = None,
    ) -> None:
        """Execute the command via sudo on the inner runner."""
        sudo = self.build_command(command, args)

        await self.runner.run(
            sudo.program, *sudo.args,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
            token=token,
        )

    def env(self, *entries: str) -> None:
        """Set the environment on the inner runner."""
        super().env(*entries)
        self._delegate_env(entries)
