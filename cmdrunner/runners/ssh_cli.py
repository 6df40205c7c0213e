# ═══════════════════════════════════════════════════════════════
# cmdrunner - SSH CLI Runner
# Run commands on a remote host through the system ssh client
# ═══════════════════════════════════════════════════════════════

from typing import List, Optional, Sequence

from ..core.exceptions import DestinationNotSetError
from .base import Input, Output, Runner, WrappingRunner
from .cancellation import CancellationToken
from .models import Command, RunnerType, SSHCLIConfig


class SSHCLIRunner(WrappingRunner):
    """
    SSH CLI Runner - wraps another runner and runs commands over ssh.

    Instead of talking SSH itself, the command is rewritten into an
    invocation of the ssh client, which is executed by the inner runner:

        ssh [-p PORT] [-i IDENTITY] [-l LOGIN] [ARGS...] DESTINATION -- \\
            [env KEY=VALUE...] COMMAND [COMMAND_ARGS...]

    Using the system client reuses the user's ssh config, agent and keys.

    Environment:
    The remote shell does not see the local environment, so entries given
    to env() are forwarded on the remote command line through ``env``. They
    are also handed to the inner runner unless ``config.delegate_env`` is
    False.

    Requirements:
    - No password prompts: key or agent based authentication only
    - The remote host key must already be trusted by the ssh client

    Usage:
        config = SSHCLIConfig(destination="deploy@narnia.local", port=2222)
        runner = SSHCLIRunner(LocalRunner(), config)
        await runner.run("docker", "ps", "-a", stdout=sys.stdout)
    """

    runner_type = RunnerType.SSH_CLI

    def __init__(self, runner: Runner, config: Optional[SSHCLIConfig] = None):
        """
        Initialize SSH CLI runner.

        A missing destination is not rejected here; every invocation
        raises DestinationNotSetError until one is set.

        Args:
            runner: Inner runner executing the ssh client
            config: SSH client configuration

        Raises:
            ConfigurationError: If ``runner`` is None
        """
        super().__init__(runner)
        self.config: SSHCLIConfig = config or SSHCLIConfig()

    # ═══════════════════════════════════════════════════════════
    # Command Construction
    # ═══════════════════════════════════════════════════════════

    def build_command(self, command: str, args: Sequence[str] = ()) -> Command:
        """
        Build the ssh command wrapping ``command``.

        Args:
            command: Remote program
            args: Remote program arguments

        Returns:
            The rewritten command

        Raises:
            DestinationNotSetError: If no destination is configured
        """
        if not self.config.destination:
            raise DestinationNotSetError()

        ssh_args: List[str] = []

        if self.config.port != 0:
            ssh_args += ["-p", str(self.config.port)]
        if self.config.identity_file:
            ssh_args += ["-i", self.config.identity_file]
        if self.config.login:
            ssh_args += ["-l", self.config.login]
        ssh_args += self.config.args
        ssh_args += [self.config.destination, "--"]

        if self._env:
            ssh_args.append(self.config.env_program)
            ssh_args += self._env
        ssh_args.append(command)
        ssh_args += args

        return Command(program=self.config.program, args=tuple(ssh_args))

    # ═══════════════════════════════════════════════════════════
    # Runner Interface
    # ═══════════════════════════════════════════════════════════

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
        Execute the command on the remote host via the inner runner.

        Raises:
            DestinationNotSetError: Before the inner runner is touched
        """
        ssh = self.build_command(command, args)

        await self.runner.run(
            ssh.program, *ssh.args,
            stdin=stdin,
            stdout=stdout,
            stderr=stderr,
            token=token,
        )

    def env(self, *entries: str) -> None:
        """Set the environment forwarded to the remote command."""
        super().env(*entries)
        if self.config.delegate_env:
            self._delegate_env(entries)

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(destination={self.config.destination!r}, runner={self.runner!r})>"
