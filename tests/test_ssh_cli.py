# ═══════════════════════════════════════════════════════════════
# cmdrunner - SSH CLI Runner Tests
# ═══════════════════════════════════════════════════════════════

import io

import pytest
from pydantic import ValidationError

from cmdrunner.core.exceptions import (
    ConfigurationError,
    DestinationNotSetError,
    ExitError,
)
from cmdrunner.runners import (
    CancellationToken,
    RunnerType,
    SSHCLIConfig,
    SSHCLIRunner,
)

FULL_ARGS = ["-C", "-o", "AddKeysToAgent=yes"]


class TestSSHCLIRunnerInit:
    """Tests for SSHCLIRunner construction."""

    def test_init_defaults(self, inner_runner):
        runner = SSHCLIRunner(inner_runner)

        assert runner.runner_type == RunnerType.SSH_CLI
        assert runner.config.destination == ""
        assert runner.config.port == 0
        assert runner.config.program == "ssh"
        assert runner.config.env_program == "env"
        assert runner.config.delegate_env is True

    def test_init_without_inner_runner(self):
        with pytest.raises(ConfigurationError) as exc_info:
            SSHCLIRunner(None, SSHCLIConfig(destination="narnia.local"))

        assert str(exc_info.value) == "runner: sshcli: runner must be set"

    def test_init_without_destination_is_allowed(self, inner_runner):
        SSHCLIRunner(inner_runner, SSHCLIConfig())

    @pytest.mark.parametrize("port", [-1, 65536])
    def test_port_out_of_range(self, port):
        with pytest.raises(ValidationError):
            SSHCLIConfig(destination="narnia.local", port=port)

    def test_repr(self, inner_runner):
        runner = SSHCLIRunner(inner_runner, SSHCLIConfig(destination="narnia.local"))

        assert "narnia.local" in repr(runner)


# ═══════════════════════════════════════════════════════════════
# Command Construction
# ═══════════════════════════════════════════════════════════════

class TestSSHCLIRunnerBuildCommand:
    """Tests for the rewritten ssh invocation."""

    @pytest.mark.parametrize("config,env,command,args,expected", [
        (
            dict(destination="narnia.local"),
            None, "docker", ["ps", "-a"],
            ["narnia.local", "--", "docker", "ps", "-a"],
        ),
        (
            dict(destination="darrin@narnia.local"),
            None, "docker", ["ps", "-a"],
            ["darrin@narnia.local", "--", "docker", "ps", "-a"],
        ),
        (
            dict(destination="ssh://darrin@narnia.local:322"),
            None, "docker", ["ps", "-a"],
            ["ssh://darrin@narnia.local:322", "--", "docker", "ps", "-a"],
        ),
        (
            dict(destination="narnia.local", port=322),
            None, "docker", ["ps", "-a"],
            ["-p", "322", "narnia.local", "--", "docker", "ps", "-a"],
        ),
        (
            dict(destination="narnia.local", identity_file="/home/darrin/.ssh/id_other"),
            None, "docker", ["ps", "-a"],
            ["-i", "/home/darrin/.ssh/id_other", "narnia.local", "--", "docker", "ps", "-a"],
        ),
        (
            dict(destination="narnia.local", login="barfoo"),
            None, "docker", ["ps", "-a"],
            ["-l", "barfoo", "narnia.local", "--", "docker", "ps", "-a"],
        ),
        (
            dict(destination="narnia.local"),
            ["FOO=BAR", "PORT=8080"], "myapp", ["run", "-a"],
            ["narnia.local", "--", "env", "FOO=BAR", "PORT=8080", "myapp", "run", "-a"],
        ),
        (
            dict(destination="narnia.local", args=FULL_ARGS),
            None, "docker", ["ps", "-a"],
            ["-C", "-o", "AddKeysToAgent=yes", "narnia.local", "--", "docker", "ps", "-a"],
        ),
        (
            dict(
                destination="narnia.local",
                port=322,
                identity_file="/home/darrin/.ssh/id_other",
                login="barfoo",
                args=FULL_ARGS,
            ),
            ["FOO=BAR", "PORT=8080"], "docker", ["ps", "-a"],
            [
                "-p", "322",
                "-i", "/home/darrin/.ssh/id_other",
                "-l", "barfoo",
                "-C", "-o", "AddKeysToAgent=yes",
                "narnia.local",
                "--",
                "env", "FOO=BAR", "PORT=8080",
                "docker", "ps", "-a",
            ],
        ),
    ], ids=[
        "hostname",
        "user@hostname",
        "ssh-uri",
        "port",
        "identity-file",
        "login",
        "env",
        "args",
        "everything",
    ])
    def test_build_command(self, inner_runner, config, env, command, args, expected):
        runner = SSHCLIRunner(inner_runner, SSHCLIConfig(**config))
        if env is not None:
            runner.env(*env)

        result = runner.build_command(command, args)

        assert result.program == "ssh"
        assert list(result.args) == expected

    def test_empty_env_adds_no_env_prefix(self, inner_runner):
        runner = SSHCLIRunner(inner_runner, SSHCLIConfig(destination="narnia.local"))
        runner.env()

        assert runner.build_command("uptime").args == ("narnia.local", "--", "uptime")

    def test_no_destination(self, inner_runner):
        runner = SSHCLIRunner(inner_runner)

        with pytest.raises(DestinationNotSetError) as exc_info:
            runner.build_command("zfs", ["list"])

        assert str(exc_info.value) == "runner: sshcli: destination must be set"

    def test_custom_programs(self, inner_runner):
        config = SSHCLIConfig(
            destination="narnia.local",
            program="/opt/bin/ssh",
            env_program="/usr/bin/env",
        )
        runner = SSHCLIRunner(inner_runner, config)
        runner.env("A=1")

        result = runner.build_command("id")

        assert result.argv == ["/opt/bin/ssh", "narnia.local", "--", "/usr/bin/env", "A=1", "id"]


# ═══════════════════════════════════════════════════════════════
# Execution
# ═══════════════════════════════════════════════════════════════

class TestSSHCLIRunnerRun:
    """Tests for SSHCLIRunner.run() delegation."""

    @pytest.mark.asyncio
    async def test_run_delegates_rewritten_command(self, inner_runner):
        runner = SSHCLIRunner(inner_runner, SSHCLIConfig(destination="narnia.local"))
        stdin = io.BytesIO(b"foo\nbar")
        stdout = io.BytesIO()

        await runner.run("docker", "kill", "-s", "HUP", stdin=stdin, stdout=stdout)

        inner_runner.run.assert_awaited_once_with(
            "ssh", "narnia.local", "--", "docker", "kill", "-s", "HUP",
            stdin=stdin,
            stdout=stdout,
            stderr=None,
            token=None,
        )

    @pytest.mark.asyncio
    async def test_run_context_passes_token(self, inner_runner):
        runner = SSHCLIRunner(inner_runner, SSHCLIConfig(destination="narnia.local"))
        token = CancellationToken.with_timeout(5)
        stderr = io.BytesIO()

        await runner.run_context(token, "docker", "stop", "foo", stderr=stderr)

        inner_runner.run.assert_awaited_once_with(
            "ssh", "narnia.local", "--", "docker", "stop", "foo",
            stdin=None,
            stdout=None,
            stderr=stderr,
            token=token,
        )

    @pytest.mark.asyncio
    async def test_no_destination_never_reaches_inner_runner(self, inner_runner):
        runner = SSHCLIRunner(inner_runner)

        with pytest.raises(DestinationNotSetError):
            await runner.run("zfs", "list")

        assert inner_runner.run.await_count == 0

    @pytest.mark.asyncio
    async def test_no_destination_is_a_configuration_error(self, inner_runner):
        runner = SSHCLIRunner(inner_runner)

        with pytest.raises(ConfigurationError):
            await runner.run_context(CancellationToken(), "zfs", "list")

    @pytest.mark.asyncio
    async def test_inner_error_passes_through(self, inner_runner):
        error = ExitError(255)
        inner_runner.run.side_effect = error
        runner = SSHCLIRunner(inner_runner, SSHCLIConfig(destination="narnia.local"))

        with pytest.raises(ExitError) as exc_info:
            await runner.run("zfs", "list")

        assert exc_info.value is error
        inner_runner.run.assert_awaited_once()
        assert inner_runner.run.await_args.args == ("ssh", "narnia.local", "--", "zfs", "list")


class TestSSHCLIRunnerEnv:
    """Tests for SSHCLIRunner.env()."""

    def test_env_is_delegated_by_default(self, inner_runner):
        runner = SSHCLIRunner(inner_runner, SSHCLIConfig(destination="narnia.local"))

        runner.env("FOO=BAR", "PORT=8080")

        inner_runner.env.assert_called_once_with("FOO=BAR", "PORT=8080")
        assert runner.environment == ("FOO=BAR", "PORT=8080")

    def test_env_delegation_disabled(self, inner_runner):
        config = SSHCLIConfig(destination="narnia.local", delegate_env=False)
        runner = SSHCLIRunner(inner_runner, config)

        runner.env("FOO=BAR")

        inner_runner.env.assert_not_called()
        assert runner.build_command("myapp").args == ("narnia.local", "--", "env", "FOO=BAR", "myapp")

    def test_env_replaces_previous_entries(self, inner_runner):
        runner = SSHCLIRunner(inner_runner, SSHCLIConfig(destination="narnia.local"))
        runner.env("FOO=BAR")
        runner.env("BAZ=QUX")

        assert runner.build_command("myapp").args == ("narnia.local", "--", "env", "BAZ=QUX", "myapp")
