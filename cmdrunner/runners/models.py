# ═══════════════════════════════════════════════════════════════
# cmdrunner - Runner Models
# Data models for commands and runner configuration
# ═══════════════════════════════════════════════════════════════

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from ..core.config import get_settings


# ═══════════════════════════════════════════════════════════════
# Enums
# ═══════════════════════════════════════════════════════════════

class RunnerType(str, Enum):
    """Ways of delivering a command."""
    LOCAL = "local"          # Spawn directly on this host
    SUDO = "sudo"            # Escalate through sudo
    SSH_CLI = "sshcli"       # Remote host through the ssh client
    LOGGING = "logging"      # Record, then delegate unchanged


# ═══════════════════════════════════════════════════════════════
# Command
# ═══════════════════════════════════════════════════════════════

class Command(BaseModel):
    """
    A program and its argument vector.

    Immutable: every wrapping runner builds a fresh one.
    """
    model_config = ConfigDict(frozen=True)

    program: str = Field(..., min_length=1, description="Program to execute")
    args: Tuple[str, ...] = Field(default=(), description="Arguments, in order")

    @property
    def argv(self) -> List[str]:
        """Program followed by its arguments."""
        return [self.program, *self.args]


# ═══════════════════════════════════════════════════════════════
# Runner Configuration Models
# ═══════════════════════════════════════════════════════════════

class SudoConfig(BaseModel):
    """Privilege escalation configuration."""
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )

    user: str = Field(default="", description="Target user passed via -u; empty means sudo's default")
    args: List[str] = Field(default_factory=list, description="Extra sudo arguments, placed before --")
    program: str = Field(
        default_factory=lambda: get_settings().sudo_program,
        description="Escalation program",
    )


class SSHCLIConfig(BaseModel):
    """
    Remote execution configuration for the system ssh client.

    Password prompts are not supported and the remote host key must already
    be trusted by the ssh client.
    """
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )

    destination: str = Field(
        default="",
        description='Either "[user@]hostname" or "ssh://[user@]hostname[:port]"',
    )
    port: int = Field(default=0, ge=0, le=65535, description="Port passed via -p; 0 means no -p flag")
    identity_file: str = Field(default="", description="Identity file passed via -i")
    login: str = Field(default="", description="Login name passed via -l")
    args: List[str] = Field(default_factory=list, description="Extra ssh client options, placed before the destination")

    # Environment handling
    delegate_env: bool = Field(
        default=True,
        description="Also hand env() entries to the inner runner running the ssh client",
    )

    program: str = Field(
        default_factory=lambda: get_settings().ssh_program,
        description="Transport client program",
    )
    env_program: str = Field(
        default_factory=lambda: get_settings().env_program,
        description="Remote program used to apply forwarded environment",
    )


class RunnerConfig(BaseModel):
    """Configuration for a composed runner chain (see create_runner)."""
    model_config = ConfigDict(
        from_attributes=True,
        populate_by_name=True,
    )

    ssh: Optional[SSHCLIConfig] = Field(default=None, description="Run commands on a remote host")
    sudo: Optional[SudoConfig] = Field(default=None, description="Run commands through sudo")
    env: Optional[List[str]] = Field(default=None, description='Environment entries, "KEY=VALUE"')
    log_env: bool = Field(default=False, description="Log env() calls when a log sink is attached")
