# ═══════════════════════════════════════════════════════════════
# cmdrunner - Settings
# Environment driven configuration
# ═══════════════════════════════════════════════════════════════

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Process-wide defaults for cmdrunner.

    Every value can be overridden with a ``CMDRUNNER_`` prefixed environment
    variable or a ``.env`` file, e.g. ``CMDRUNNER_SSH_PROGRAM=/usr/bin/ssh``.
    """
    model_config = SettingsConfigDict(
        env_prefix="CMDRUNNER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Logging
    log_level: str = Field(default="INFO", description="Root log level used by configure_logging()")
    log_format: str = Field(default="console", description="Log output format: console or json")

    # External programs
    sudo_program: str = Field(default="sudo", description="Privilege escalation program")
    ssh_program: str = Field(default="ssh", description="Remote transport client program")
    env_program: str = Field(default="env", description="Remote program used to forward environment")

    # Stream forwarding
    stream_chunk_size: int = Field(
        default=64 * 1024, ge=1, description="Bytes read per chunk when forwarding streams"
    )


@lru_cache()
def get_settings() -> Settings:
    """Get the cached settings instance."""
    return Settings()
