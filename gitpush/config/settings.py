"""Configuration settings models using Pydantic."""

from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class CommandsConfig(BaseModel):
    """Defaults applied to every command request's context."""

    auto_stage: bool = True
    auto_push: bool = False
    conventional_commits: bool = True
    log_limit: int = Field(default=10, ge=1, le=1000)
    no_verify: bool = False


class GitConfig(BaseModel):
    """Configuration for the git toolchain."""

    executable: str = "git"
    remote: str = "origin"
    timeout: Optional[float] = Field(default=None, gt=0)

    @field_validator("executable", "remote")
    @classmethod
    def validate_not_empty(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("value cannot be empty")
        return v.strip()


class LoggingConfig(BaseModel):
    """Configuration for diagnostics logging."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "WARNING"
    file: Optional[str] = None

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @property
    def resolved_file(self) -> Optional[Path]:
        """Get the log file path with ~ expanded."""
        return Path(self.file).expanduser() if self.file else None


class Settings(BaseSettings):
    """Main application settings."""

    model_config = SettingsConfigDict(
        env_prefix="GITPUSH_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    commands: CommandsConfig = Field(default_factory=CommandsConfig)
    git: GitConfig = Field(default_factory=GitConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    def command_defaults(self) -> dict:
        """Get the command context defaults, keyed like request context fields."""
        return {
            "auto_stage": self.commands.auto_stage,
            "auto_push": self.commands.auto_push,
            "conventional_commits": self.commands.conventional_commits,
            "limit": self.commands.log_limit,
            "no_verify": self.commands.no_verify,
            "remote": self.git.remote,
        }

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment variables win over values loaded from YAML files
        return env_settings, init_settings, dotenv_settings, file_secret_settings
