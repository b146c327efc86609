"""
Configuration system using Pydantic for type-safe settings management.

Settings come from (highest priority first) an optional YAML file,
``INFRAAGENT_*`` environment variables, and built-in defaults.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from infraagent.exceptions import ConfigurationError

DEFAULT_HOME = Path.home() / ".infraagent"


class KdfSettings(BaseModel):
    """scrypt cost parameters for vault key derivation."""

    n: int = Field(default=2**14, ge=2**10, description="CPU/memory cost (power of two)")
    r: int = Field(default=8, ge=1, description="Block size")
    p: int = Field(default=1, ge=1, description="Parallelization")

    @field_validator("n")
    @classmethod
    def validate_power_of_two(cls, v: int) -> int:
        """scrypt requires n to be a power of two."""
        if v & (v - 1):
            raise ValueError(f"n must be a power of two, got {v}")
        return v


class InfraAgentSettings(BaseSettings):
    """Main infraagent settings."""

    model_config = SettingsConfigDict(
        env_prefix="INFRAAGENT_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    home: Path = Field(default=DEFAULT_HOME, description="Directory holding the vault and config")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    json_logs: bool = Field(default=False, description="Emit JSON log lines")
    kdf: KdfSettings = Field(default_factory=KdfSettings)
    github_api_url: str = Field(default="https://api.github.com", description="GitHub REST API base URL")
    http_timeout: float = Field(default=30.0, gt=0, description="Timeout in seconds for platform API calls")

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper() if isinstance(v, str) else v

    @field_validator("home", mode="before")
    @classmethod
    def expand_home(cls, v: str | Path) -> Path:
        return Path(v).expanduser()

    @property
    def config_file(self) -> Path:
        """Default location of the YAML config file."""
        return self.home / "config.yaml"

    @classmethod
    def from_yaml(cls, config_path: str | Path) -> InfraAgentSettings:
        """Load settings from YAML file with environment variable interpolation.

        Supports ${VAR_NAME} and ${VAR_NAME:-default} placeholders.

        Args:
            config_path: Path to YAML configuration file

        Returns:
            InfraAgentSettings instance

        Raises:
            ConfigurationError: If config file is invalid or missing
        """
        config_file = Path(config_path)
        if not config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            yaml_content = config_file.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigurationError(f"Cannot read configuration file: {config_path}") from e

        try:
            yaml_content = cls._interpolate_env_vars(yaml_content)
        except ValueError as e:
            raise ConfigurationError(f"Invalid environment variable reference in config: {e}") from e

        try:
            config_dict = yaml.safe_load(yaml_content)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML syntax in {config_path}: {e}") from e

        if config_dict is None:
            config_dict = {}
        if not isinstance(config_dict, dict):
            raise ConfigurationError("Configuration must be a YAML object, not a list or scalar")

        try:
            return cls(**config_dict)
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> InfraAgentSettings:
        """Load settings from ``config_path`` if given, else from the default config file if present."""
        if config_path is not None:
            return cls.from_yaml(config_path)

        try:
            settings = cls()
        except Exception as e:
            raise ConfigurationError(f"Failed to validate configuration: {e}") from e

        if settings.config_file.exists():
            return cls.from_yaml(settings.config_file)
        return settings

    @staticmethod
    def _interpolate_env_vars(content: str) -> str:
        """Interpolate ${VAR_NAME} placeholders with environment variables.

        YAML comment lines are left untouched.

        Raises:
            ValueError: If a required environment variable is not set
        """
        pattern = re.compile(r"\$\{([A-Z_][A-Z0-9_]*)(?::-([^}]*))?\}")

        def replace_var(match: re.Match[str]) -> str:
            var_name = match.group(1)
            default_value = match.group(2)
            value = os.getenv(var_name)

            if value is not None:
                return value
            if default_value is not None:
                return default_value
            raise ValueError(f"Environment variable {var_name} is not set")

        lines = []
        for line in content.splitlines(keepends=True):
            if line.lstrip().startswith("#"):
                lines.append(line)
            else:
                lines.append(pattern.sub(replace_var, line))
        return "".join(lines)
