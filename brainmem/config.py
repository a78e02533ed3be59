"""
Configuration for brainmem.

Supports loading from:
1. Environment variables (highest priority)
2. YAML config file
3. Default values (fallback)
"""

import os
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field, model_validator

from brainmem.utils.exceptions import ConfigurationError

# File names inside the storage directory
MEMORY_FILE = "memory.brain"
BACKUP_FILE = "memory.brain.backup"
LOCK_FILE = "memory.brain.lock"

# (section, field) -> environment variable
ENV_VARS: dict[tuple[str, str], str] = {
    ("memory", "storage_path"): "BRAIN_MCP_STORAGE_PATH",
    ("memory", "short_term_capacity"): "BRAIN_MCP_SHORT_TERM_CAPACITY",
    ("memory", "auto_save_interval"): "BRAIN_MCP_AUTO_SAVE_INTERVAL",
    ("memory", "search_limit"): "BRAIN_MCP_SEARCH_LIMIT",
    ("memory", "default_association_depth"): "BRAIN_MCP_ASSOCIATION_DEPTH",
    ("memory", "max_association_depth"): "BRAIN_MCP_MAX_ASSOCIATION_DEPTH",
    ("memory", "enable_backup"): "BRAIN_MCP_ENABLE_BACKUP",
    ("memory", "stale_lock_ms"): "BRAIN_MCP_STALE_LOCK_MS",
    ("logging", "level"): "BRAIN_MCP_LOG_LEVEL",
    ("logging", "log_to_file"): "BRAIN_MCP_LOG_TO_FILE",
    ("logging", "log_dir"): "BRAIN_MCP_LOG_DIR",
    ("server", "host"): "BRAIN_MCP_HOST",
    ("server", "port"): "BRAIN_MCP_PORT",
}


class MemoryConfig(BaseModel):
    """Memory store configuration."""

    storage_path: str = "./memory_data"
    short_term_capacity: int = Field(default=100, ge=1)
    auto_save_interval: int = Field(default=5 * 60 * 1000, ge=1)  # milliseconds
    search_limit: int = Field(default=10, ge=1)
    default_association_depth: int = Field(default=1, ge=0)
    max_association_depth: int = Field(default=3, ge=0)
    enable_backup: bool = True
    stale_lock_ms: int = Field(default=5 * 60 * 1000, ge=0)

    @model_validator(mode="after")
    def check_depths(self) -> "MemoryConfig":
        if self.default_association_depth > self.max_association_depth:
            raise ConfigurationError(
                "Default association depth exceeds the maximum",
                context={
                    "default_association_depth": self.default_association_depth,
                    "max_association_depth": self.max_association_depth,
                },
            )
        return self


class MemorySafetyConfig(BaseModel):
    """Thresholds that trigger warnings when the graph grows large."""

    max_cache_size: int = 100 * 1024 * 1024  # bytes
    warn_cache_size: int = 80 * 1024 * 1024  # bytes
    max_nodes: int = 100_000


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    log_to_file: bool = False
    log_dir: str = "logs"
    file_rotation: str = "10 MB"
    file_retention: str = "7 days"
    compression: str = "zip"
    serialize: bool = True


class ServerConfig(BaseModel):
    """Tool adapter server configuration."""

    host: str = "127.0.0.1"
    port: int = 8000


def _load_env_file(env_file: str | Path | None) -> None:
    if env_file:
        load_dotenv(env_file)
    elif Path(".env").exists():
        load_dotenv()


def _env_overrides() -> dict[str, dict[str, Any]]:
    """
    Collect the configuration values set in the environment.

    Only variables that are present and non-empty are returned, converted to
    the type of the field's default.
    """
    defaults = Config()
    overrides: dict[str, dict[str, Any]] = {}

    for (section, key), var in ENV_VARS.items():
        value = os.getenv(var)
        if value is None or value == "":
            continue

        default = getattr(getattr(defaults, section), key)
        if isinstance(default, bool):
            converted: Any = value.lower() in ("true", "1", "yes")
        elif isinstance(default, int):
            converted = int(value)
        elif isinstance(default, float):
            converted = float(value)
        else:
            converted = value

        overrides.setdefault(section, {})[key] = converted

    return overrides


class Config(BaseModel):
    """Main configuration."""

    memory: MemoryConfig = Field(default_factory=MemoryConfig)
    safety: MemorySafetyConfig = Field(default_factory=MemorySafetyConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)

    @classmethod
    def from_env(cls, env_file: str | Path | None = None) -> "Config":
        """
        Load configuration from environment variables.

        Priority: .env file -> system environment variables -> defaults

        Args:
            env_file: Optional path to .env file (default: .env in project root)

        Returns:
            Config instance

        Raises:
            ConfigurationError: If the association depths are inconsistent

        Environment variables:
            BRAIN_MCP_STORAGE_PATH: Directory holding memory.brain and friends
            BRAIN_MCP_SHORT_TERM_CAPACITY: Scratch buffer capacity
            BRAIN_MCP_AUTO_SAVE_INTERVAL: Auto-save interval in milliseconds
            BRAIN_MCP_SEARCH_LIMIT: Default search result cap
            BRAIN_MCP_ASSOCIATION_DEPTH: Default association traversal depth
            BRAIN_MCP_MAX_ASSOCIATION_DEPTH: Hard ceiling for traversal depth
            BRAIN_MCP_ENABLE_BACKUP: Keep a backup copy before each save
            BRAIN_MCP_STALE_LOCK_MS: Age after which a lock file is abandoned
            BRAIN_MCP_LOG_LEVEL / BRAIN_MCP_LOG_TO_FILE / BRAIN_MCP_LOG_DIR: Logging
            BRAIN_MCP_HOST / BRAIN_MCP_PORT: Adapter bind address
        """
        _load_env_file(env_file)
        return cls(**_env_overrides())

    @classmethod
    def from_yaml(cls, yaml_path: str | Path) -> "Config":
        """
        Load configuration from YAML file.

        Args:
            yaml_path: Path to YAML configuration file

        Returns:
            Config instance

        Raises:
            FileNotFoundError: If YAML file doesn't exist
            yaml.YAMLError: If YAML is invalid
        """
        yaml_path = Path(yaml_path)
        if not yaml_path.exists():
            raise FileNotFoundError(f"Config file not found: {yaml_path}")

        with open(yaml_path) as f:
            data = yaml.safe_load(f)

        return cls(**(data or {}))

    @classmethod
    def from_env_or_yaml(
        cls, yaml_path: str | Path | None = None, env_file: str | Path | None = None
    ) -> "Config":
        """
        Load configuration with priority: env vars > YAML > defaults.

        Every variable present in the environment overrides the YAML value,
        even when it equals the built-in default.

        Args:
            yaml_path: Optional path to YAML config
            env_file: Optional path to .env file

        Returns:
            Config instance
        """
        if yaml_path and Path(yaml_path).exists():
            with open(yaml_path) as f:
                config_dict = yaml.safe_load(f) or {}
        else:
            config_dict = {}

        _load_env_file(env_file)

        final_dict = {**config_dict}
        for section, overrides in _env_overrides().items():
            final_dict[section] = {**final_dict.get(section, {}), **overrides}

        return cls(**final_dict)
