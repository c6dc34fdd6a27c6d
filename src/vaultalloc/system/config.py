"""
System configuration.

One configuration for the whole system, loaded from YAML and merged over
built-in defaults.

Search Order (SystemConfig.load):
1. Explicit path argument
2. VAULTALLOC_CONFIG environment variable
3. ./config/system.yaml
4. Built-in defaults

Values may reference environment variables as ${VAR}; undefined variables
keep their placeholder.

Example system.yaml:
    allocation:
      max_workers: 4

    logging:
      level: DEBUG
      format: json
"""

import os
import re
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

import yaml

from vaultalloc.system.log_system import LoggingConfig as LoggerConfig

CONFIG_ENV_VAR = "VAULTALLOC_CONFIG"
DEFAULT_CONFIG_PATH = Path("config/system.yaml")

_ENV_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass
class AllocationConfig:
    """Allocation behaviour.

    Attributes:
        max_workers: Concurrent market reads while loading contexts (1 = sequential)
    """

    max_workers: int = 1

    def __post_init__(self) -> None:
        """Validate allocation config."""
        self.max_workers = int(self.max_workers)

        if self.max_workers < 1:
            raise ValueError(f"max_workers must be >= 1, got {self.max_workers}")


@dataclass
class LoggingConfig:
    """Logging section as written in system.yaml.

    Converted to the pydantic log_system.LoggingConfig with to_logger_config().
    """

    level: str = "INFO"
    format: str = "console"
    timestamp_format: str = "compact"
    enable_file: bool = False
    file_path: str = "logs/vaultalloc.log"
    file_level: str = "WARNING"
    file_rotation: bool = True
    max_file_size_mb: int = 10
    backup_count: int = 3

    def to_logger_config(self) -> LoggerConfig:
        return LoggerConfig(
            level=self.level.upper(),  # type: ignore[arg-type]
            format=self.format,  # type: ignore[arg-type]
            timestamp_format=self.timestamp_format,  # type: ignore[arg-type]
            enable_file=self.enable_file,
            file_path=Path(self.file_path),
            file_level=self.file_level.upper(),  # type: ignore[arg-type]
            file_rotation=self.file_rotation,
            max_file_size_mb=self.max_file_size_mb,
            backup_count=self.backup_count,
        )


@dataclass
class SystemConfig:
    """Complete system configuration."""

    allocation: AllocationConfig = field(default_factory=AllocationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, path: str | Path | None = None) -> "SystemConfig":
        """Load configuration from YAML, falling back to defaults.

        Args:
            path: Explicit config path. A missing file yields defaults.

        Raises:
            ValueError: If the file is not valid YAML, not a mapping, or has unknown keys
        """
        config_path = cls._resolve_path(path)
        if config_path is None or not config_path.exists():
            return cls()

        try:
            with open(config_path, "r") as f:
                raw = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"Failed to parse YAML from {config_path}: {e}")

        if raw is None:
            return cls()
        if not isinstance(raw, dict):
            raise ValueError(f"Config file {config_path} must contain a mapping at the root")

        merged = _deep_merge(asdict(cls()), _substitute_env_vars(raw))
        return cls._from_dict(merged)

    @staticmethod
    def _resolve_path(path: str | Path | None) -> Path | None:
        if path is not None:
            return Path(path)
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            return Path(env_path)
        if DEFAULT_CONFIG_PATH.exists():
            return DEFAULT_CONFIG_PATH
        return None

    @classmethod
    def _from_dict(cls, data: dict[str, Any]) -> "SystemConfig":
        """Build config from a (possibly partial) dictionary.

        Raises:
            ValueError: If a section holds a key its dataclass does not define
        """
        try:
            return cls(
                allocation=AllocationConfig(**data.get("allocation", {})),
                logging=LoggingConfig(**data.get("logging", {})),
            )
        except TypeError as e:
            raise ValueError(f"Invalid configuration: {e}") from e

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    result = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _substitute_env_vars(value: Any) -> Any:
    """Replace ${VAR} references in strings, recursively through dicts and lists."""
    if isinstance(value, dict):
        return {k: _substitute_env_vars(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_substitute_env_vars(v) for v in value]
    if isinstance(value, str):
        return _ENV_PATTERN.sub(lambda m: os.environ.get(m.group(1), m.group(0)), value)
    return value


_system_config: SystemConfig | None = None


def get_system_config() -> SystemConfig:
    """Get the system config singleton, loading it on first use."""
    global _system_config
    if _system_config is None:
        _system_config = SystemConfig.load()
    return _system_config


def reload_system_config(path: str | Path | None = None) -> SystemConfig:
    """Force reload of the system config singleton."""
    global _system_config
    _system_config = SystemConfig.load(path)
    return _system_config
