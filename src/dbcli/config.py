"""
Client configuration for dbcli.

Supports configuration via:
1. Environment variables (highest priority)
2. TOML config file (dbcli.toml)
3. Default values (lowest priority)

Environment variables:
- DBCLI_CONFIG_DIR: Directory holding settings.json (default: ~/.config/dbcli)
- DBCLI_LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
- DBCLI_STRUCTURED_LOGGING: Emit JSON-style log lines (true/false)
- DBCLI_CACHE_DISABLED: Disable cache maintenance commands (true/false)
- DBCLI_CONFIG_FILE: Path to TOML config file

The settings document (auth tokens, cached API data) is separate from this
configuration: this module only decides where that document lives and how
the CLI logs.
"""

import logging
import os
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError, version as get_package_version
from pathlib import Path
from typing import Any, Optional

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback


logger = logging.getLogger(__name__)

_VALID_LOG_LEVELS = {"DEBUG", "INFO", "WARNING", "ERROR"}


def _get_version() -> str:
    """Get package version from metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("dbcli")
    except PackageNotFoundError:
        return "0.1.0"


_PACKAGE_VERSION = _get_version()


def default_config_dir() -> Path:
    return Path.home() / ".config" / "dbcli"


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"true", "1", "yes", "on"}


def _normalize_log_level(value: str) -> str:
    normalized = value.strip().upper()
    if normalized not in _VALID_LOG_LEVELS:
        logger.warning(
            "Invalid log level '%s'. Falling back to 'WARNING'. Valid options: %s",
            value,
            ", ".join(sorted(_VALID_LOG_LEVELS)),
        )
        return "WARNING"
    return normalized


@dataclass
class CLIConfig:
    """CLI configuration with support for env vars and TOML overrides."""

    # Settings document location
    config_dir: Path = field(default_factory=default_config_dir)

    # Logging configuration
    log_level: str = "WARNING"
    structured_logging: bool = True

    # Cache configuration
    cache_disabled: bool = False

    version: str = field(default_factory=lambda: _PACKAGE_VERSION)

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "CLIConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. TOML config file
        3. Default values
        """
        config = cls()

        toml_path = config_file or os.environ.get("DBCLI_CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            for default_path in ["dbcli.toml", ".dbcli.toml"]:
                if Path(default_path).exists():
                    config._load_toml(Path(default_path))
                    break

        config._load_env()

        return config

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Error loading config file {path}: {e}")
            return

        if "settings" in data:
            settings = data["settings"]
            if "config_dir" in settings:
                self.config_dir = Path(settings["config_dir"]).expanduser()

        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                self.log_level = _normalize_log_level(str(log["level"]))
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

        if "cache" in data:
            cache = data["cache"]
            if "disabled" in cache:
                self.cache_disabled = _parse_bool(cache["disabled"])

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        if config_dir := os.environ.get("DBCLI_CONFIG_DIR"):
            self.config_dir = Path(config_dir).expanduser()

        if level := os.environ.get("DBCLI_LOG_LEVEL"):
            self.log_level = _normalize_log_level(level)

        if structured := os.environ.get("DBCLI_STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)

        if disabled := os.environ.get("DBCLI_CACHE_DISABLED"):
            self.cache_disabled = _parse_bool(disabled)

    def setup_logging(self) -> None:
        """Configure logging based on settings."""
        level = getattr(logging, self.log_level, logging.WARNING)

        if self.structured_logging:
            formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s","level":"%(levelname)s",'
                '"logger":"%(name)s","message":"%(message)s"}'
            )
        else:
            formatter = logging.Formatter(
                "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
            )

        root_logger = logging.getLogger("dbcli")
        root_logger.setLevel(level)

        # Repeated CLI invocations in one process reuse the handler
        for handler in root_logger.handlers:
            if getattr(handler, "_dbcli_handler", False):
                handler.setFormatter(formatter)
                return

        handler = logging.StreamHandler()
        handler.setFormatter(formatter)
        handler._dbcli_handler = True  # type: ignore[attr-defined]
        root_logger.addHandler(handler)


# Global configuration instance
_config: Optional[CLIConfig] = None


def get_config() -> CLIConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = CLIConfig.from_env()
    return _config


def set_config(config: Optional[CLIConfig]) -> None:
    """Set (or reset with None) the global configuration instance."""
    global _config
    _config = config
