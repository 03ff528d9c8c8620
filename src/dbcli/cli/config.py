"""CLI execution context.

Binds the resolved CLIConfig to the settings document a command works
on. The document is opened lazily so commands that never touch it do not
read the settings file.
"""

from pathlib import Path
from typing import Optional

from dbcli.config import CLIConfig, get_config
from dbcli.core.settings import SettingsDocument


class CLIContext:
    """CLI execution context with resolved configuration.

    Holds the effective configuration for a CLI command, including
    any overrides from command-line options.
    """

    def __init__(
        self,
        config_dir: Optional[str] = None,
        config: Optional[CLIConfig] = None,
        settings: Optional[SettingsDocument] = None,
    ):
        """Initialize CLI context.

        Args:
            config_dir: Explicit config directory override from --config-dir.
            config: Optional CLI config (uses global if not provided).
            settings: Pre-built settings document, mainly for tests.
        """
        self._config_dir_override = config_dir
        self._config = config or get_config()
        self._settings = settings

    @property
    def config(self) -> CLIConfig:
        return self._config

    @property
    def config_dir(self) -> Path:
        """Resolved config directory.

        Resolution order:
        1. CLI --config-dir option (highest priority)
        2. CLIConfig.config_dir (from env/TOML/default)
        """
        if self._config_dir_override:
            return Path(self._config_dir_override).expanduser().resolve()
        return self._config.config_dir

    @property
    def settings(self) -> SettingsDocument:
        """The settings document, loaded on first access.

        Raises:
            SettingsError: If the settings file exists but cannot be parsed.
        """
        if self._settings is None:
            self._settings = SettingsDocument.from_config_dir(self.config_dir)
        return self._settings

    @property
    def cache_enabled(self) -> bool:
        return not self._config.cache_disabled

    def flush(self) -> None:
        """Persist the settings document if a command changed it.

        Raises:
            SettingsError: If the settings file cannot be written.
        """
        if self._settings is not None:
            self._settings.flush()


def create_context(config_dir: Optional[str] = None) -> CLIContext:
    """Create a CLI context with optional overrides.

    Args:
        config_dir: Optional config directory override.

    Returns:
        Configured CLIContext instance.
    """
    return CLIContext(config_dir=config_dir)
