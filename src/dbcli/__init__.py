"""dbcli - database platform client with a settings-backed API data cache."""

from dbcli.config import CLIConfig, get_config, set_config

__all__ = ["CLIConfig", "get_config", "set_config"]
