"""Unit tests for CLI configuration loading."""

import logging
from pathlib import Path

import pytest

from dbcli.config import CLIConfig, default_config_dir, get_config, set_config


class TestDefaults:
    def test_defaults(self):
        config = CLIConfig()
        assert config.config_dir == default_config_dir()
        assert config.log_level == "WARNING"
        assert config.structured_logging is True
        assert config.cache_disabled is False


class TestFromEnv:
    def test_env_overrides(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("DBCLI_CONFIG_DIR", str(tmp_path))
        monkeypatch.setenv("DBCLI_LOG_LEVEL", "debug")
        monkeypatch.setenv("DBCLI_STRUCTURED_LOGGING", "false")
        monkeypatch.setenv("DBCLI_CACHE_DISABLED", "1")

        config = CLIConfig.from_env(config_file=str(tmp_path / "absent.toml"))

        assert config.config_dir == tmp_path
        assert config.log_level == "DEBUG"
        assert config.structured_logging is False
        assert config.cache_disabled is True

    def test_invalid_log_level_falls_back(self, monkeypatch, tmp_path: Path):
        monkeypatch.setenv("DBCLI_LOG_LEVEL", "chatty")

        config = CLIConfig.from_env(config_file=str(tmp_path / "absent.toml"))

        assert config.log_level == "WARNING"

    def test_toml_file(self, tmp_path: Path):
        toml_file = tmp_path / "dbcli.toml"
        toml_file.write_text(
            "[settings]\n"
            f'config_dir = "{tmp_path.as_posix()}/cfg"\n'
            "\n"
            "[logging]\n"
            'level = "info"\n'
            "structured = false\n"
            "\n"
            "[cache]\n"
            "disabled = true\n"
        )

        config = CLIConfig.from_env(config_file=str(toml_file))

        assert config.config_dir == tmp_path / "cfg"
        assert config.log_level == "INFO"
        assert config.structured_logging is False
        assert config.cache_disabled is True

    def test_env_beats_toml(self, monkeypatch, tmp_path: Path):
        toml_file = tmp_path / "dbcli.toml"
        toml_file.write_text('[logging]\nlevel = "info"\n')
        monkeypatch.setenv("DBCLI_LOG_LEVEL", "ERROR")

        config = CLIConfig.from_env(config_file=str(toml_file))

        assert config.log_level == "ERROR"

    def test_config_file_env_var(self, monkeypatch, tmp_path: Path):
        toml_file = tmp_path / "custom.toml"
        toml_file.write_text("[cache]\ndisabled = true\n")
        monkeypatch.setenv("DBCLI_CONFIG_FILE", str(toml_file))

        assert CLIConfig.from_env().cache_disabled is True

    def test_invalid_toml_keeps_defaults(self, tmp_path: Path):
        toml_file = tmp_path / "dbcli.toml"
        toml_file.write_text("[logging\nlevel = ")

        config = CLIConfig.from_env(config_file=str(toml_file))

        assert config.log_level == "WARNING"


class TestGlobalConfig:
    def test_get_config_is_cached(self):
        assert get_config() is get_config()

    def test_set_config(self):
        config = CLIConfig(log_level="ERROR")
        set_config(config)
        assert get_config() is config


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def restore_logger(self):
        logger = logging.getLogger("dbcli")
        handlers = list(logger.handlers)
        level = logger.level
        yield
        logger.handlers = handlers
        logger.setLevel(level)

    def test_sets_level(self):
        CLIConfig(log_level="DEBUG").setup_logging()
        assert logging.getLogger("dbcli").level == logging.DEBUG

    def test_does_not_stack_handlers(self):
        logger = logging.getLogger("dbcli")
        logger.handlers = []

        CLIConfig().setup_logging()
        CLIConfig(structured_logging=False).setup_logging()

        assert len(logger.handlers) == 1
