'''
Tests for configuration management and package logging setup.
'''

import json
import logging

import pytest

import proxysvar
from proxysvar.core.config import (
    ConfigManager, get_config, get_config_manager, get_estimation_config, get_numerical_config,
    reset_config, set_config
)
from proxysvar.core.exceptions import ConfigurationError


class TestGlobalConfig:
    """Tests for the module-level configuration functions."""

    def test_defaults(self):
        assert get_config("numerical", "singular_tolerance") == 1e-10
        assert get_config("numerical", "negative_variance_policy") == "raise"
        assert get_config("estimation", "weak_instrument_threshold") == 10.0
        assert get_config("estimation", "parallel_threshold") == 32

    def test_set_and_reset(self):
        set_config("numerical", "negative_variance_policy", "warn")
        assert get_numerical_config().negative_variance_policy == "warn"

        reset_config("numerical")
        assert get_numerical_config().negative_variance_policy == "raise"

    def test_reset_single_section_keeps_others(self):
        set_config("numerical", "singular_tolerance", 1e-8)
        set_config("estimation", "max_workers", 2)

        reset_config("numerical")

        assert get_numerical_config().singular_tolerance == 1e-10
        assert get_estimation_config().max_workers == 2

    def test_manager_singleton(self):
        set_config("estimation", "max_workers", 3)
        assert get_config_manager().get("estimation", "max_workers") == 3
        assert get_config_manager().to_dict()["estimation"]["max_workers"] == 3

    def test_unknown_option_uses_default(self):
        assert get_config("numerical", "no_such_option", "fallback") == "fallback"
        assert get_config("no_such_section", "x") is None

    @pytest.mark.parametrize("section, option, value", [
        ("numerical", "singular_tolerance", 0.0),
        ("numerical", "singular_tolerance", 1.5),
        ("numerical", "negative_variance_policy", "ignore"),
        ("estimation", "weak_instrument_threshold", -1.0),
        ("estimation", "parallel_threshold", 0),
        ("estimation", "max_workers", True),
        ("logging", "log_level", "VERBOSE"),
        ("logging", "console_logging", "yes"),
    ])
    def test_invalid_values(self, section, option, value):
        with pytest.raises(ConfigurationError):
            set_config(section, option, value)

    def test_unknown_section_and_option(self):
        with pytest.raises(ConfigurationError):
            set_config("plotting", "style", "dark")
        with pytest.raises(ConfigurationError):
            set_config("numerical", "pivot", True)
        with pytest.raises(ConfigurationError):
            reset_config("plotting")


class TestConfigManager:
    """Tests for file and environment overrides on a fresh manager."""

    def test_environment_overrides(self, monkeypatch):
        monkeypatch.setenv("PROXYSVAR_NUMERICAL_SINGULAR_TOLERANCE", "1e-8")
        monkeypatch.setenv("PROXYSVAR_NUMERICAL_NEGATIVE_VARIANCE_POLICY", "warn")
        monkeypatch.setenv("PROXYSVAR_ESTIMATION_PARALLEL_THRESHOLD", "8")
        monkeypatch.setenv("PROXYSVAR_LOGGING_CONSOLE_LOGGING", "false")

        manager = ConfigManager()
        manager.initialize()

        assert manager.get("numerical", "singular_tolerance") == 1e-8
        assert manager.get("numerical", "negative_variance_policy") == "warn"
        assert manager.get("estimation", "parallel_threshold") == 8
        assert manager.get("logging", "console_logging") is False

    def test_unrelated_environment_ignored(self, monkeypatch):
        monkeypatch.setenv("PROXYSVAR_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("PROXYSVAR_PLOTTING_STYLE", "dark")

        manager = ConfigManager()
        manager.initialize()

        assert manager.to_dict() == ConfigManager().to_dict()

    def test_environment_value_not_coercible(self, monkeypatch):
        monkeypatch.setenv("PROXYSVAR_ESTIMATION_MAX_WORKERS", "many")
        with pytest.raises(ConfigurationError):
            ConfigManager().initialize()

    def test_environment_value_invalid(self, monkeypatch):
        monkeypatch.setenv("PROXYSVAR_NUMERICAL_NEGATIVE_VARIANCE_POLICY", "ignore")
        with pytest.raises(ConfigurationError):
            ConfigManager().initialize()

    def test_config_file(self, monkeypatch, tmp_path):
        path = tmp_path / "proxysvar.json"
        path.write_text(json.dumps({
            "numerical": {"negative_variance_policy": "warn"},
            "estimation": {"weak_instrument_threshold": 5.0, "unknown": 1},
            "plotting": {"style": "dark"},
        }))
        monkeypatch.setenv("PROXYSVAR_CONFIG_FILE", str(path))

        manager = ConfigManager()
        manager.initialize()

        assert manager.get("numerical", "negative_variance_policy") == "warn"
        assert manager.get("estimation", "weak_instrument_threshold") == 5.0

    def test_environment_overrides_file(self, monkeypatch, tmp_path):
        path = tmp_path / "proxysvar.json"
        path.write_text(json.dumps({"estimation": {"max_workers": 2}}))
        monkeypatch.setenv("PROXYSVAR_CONFIG_FILE", str(path))
        monkeypatch.setenv("PROXYSVAR_ESTIMATION_MAX_WORKERS", "6")

        manager = ConfigManager()
        manager.initialize()

        assert manager.get("estimation", "max_workers") == 6

    def test_malformed_config_file(self, monkeypatch, tmp_path):
        path = tmp_path / "proxysvar.json"
        path.write_text("{not json")
        monkeypatch.setenv("PROXYSVAR_CONFIG_FILE", str(path))

        with pytest.raises(ConfigurationError):
            ConfigManager().initialize()

    def test_missing_config_file(self, monkeypatch, tmp_path):
        monkeypatch.setenv("PROXYSVAR_CONFIG_FILE", str(tmp_path / "absent.json"))

        manager = ConfigManager()
        manager.initialize()

        assert manager.to_dict() == ConfigManager().to_dict()

    def test_get_section(self):
        manager = ConfigManager()
        assert manager.get_section("numerical").singular_tolerance == 1e-10
        with pytest.raises(ConfigurationError):
            manager.get_section("plotting")


class TestLogging:
    """Tests for the package logger."""

    def test_set_log_level_by_name(self):
        package_logger = logging.getLogger("proxysvar")
        previous = package_logger.level
        try:
            proxysvar.set_log_level("debug")
            assert package_logger.level == logging.DEBUG
            proxysvar.set_log_level(logging.WARNING)
            assert package_logger.level == logging.WARNING
        finally:
            package_logger.setLevel(previous)

    def test_set_log_level_unknown(self):
        with pytest.raises(ValueError):
            proxysvar.set_log_level("chatty")

    def test_identification_logs_result_at_debug(self, proxy_system, caplog):
        with caplog.at_level(logging.DEBUG, logger="proxysvar"):
            proxysvar.identify_shock(proxy_system["residuals"], proxy_system["instrument"],
                                     "rate", 1)
        records = [r for r in caplog.records if "Identified shock to 'rate'" in r.getMessage()]
        assert len(records) == 1
        assert records[0].levelno == logging.DEBUG

    def test_identification_quiet_at_info(self, proxy_system, caplog):
        with caplog.at_level(logging.INFO, logger="proxysvar"):
            proxysvar.identify_shock(proxy_system["residuals"], proxy_system["instrument"],
                                     "rate", 1)
        assert caplog.records == []

    def test_version(self):
        assert proxysvar.get_version() == proxysvar.__version__

    def test_version_info(self):
        from proxysvar.version import get_version_info
        assert ".".join(str(part) for part in get_version_info()) == proxysvar.__version__
