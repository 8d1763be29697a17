'''
Configuration management for proxysvar.

Settings are layered:
1. Defaults built into the package
2. An optional JSON file named by the PROXYSVAR_CONFIG_FILE environment variable
3. Environment variables of the form PROXYSVAR_<SECTION>_<OPTION>
4. Runtime modifications through set_config

Every identification call reads the configuration once at its start, so a
change made with set_config applies to subsequent calls only.
'''

import json
import logging
import os
from dataclasses import asdict, dataclass, field, fields
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Optional

from .exceptions import ConfigurationError
from .types import LogLevel, NegativeVariancePolicy

# Set up module-level logger
logger = logging.getLogger("proxysvar.core.config")

CONFIG_ENV_PREFIX = "PROXYSVAR_"
CONFIG_FILE_ENV = "PROXYSVAR_CONFIG_FILE"


class ConfigSection(Enum):
    """Enumeration of configuration sections."""
    NUMERICAL = "numerical"
    ESTIMATION = "estimation"
    LOGGING = "logging"


@dataclass
class NumericalConfig:
    """
    Numerical tolerances used by the scale recovery.

    Attributes:
        singular_tolerance: Q is treated as singular when its smallest singular
            value is at most this multiple of the largest diagonal entry of gamma_22
        negative_variance_policy: "raise" to fail on a negative s11^2, "warn" to
            warn and report a NaN scale
    """
    singular_tolerance: float = 1e-10
    negative_variance_policy: NegativeVariancePolicy = "raise"


@dataclass
class EstimationConfig:
    """
    Settings for the two-stage least squares step.

    Attributes:
        weak_instrument_threshold: First-stage F-statistic below which a
            WeakInstrumentWarning is issued (0 disables the check)
        parallel_threshold: Minimum number of second-stage regressions before
            they are dispatched to a thread pool
        max_workers: Maximum number of worker threads
    """
    weak_instrument_threshold: float = 10.0
    parallel_threshold: int = 32
    max_workers: int = 4


@dataclass
class LoggingConfig:
    """
    Logging settings for the package logger.

    Attributes:
        log_level: Level of the "proxysvar" logger
        log_format: Format string for log records
        console_logging: Whether to attach a console handler
    """
    log_level: LogLevel = "INFO"
    log_format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    console_logging: bool = True


@dataclass
class ProxySVARConfig:
    """Complete configuration, one attribute per section."""
    numerical: NumericalConfig = field(default_factory=NumericalConfig)
    estimation: EstimationConfig = field(default_factory=EstimationConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


_VALID_POLICIES = ("raise", "warn")
_VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


class ConfigManager:
    """
    Configuration manager for proxysvar.

    Attributes:
        _config: The current configuration object
        _initialized: Whether file and environment overrides have been applied
        _config_file: Path to the user configuration file, if any
    """

    def __init__(self):
        """Initialize the configuration manager with default settings."""
        self._config = ProxySVARConfig()
        self._initialized = False
        self._config_file: Optional[Path] = None

    def initialize(self) -> None:
        """
        Load the user file, apply environment overrides and validate.

        Calling this more than once has no effect.
        """
        if self._initialized:
            return

        self._load_user_config()
        self._apply_env_overrides()
        self._validate_config()

        self._initialized = True
        logger.debug("Configuration manager initialized")

    def _load_user_config(self) -> None:
        env_file = os.environ.get(CONFIG_FILE_ENV)
        if not env_file:
            return

        self._config_file = Path(env_file)
        if not self._config_file.exists():
            logger.warning(f"Configuration file {self._config_file} does not exist")
            return

        try:
            with open(self._config_file, 'r') as f:
                user_config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(
                f"Failed to read configuration file {self._config_file}",
                details=str(e)
            ) from e

        self._update_from_dict(user_config)
        logger.debug(f"Loaded user configuration from {self._config_file}")

    def _apply_env_overrides(self) -> None:
        for env_var, value in os.environ.items():
            if not env_var.startswith(CONFIG_ENV_PREFIX) or env_var == CONFIG_FILE_ENV:
                continue

            # Remove prefix and split into section and option
            key = env_var[len(CONFIG_ENV_PREFIX):]
            parts = key.lower().split('_', 1)
            if len(parts) != 2:
                continue

            section, option = parts
            try:
                ConfigSection(section)
            except ValueError:
                continue

            section_obj = getattr(self._config, section)
            if not hasattr(section_obj, option):
                continue

            try:
                typed_value = self._coerce(getattr(section_obj, option), value)
            except ValueError as e:
                raise ConfigurationError(
                    f"Invalid value in environment variable {env_var}",
                    section=section, option=option, value=value, details=str(e)
                ) from e

            setattr(section_obj, option, typed_value)
            logger.debug(f"Applied environment override: {env_var}={value}")

    @staticmethod
    def _coerce(current_value: Any, value: str) -> Any:
        value_type = type(current_value)
        if value_type is bool:
            return value.lower() in ('true', 'yes', '1', 'y')
        if value_type is int:
            return int(value)
        if value_type is float:
            return float(value)
        return value

    def _update_from_dict(self, config_dict: Dict[str, Any]) -> None:
        for section, options in config_dict.items():
            if not self.has_section(section):
                logger.warning(f"Ignoring unknown configuration section: {section}")
                continue
            if not isinstance(options, dict):
                raise ConfigurationError(
                    "Configuration section must be a mapping",
                    section=section, value=options
                )
            section_obj = getattr(self._config, section)
            for option, value in options.items():
                if not hasattr(section_obj, option):
                    logger.warning(f"Ignoring unknown configuration option: {section}.{option}")
                    continue
                setattr(section_obj, option, value)

    def _validate_config(self) -> None:
        for section in ConfigSection:
            section_obj = getattr(self._config, section.value)
            for f in fields(section_obj):
                self._validate_option(section.value, f.name, getattr(section_obj, f.name))

    @staticmethod
    def _validate_option(section: str, option: str, value: Any) -> None:
        def fail(constraint: str) -> None:
            raise ConfigurationError(
                f"Invalid value for {section}.{option}: {constraint}",
                section=section, option=option, value=value
            )

        if option == "singular_tolerance":
            if not isinstance(value, (int, float)) or isinstance(value, bool) or not 0 < value < 1:
                fail("must be a number in (0, 1)")
        elif option == "negative_variance_policy":
            if value not in _VALID_POLICIES:
                fail(f"must be one of {_VALID_POLICIES}")
        elif option == "weak_instrument_threshold":
            if not isinstance(value, (int, float)) or isinstance(value, bool) or value < 0:
                fail("must be a non-negative number")
        elif option in ("parallel_threshold", "max_workers"):
            if not isinstance(value, int) or isinstance(value, bool) or value < 1:
                fail("must be a positive integer")
        elif option == "log_level":
            if not isinstance(value, str) or value.upper() not in _VALID_LOG_LEVELS:
                fail(f"must be one of {_VALID_LOG_LEVELS}")
        elif option == "console_logging":
            if not isinstance(value, bool):
                fail("must be a boolean")

    def to_dict(self) -> Dict[str, Any]:
        """Return the configuration as a nested dictionary."""
        return asdict(self._config)

    def get(self, section: str, option: str, default: Any = None) -> Any:
        """
        Get a configuration value.

        Args:
            section: The configuration section
            option: The configuration option
            default: Default value if the option is not found

        Returns:
            The configuration value, or the default if not found
        """
        if not self.has_section(section):
            return default
        return getattr(getattr(self._config, section), option, default)

    def set(self, section: str, option: str, value: Any) -> None:
        """
        Set a configuration value.

        Raises:
            ConfigurationError: If the section or option is unknown or the value is invalid
        """
        if not self.has_section(section):
            raise ConfigurationError(f"Unknown configuration section: {section}", section=section)
        section_obj = getattr(self._config, section)
        if not hasattr(section_obj, option):
            raise ConfigurationError(
                f"Unknown configuration option: {section}.{option}",
                section=section, option=option
            )
        self._validate_option(section, option, value)
        setattr(section_obj, option, value)
        logger.debug(f"Set configuration {section}.{option}={value!r}")

    def reset(self, section: Optional[str] = None) -> None:
        """
        Reset the configuration to its defaults.

        Args:
            section: Section to reset (None resets everything)
        """
        if section is None:
            self._config = ProxySVARConfig()
        elif self.has_section(section):
            setattr(self._config, section, type(getattr(self._config, section))())
        else:
            raise ConfigurationError(f"Unknown configuration section: {section}", section=section)

    def has_section(self, section: str) -> bool:
        """Check whether a configuration section exists."""
        return section in {s.value for s in ConfigSection}

    def get_section(self, section: str) -> Any:
        """Return the dataclass for one section."""
        if not self.has_section(section):
            raise ConfigurationError(f"Unknown configuration section: {section}", section=section)
        return getattr(self._config, section)


# Create a singleton instance of the configuration manager
_config_manager = ConfigManager()


def initialize_config() -> None:
    """Initialize the configuration system."""
    _config_manager.initialize()


def get_config(section: str, option: str, default: Any = None) -> Any:
    """Get a configuration value."""
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager.get(section, option, default)


def set_config(section: str, option: str, value: Any) -> None:
    """Set a configuration value."""
    if not _config_manager._initialized:
        initialize_config()
    _config_manager.set(section, option, value)


def reset_config(section: Optional[str] = None) -> None:
    """Reset one section, or the whole configuration, to defaults."""
    _config_manager.reset(section)


def get_config_manager() -> ConfigManager:
    """Return the configuration manager singleton."""
    return _config_manager


def get_numerical_config() -> NumericalConfig:
    """Return the numerical configuration section."""
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager.get_section("numerical")


def get_estimation_config() -> EstimationConfig:
    """Return the estimation configuration section."""
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager.get_section("estimation")


def get_logging_config() -> LoggingConfig:
    """Return the logging configuration section."""
    if not _config_manager._initialized:
        initialize_config()
    return _config_manager.get_section("logging")
