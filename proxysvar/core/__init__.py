"""
proxysvar core module.

Exception hierarchy, configuration, type aliases, input validation and result
containers shared by the identification stages.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("proxysvar.core")

from .exceptions import (
    ProxySVARError,
    ParameterError,
    DimensionError,
    DataError,
    UnknownVariableError,
    InsufficientDataError,
    EstimationError,
    DegreesOfFreedomError,
    RegressionDegenerateError,
    NumericError,
    SingularCovarianceError,
    NegativeVarianceError,
    ConfigurationError,
    ProxySVARWarning,
    WeakInstrumentWarning,
    NegativeVarianceWarning,
)

from .config import (
    ConfigManager,
    ProxySVARConfig,
    NumericalConfig,
    EstimationConfig,
    LoggingConfig,
    get_config,
    set_config,
    reset_config,
    get_numerical_config,
    get_estimation_config,
    get_logging_config,
)

from .results import ModelResult

__all__ = [
    # Exceptions
    'ProxySVARError',
    'ParameterError',
    'DimensionError',
    'DataError',
    'UnknownVariableError',
    'InsufficientDataError',
    'EstimationError',
    'DegreesOfFreedomError',
    'RegressionDegenerateError',
    'NumericError',
    'SingularCovarianceError',
    'NegativeVarianceError',
    'ConfigurationError',
    'ProxySVARWarning',
    'WeakInstrumentWarning',
    'NegativeVarianceWarning',

    # Configuration
    'ConfigManager',
    'ProxySVARConfig',
    'NumericalConfig',
    'EstimationConfig',
    'LoggingConfig',
    'get_config',
    'set_config',
    'reset_config',
    'get_numerical_config',
    'get_estimation_config',
    'get_logging_config',

    # Results
    'ModelResult',
]
