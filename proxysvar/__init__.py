# proxysvar/__init__.py
"""
proxysvar - external-instrument identification for structural VARs

Identifies one structural shock in a reduced-form vector autoregression from
an external instrument (proxy) that is correlated with that shock and
uncorrelated with the others. Given the VAR residuals and the instrument, it
returns the impact column of the instrumented shock.

The reduced-form VAR itself is fitted elsewhere, for example with
``statsmodels.tsa.api.VAR``; its results object can be passed in directly.
"""

import logging
import os
from typing import Union

# Set up package-wide logger
logger = logging.getLogger("proxysvar")
logger.setLevel(logging.INFO)
_handler = logging.StreamHandler()
_handler.setFormatter(logging.Formatter('%(asctime)s - %(name)s - %(levelname)s - %(message)s'))
logger.addHandler(_handler)

from .version import __version__, __title__, __description__, __license__

from . import core
from . import models
from . import utils

from .core.config import get_logging_config, initialize_config
from .core.exceptions import (
    ProxySVARError,
    UnknownVariableError,
    InsufficientDataError,
    DegreesOfFreedomError,
    RegressionDegenerateError,
    SingularCovarianceError,
    NegativeVarianceError,
    ProxySVARWarning,
    WeakInstrumentWarning,
    NegativeVarianceWarning,
)
from .models.identification import (
    ExternalInstrumentResult,
    ExternalInstrumentSVAR,
    estimate_external_instrument,
    identify_shock,
)


def _initialize_logging() -> None:
    """Apply the logging configuration to the package logger."""
    logging_config = get_logging_config()
    _handler.setFormatter(logging.Formatter(logging_config.log_format))
    if not logging_config.console_logging:
        logger.removeHandler(_handler)

    log_level = os.environ.get("PROXYSVAR_LOG_LEVEL", logging_config.log_level)
    set_log_level(log_level)


def get_version() -> str:
    """Return the version of proxysvar."""
    return __version__


def set_log_level(level: Union[str, int]) -> None:
    """
    Set the logging level of the package logger.

    Args:
        level: Logging level, either as string ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL')
              or as an integer constant from the logging module
    """
    if isinstance(level, str):
        resolved = logging.getLevelName(level.upper())
        if not isinstance(resolved, int):
            raise ValueError(f"Unknown log level: {level}")
        level = resolved
    logger.setLevel(level)
    logger.debug(f"Log level set to {logging.getLevelName(level)}")


initialize_config()
_initialize_logging()

__all__ = [
    # Subpackages
    'core',
    'models',
    'utils',

    # Identification
    'identify_shock',
    'estimate_external_instrument',
    'ExternalInstrumentSVAR',
    'ExternalInstrumentResult',

    # Errors and warnings
    'ProxySVARError',
    'UnknownVariableError',
    'InsufficientDataError',
    'DegreesOfFreedomError',
    'RegressionDegenerateError',
    'SingularCovarianceError',
    'NegativeVarianceError',
    'ProxySVARWarning',
    'WeakInstrumentWarning',
    'NegativeVarianceWarning',

    # Public functions
    'get_version',
    'set_log_level',

    # Version info
    '__version__',
]
