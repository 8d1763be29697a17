# proxysvar/core/types.py

"""
Core type annotations for proxysvar.

Type aliases and protocol classes shared by the identification stages. The
protocols describe the duck-typed contract the package expects from an
externally fitted VAR, so that statsmodels results and other VAR containers
can be passed in without being imported here.
"""

from typing import Any, Hashable, List, Literal, Protocol, Sequence, Union, runtime_checkable

import numpy as np
import pandas as pd

# NumPy array type aliases
Vector = np.ndarray  # 1D array
Matrix = np.ndarray  # 2D array
CovarianceMatrix = np.ndarray  # Symmetric covariance matrix

# Time series inputs
ResidualData = Union[np.ndarray, pd.DataFrame]
InstrumentData = Union[np.ndarray, pd.Series, Sequence[float]]
VariableName = Hashable

NegativeVariancePolicy = Literal["raise", "warn"]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


@runtime_checkable
class StatsmodelsVARLike(Protocol):
    """Fitted VAR in the statsmodels layout (``VARResults``)."""

    resid: Any
    k_ar: int
    names: List[str]


@runtime_checkable
class GenericVARLike(Protocol):
    """Fitted VAR exposing ``residuals`` and a lag order ``p``."""

    residuals: Any
    p: int
