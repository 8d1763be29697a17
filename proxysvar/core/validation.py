# proxysvar/core/validation.py

"""
Validation utilities for proxysvar.

Input checks shared by the identification stages: lag orders, residual panels
and instrument series. Each function returns the validated (and, where needed,
converted) object or raises one of the package exceptions with a descriptive
message.
"""

from typing import Any, List, Optional, Sequence

import numpy as np
import pandas as pd

from proxysvar.core.exceptions import (
    raise_data_error, raise_dimension_error, raise_parameter_error
)
from proxysvar.core.types import InstrumentData, ResidualData


def validate_lag_order(lag_order: Any, param_name: str = "lag_order") -> int:
    """Validate that a lag order is a non-negative integer.

    Args:
        lag_order: Lag order of the originating VAR
        param_name: Name of the parameter for error messages

    Returns:
        int: The validated lag order

    Raises:
        ParameterError: If lag_order is missing, not an integer, or negative
    """
    if lag_order is None:
        raise_parameter_error(
            f"{param_name} is required when residuals are supplied directly",
            param_name=param_name,
            constraint="non-negative integer"
        )
    if isinstance(lag_order, bool) or not isinstance(lag_order, (int, np.integer)):
        raise_parameter_error(
            f"{param_name} must be an integer, got {type(lag_order).__name__}",
            param_name=param_name,
            param_value=lag_order,
            constraint="non-negative integer"
        )
    if lag_order < 0:
        raise_parameter_error(
            f"{param_name} must be non-negative",
            param_name=param_name,
            param_value=lag_order,
            constraint="non-negative integer"
        )
    return int(lag_order)


def validate_residual_panel(
    residuals: ResidualData,
    names: Optional[Sequence[Any]] = None,
    data_name: str = "residuals"
) -> pd.DataFrame:
    """Validate reduced-form residuals and return them as a named DataFrame.

    NumPy input gets the supplied ``names`` or ``y1..yk``.

    Args:
        residuals: T x k residual matrix
        names: Optional series names for array input
        data_name: Name of the data for error messages

    Returns:
        pd.DataFrame: The validated residual panel

    Raises:
        TypeError: If residuals is not an array or DataFrame
        DimensionError: If residuals is not two-dimensional or names do not match
        DataError: If residuals contain NaN/Inf values or duplicate names
    """
    if isinstance(residuals, pd.DataFrame):
        panel = residuals
        if names is not None:
            if len(names) != panel.shape[1]:
                raise_dimension_error(
                    f"Got {len(names)} names for {panel.shape[1]} residual series",
                    array_name="names",
                    expected_shape=(panel.shape[1],),
                    actual_shape=(len(names),)
                )
            panel = panel.set_axis(list(names), axis=1)
    elif isinstance(residuals, np.ndarray):
        if residuals.ndim != 2:
            raise_dimension_error(
                f"{data_name} must be a 2D array",
                array_name=data_name,
                expected_shape="(T, k)",
                actual_shape=residuals.shape
            )
        k = residuals.shape[1]
        if names is None:
            names = [f"y{i + 1}" for i in range(k)]
        elif len(names) != k:
            raise_dimension_error(
                f"Got {len(names)} names for {k} residual series",
                array_name="names",
                expected_shape=(k,),
                actual_shape=(len(names),)
            )
        panel = pd.DataFrame(residuals, columns=list(names))
    else:
        raise TypeError(
            f"{data_name} must be a NumPy array or Pandas DataFrame, "
            f"got {type(residuals).__name__}"
        )

    if panel.shape[1] == 0:
        raise_dimension_error(
            f"{data_name} has no series",
            array_name=data_name,
            expected_shape="(T, k) with k >= 1",
            actual_shape=panel.shape
        )

    duplicated: List[Any] = panel.columns[panel.columns.duplicated()].tolist()
    if duplicated:
        raise_data_error(
            f"{data_name} has duplicate series names: {duplicated}",
            data_name=data_name,
            issue="duplicate names"
        )

    try:
        panel = panel.astype(float)
    except (TypeError, ValueError) as e:
        raise TypeError(f"{data_name} must contain numeric values") from e

    values = panel.to_numpy()
    if np.isnan(values).any():
        raise_data_error(
            f"{data_name} contains NaN values",
            data_name=data_name,
            issue="contains NaN values"
        )
    if np.isinf(values).any():
        raise_data_error(
            f"{data_name} contains infinite values",
            data_name=data_name,
            issue="contains infinite values"
        )

    return panel


def validate_instrument(
    instrument: InstrumentData,
    data_name: str = "instrument"
) -> pd.Series:
    """Validate an instrument series; NaN marks a missing period.

    Array-like input is returned as a Series with a default RangeIndex, but the
    caller must treat it as unindexed (see ``has_time_index``).

    Raises:
        TypeError: If the instrument is not numeric
        DimensionError: If the instrument is not one-dimensional
        DataError: If the instrument contains infinite values
    """
    if isinstance(instrument, pd.DataFrame):
        if instrument.shape[1] != 1:
            raise_dimension_error(
                f"{data_name} must be a single series",
                array_name=data_name,
                expected_shape="(T,)",
                actual_shape=instrument.shape
            )
        instrument = instrument.iloc[:, 0]

    if isinstance(instrument, pd.Series):
        series = instrument
    else:
        array = np.asarray(instrument)
        if array.ndim != 1:
            raise_dimension_error(
                f"{data_name} must be one-dimensional",
                array_name=data_name,
                expected_shape="(T,)",
                actual_shape=array.shape
            )
        series = pd.Series(array)

    try:
        series = series.astype(float)
    except (TypeError, ValueError) as e:
        raise TypeError(f"{data_name} must contain numeric values") from e

    if np.isinf(series.to_numpy()).any():
        raise_data_error(
            f"{data_name} contains infinite values",
            data_name=data_name,
            issue="contains infinite values"
        )
    return series


def has_time_index(data: Any) -> bool:
    """Return True when data is a pandas object with meaningful row labels.

    A RangeIndex, the default pandas assigns to unlabelled data and the index
    statsmodels gives residuals of an undated VAR, counts as no index.
    """
    if not isinstance(data, (pd.Series, pd.DataFrame)):
        return False
    return not isinstance(data.index, pd.RangeIndex)
