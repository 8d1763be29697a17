'''
Custom exception classes for proxysvar.

This module defines the exception and warning hierarchy used throughout the
package. Every error raised while identifying a shock carries a message,
optional details and a context dictionary (offending variable names, matrix
dimensions, numeric diagnostics) that is rendered into the final message so
the caller can act on it.

All errors are data-conformity errors: none of them are transient and none of
them are retried.
'''

import inspect
import warnings
from pathlib import Path
from typing import Any, Dict, Optional, Sequence, Tuple, Union

import numpy as np


def _format_message(message: str,
                    details: Optional[str],
                    context: Optional[Dict[str, Any]],
                    frame: Any) -> str:
    full_message = message
    if details:
        full_message += f"\n\nDetails: {details}"

    if context:
        context_str = "\n".join(f"  {k}: {v}" for k, v in context.items())
        full_message += f"\n\nContext:\n{context_str}"

    # Report the first frame outside this module, past subclass __init__
    # methods and the raise_* helpers
    if frame:
        try:
            caller = frame.f_back
            while caller is not None and caller.f_globals.get("__name__") == __name__:
                caller = caller.f_back
            if caller:
                caller_info = inspect.getframeinfo(caller)
                full_message += f"\n\nLocation: {Path(caller_info.filename).name}:{caller_info.lineno}"
        finally:
            del frame  # Avoid reference cycles

    return full_message


class ProxySVARError(Exception):
    """Base exception class for all proxysvar errors.

    Attributes:
        message: The error message
        details: Additional details about the error
        context: Dictionary containing contextual information about the error
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        """Initialize the ProxySVARError.

        Args:
            message: The primary error message
            details: Additional details about the error
            context: Dictionary containing contextual information about the error
        """
        self.message = message
        self.details = details
        self.context = context or {}

        super().__init__(_format_message(message, details, context, inspect.currentframe()))


class ParameterError(ProxySVARError):
    """Exception raised for invalid call parameters such as a negative lag order.

    Attributes:
        param_name: The name of the parameter that caused the error
        param_value: The invalid parameter value
        constraint: Description of the constraint that was violated
    """

    def __init__(self,
                 message: str,
                 param_name: Optional[str] = None,
                 param_value: Optional[Any] = None,
                 constraint: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.param_name = param_name
        self.param_value = param_value
        self.constraint = constraint

        context_dict = context or {}
        if param_name:
            context_dict["Parameter"] = param_name
        if param_value is not None:
            context_dict["Value"] = param_value
        if constraint:
            context_dict["Constraint"] = constraint

        super().__init__(message, details, context_dict)


class DimensionError(ProxySVARError):
    """Exception raised when array dimensions are incompatible.

    Attributes:
        array_name: The name of the array that caused the error
        expected_shape: The expected shape of the array
        actual_shape: The actual shape of the array
    """

    def __init__(self,
                 message: str,
                 array_name: Optional[str] = None,
                 expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                 actual_shape: Optional[Tuple[int, ...]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.array_name = array_name
        self.expected_shape = expected_shape
        self.actual_shape = actual_shape

        context_dict = context or {}
        if array_name:
            context_dict["Array"] = array_name
        if expected_shape is not None:
            context_dict["Expected Shape"] = expected_shape
        if actual_shape is not None:
            context_dict["Actual Shape"] = actual_shape

        super().__init__(message, details, context_dict)


class DataError(ProxySVARError):
    """Exception raised for errors related to input data.

    Attributes:
        data_name: The name of the data that caused the error
        issue: Description of the issue with the data
        index: The index or location where the issue was detected
    """

    def __init__(self,
                 message: str,
                 data_name: Optional[str] = None,
                 issue: Optional[str] = None,
                 index: Optional[Union[int, Tuple[int, ...], str]] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.data_name = data_name
        self.issue = issue
        self.index = index

        context_dict = context or {}
        if data_name:
            context_dict["Data"] = data_name
        if issue:
            context_dict["Issue"] = issue
        if index is not None:
            context_dict["Index"] = index

        super().__init__(message, details, context_dict)


class UnknownVariableError(DataError):
    """Exception raised when the instrumented variable is not a residual series.

    Attributes:
        requested: The name that was asked for
        available: The series names present in the residual panel
    """

    def __init__(self,
                 requested: Any,
                 available: Sequence[Any],
                 details: Optional[str] = None) -> None:
        self.requested = requested
        self.available = list(available)
        message = (
            f"The series you are trying to instrument ({requested}) is not a "
            f"series in the residual panel."
        )
        super().__init__(
            message,
            data_name="residuals",
            issue="unknown instrumented variable",
            details=details,
            context={"Requested": requested, "Available": self.available},
        )


class InsufficientDataError(DataError):
    """Exception raised when too few usable observations remain.

    Attributes:
        nobs: Number of usable observations
        required: Minimum number of observations needed
    """

    def __init__(self,
                 message: str,
                 nobs: Optional[int] = None,
                 required: Optional[int] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.nobs = nobs
        self.required = required

        context_dict = context or {}
        if nobs is not None:
            context_dict["Observations"] = nobs
        if required is not None:
            context_dict["Required"] = required

        super().__init__(message, issue="insufficient data", details=details, context=context_dict)


class EstimationError(ProxySVARError):
    """Exception raised when an estimation step cannot be carried out.

    Attributes:
        model_type: The type of model or stage being estimated
        estimation_method: The estimation method that was used
    """

    def __init__(self,
                 message: str,
                 model_type: Optional[str] = None,
                 estimation_method: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.model_type = model_type
        self.estimation_method = estimation_method

        context_dict = context or {}
        if model_type:
            context_dict["Model Type"] = model_type
        if estimation_method:
            context_dict["Estimation Method"] = estimation_method

        super().__init__(message, details, context_dict)


class DegreesOfFreedomError(EstimationError):
    """Exception raised when ``T - k*p - 1`` leaves no degrees of freedom.

    Attributes:
        nobs: Number of aligned observations (T)
        n_series: Number of residual series (k)
        lag_order: Lag order of the originating VAR (p)
    """

    def __init__(self,
                 nobs: int,
                 n_series: int,
                 lag_order: int,
                 details: Optional[str] = None) -> None:
        self.nobs = nobs
        self.n_series = n_series
        self.lag_order = lag_order
        self.dof = nobs - n_series * lag_order - 1
        super().__init__(
            f"Sample too short for the covariance correction: T - k*p - 1 = {self.dof} <= 0",
            model_type="covariance partition",
            details=details,
            context={"T": nobs, "k": n_series, "p": lag_order},
        )


class RegressionDegenerateError(EstimationError):
    """Exception raised when a first- or second-stage regression is rank deficient.

    Attributes:
        stage: ``"first"`` or ``"second"``
        regressor: Name of the regressor without variation
    """

    def __init__(self,
                 message: str,
                 stage: str,
                 regressor: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.stage = stage
        self.regressor = regressor

        context_dict = context or {}
        context_dict["Stage"] = stage
        if regressor:
            context_dict["Regressor"] = regressor

        super().__init__(message, model_type="two-stage least squares",
                         estimation_method="OLS", details=details, context=context_dict)


class NumericError(ProxySVARError):
    """Exception raised for numerical computation errors.

    Attributes:
        operation: The operation that caused the error
        values: The values that caused the error
        error_type: The type of numerical error
    """

    def __init__(self,
                 message: str,
                 operation: Optional[str] = None,
                 values: Optional[Any] = None,
                 error_type: Optional[str] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.operation = operation
        self.values = values
        self.error_type = error_type

        context_dict = context or {}
        if operation:
            context_dict["Operation"] = operation
        if values is not None:
            if isinstance(values, np.ndarray) and values.size > 10:
                # Truncate large arrays for readability
                context_dict["Values"] = f"Array with shape {values.shape}"
            else:
                context_dict["Values"] = values
        if error_type:
            context_dict["Error Type"] = error_type

        super().__init__(message, details, context_dict)


class SingularCovarianceError(NumericError):
    """Exception raised when the Q matrix of the scale recovery cannot be inverted.

    Attributes:
        condition_number: Condition number of Q (``inf`` when exactly singular)
        shape: Shape of Q
    """

    def __init__(self,
                 message: str,
                 condition_number: float,
                 shape: Tuple[int, ...],
                 details: Optional[str] = None) -> None:
        self.condition_number = condition_number
        self.shape = shape
        super().__init__(
            message,
            operation="Q inversion",
            error_type="singular matrix",
            details=details,
            context={"Condition Number": condition_number, "Shape": shape},
        )


class NegativeVarianceError(NumericError):
    """Exception raised when the recovered shock variance s11^2 is negative.

    Attributes:
        s11_squared: The negative variance that was recovered
    """

    def __init__(self,
                 s11_squared: float,
                 details: Optional[str] = None) -> None:
        self.s11_squared = s11_squared
        super().__init__(
            f"Recovered shock variance is negative (s11^2 = {s11_squared:.6g}); "
            f"the instrument is weak or misspecified",
            operation="scale recovery",
            values=s11_squared,
            error_type="negative variance",
            details=details,
        )


class ConfigurationError(ProxySVARError):
    """Exception raised for invalid configuration settings.

    Attributes:
        section: The configuration section
        option: The configuration option
        value: The invalid value
    """

    def __init__(self,
                 message: str,
                 section: Optional[str] = None,
                 option: Optional[str] = None,
                 value: Optional[Any] = None,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.section = section
        self.option = option
        self.value = value

        context_dict = context or {}
        if section:
            context_dict["Section"] = section
        if option:
            context_dict["Option"] = option
        if value is not None:
            context_dict["Value"] = value

        super().__init__(message, details, context_dict)


class ProxySVARWarning(UserWarning):
    """Base warning class for all proxysvar warnings.

    Attributes:
        message: The warning message
        details: Additional details about the warning
        context: Dictionary containing contextual information about the warning
    """

    def __init__(self,
                 message: str,
                 details: Optional[str] = None,
                 context: Optional[Dict[str, Any]] = None) -> None:
        self.message = message
        self.details = details
        self.context = context or {}

        super().__init__(_format_message(message, details, context, None))


class WeakInstrumentWarning(ProxySVARWarning):
    """Warning for a first-stage F-statistic below the weak-instrument threshold.

    Attributes:
        f_statistic: First-stage F-statistic
        threshold: Threshold it was compared with
    """

    def __init__(self,
                 message: str,
                 f_statistic: float,
                 threshold: float,
                 details: Optional[str] = None) -> None:
        self.f_statistic = f_statistic
        self.threshold = threshold
        super().__init__(message, details,
                         {"F-statistic": f_statistic, "Threshold": threshold})


class NegativeVarianceWarning(ProxySVARWarning):
    """Warning issued instead of NegativeVarianceError under the ``"warn"`` policy."""

    def __init__(self,
                 message: str,
                 s11_squared: float,
                 details: Optional[str] = None) -> None:
        self.s11_squared = s11_squared
        super().__init__(message, details, {"s11^2": s11_squared})


# Helper functions for raising and warning with consistent formatting

def raise_parameter_error(message: str,
                          param_name: Optional[str] = None,
                          param_value: Optional[Any] = None,
                          constraint: Optional[str] = None,
                          details: Optional[str] = None,
                          context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a ParameterError with consistent formatting.

    Raises:
        ParameterError: The formatted parameter error
    """
    raise ParameterError(message, param_name, param_value, constraint, details, context)


def raise_dimension_error(message: str,
                          array_name: Optional[str] = None,
                          expected_shape: Optional[Union[Tuple[int, ...], str]] = None,
                          actual_shape: Optional[Tuple[int, ...]] = None,
                          details: Optional[str] = None,
                          context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DimensionError with consistent formatting.

    Raises:
        DimensionError: The formatted dimension error
    """
    raise DimensionError(message, array_name, expected_shape, actual_shape, details, context)


def raise_data_error(message: str,
                     data_name: Optional[str] = None,
                     issue: Optional[str] = None,
                     index: Optional[Union[int, Tuple[int, ...], str]] = None,
                     details: Optional[str] = None,
                     context: Optional[Dict[str, Any]] = None) -> None:
    """Raise a DataError with consistent formatting.

    Raises:
        DataError: The formatted data error
    """
    raise DataError(message, data_name, issue, index, details, context)


def warn_weak_instrument(f_statistic: float, threshold: float) -> None:
    """Issue a WeakInstrumentWarning for a low first-stage F-statistic."""
    warnings.warn(
        WeakInstrumentWarning(
            f"First-stage F-statistic {f_statistic:.3f} is below {threshold:g}; "
            f"the instrument may be weak",
            f_statistic=f_statistic,
            threshold=threshold,
        ),
        stacklevel=3,
    )


def warn_negative_variance(s11_squared: float) -> None:
    """Issue a NegativeVarianceWarning for a negative recovered variance."""
    warnings.warn(
        NegativeVarianceWarning(
            f"Recovered shock variance is negative (s11^2 = {s11_squared:.6g}); "
            f"scale set to NaN",
            s11_squared=s11_squared,
        ),
        stacklevel=3,
    )
