# proxysvar/models/relative_response.py
"""
Relative-response estimation by two-stage least squares.

First stage: the instrumented variable's residual (column 0) is regressed on
a constant and the instrument; its fitted values ``fs`` are the instrumented
component. Second stage: every other residual series is regressed on a
constant and ``fs``; the slope is that series' contemporaneous response
relative to a unit response of the instrumented variable. The instrumented
variable's own relative response is 1 by normalization.

The second-stage regressions are independent of one another. Large systems
dispatch them to a thread pool (see ``EstimationConfig.parallel_threshold``).
"""

import concurrent.futures
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

import numpy as np
import statsmodels.api as sm

from proxysvar.core.config import EstimationConfig, get_estimation_config
from proxysvar.core.exceptions import RegressionDegenerateError, warn_weak_instrument
from proxysvar.core.types import Matrix, Vector

# Set up module-level logger
logger = logging.getLogger("proxysvar.models.relative_response")

# Constant and slope, plus one residual degree of freedom for the t-statistic
MIN_REGRESSION_OBS = 3


@dataclass(frozen=True)
class FirstStageDiagnostics:
    """
    First-stage regression of the instrumented residual on the instrument.

    Attributes:
        intercept: Estimated constant
        slope: Estimated coefficient on the instrument
        t_statistic: t-statistic of the slope
        f_statistic: F-statistic for instrument relevance (t_statistic squared)
        r_squared: Coefficient of determination
        nobs: Number of observations
    """
    intercept: float
    slope: float
    t_statistic: float
    f_statistic: float
    r_squared: float
    nobs: int


@dataclass(frozen=True)
class RelativeResponseEstimate:
    """
    Output of the two-stage least squares step.

    Attributes:
        relative_response: Length-k responses in instrumented-first order,
            element 0 exactly 1.0
        first_stage: First-stage diagnostics
        fitted: First-stage fitted values ``fs``
    """
    relative_response: Vector
    first_stage: FirstStageDiagnostics
    fitted: Vector

    @property
    def beta(self) -> Vector:
        """Relative responses of the k-1 non-instrumented series."""
        return self.relative_response[1:]


def _design(regressor: Vector, stage: str, name: str) -> Matrix:
    X = np.column_stack([np.ones(regressor.shape[0]), regressor])
    if np.linalg.matrix_rank(X) < 2:
        raise RegressionDegenerateError(
            f"{name} has no variation over the aligned sample",
            stage=stage,
            regressor=name,
            context={"Observations": regressor.shape[0]}
        )
    return X


def first_stage(dependent: Vector, instrument: Vector,
                config: Optional[EstimationConfig] = None) -> Tuple[Vector, FirstStageDiagnostics]:
    """
    Regress the instrumented residual on a constant and the instrument.

    Args:
        dependent: Residual series of the instrumented variable, length T
        instrument: Aligned instrument, length T
        config: Estimation settings (defaults to the global configuration)

    Returns:
        Tuple[Vector, FirstStageDiagnostics]: Fitted values and diagnostics

    Raises:
        RegressionDegenerateError: If T is too small or the instrument is constant
    """
    config = config or get_estimation_config()
    y = np.asarray(dependent, dtype=float)
    z = np.asarray(instrument, dtype=float)
    T = y.shape[0]
    if T < MIN_REGRESSION_OBS:
        raise RegressionDegenerateError(
            f"First-stage regression needs at least {MIN_REGRESSION_OBS} observations, got {T}",
            stage="first",
            context={"Observations": T, "Parameters": 2}
        )

    X = _design(z, stage="first", name="instrument")
    res = sm.OLS(y, X).fit()

    slope_se = res.bse[1]
    t_stat = float(res.params[1] / slope_se) if slope_se > 0 else float(np.inf)
    diagnostics = FirstStageDiagnostics(
        intercept=float(res.params[0]),
        slope=float(res.params[1]),
        t_statistic=t_stat,
        f_statistic=t_stat ** 2,
        r_squared=float(res.rsquared),
        nobs=int(res.nobs),
    )

    logger.debug(
        f"First stage: slope={diagnostics.slope:.6g}, F={diagnostics.f_statistic:.3f}, "
        f"R2={diagnostics.r_squared:.4f}, T={T}"
    )
    threshold = config.weak_instrument_threshold
    if threshold > 0 and diagnostics.f_statistic < threshold:
        logger.warning(
            f"Weak instrument: first-stage F-statistic {diagnostics.f_statistic:.3f} < {threshold:g}"
        )
        warn_weak_instrument(diagnostics.f_statistic, threshold)

    return res.fittedvalues, diagnostics


def _second_stage_slope(X: Matrix, y: Vector) -> float:
    return float(sm.OLS(y, X).fit().params[1])


def estimate_relative_responses(
    residuals: Matrix,
    instrument: Vector,
    config: Optional[EstimationConfig] = None
) -> RelativeResponseEstimate:
    """
    Estimate relative responses of every series to the instrumented shock.

    Args:
        residuals: T x k aligned residuals, instrumented variable in column 0
        instrument: Aligned instrument, length T, no missing values
        config: Estimation settings (defaults to the global configuration)

    Returns:
        RelativeResponseEstimate: Relative responses and first-stage diagnostics

    Raises:
        RegressionDegenerateError: If either stage has a rank-deficient design
    """
    config = config or get_estimation_config()
    u = np.asarray(residuals, dtype=float)
    k = u.shape[1]

    fs, diagnostics = first_stage(u[:, 0], instrument, config=config)
    X = _design(fs, stage="second", name="first-stage fitted values")

    columns: List[Vector] = [u[:, j] for j in range(1, k)]
    if len(columns) >= config.parallel_threshold:
        logger.debug(f"Running {len(columns)} second-stage regressions on {config.max_workers} threads")
        with concurrent.futures.ThreadPoolExecutor(max_workers=config.max_workers) as executor:
            slopes = list(executor.map(lambda y: _second_stage_slope(X, y), columns))
    else:
        slopes = [_second_stage_slope(X, y) for y in columns]

    relative_response = np.empty(k)
    relative_response[0] = 1.0
    relative_response[1:] = slopes

    return RelativeResponseEstimate(
        relative_response=relative_response,
        first_stage=diagnostics,
        fitted=np.asarray(fs),
    )
