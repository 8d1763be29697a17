# proxysvar/models/identification.py
"""
External-instrument (proxy) identification of a single structural shock.

Given reduced-form VAR residuals and an instrument correlated with one
structural shock and uncorrelated with the others, this module recovers the
column of the structural impact matrix belonging to the instrumented
variable (Stock and Watson 2012; Mertens and Ravn 2013; Gertler and Karadi
2015).

The returned column is expressed relative to the instrumented variable: its
own entry is exactly 1 and every other entry is the contemporaneous response
to a shock that moves the instrumented variable by one unit. The recovered
shock scale, and the column rescaled to a one-standard-deviation shock, are
available on ``ExternalInstrumentResult``.

Classes:
    ExternalInstrumentResult: Detailed identification output
    ExternalInstrumentSVAR: Estimator object wrapping the identification

Functions:
    estimate_external_instrument: Run the identification, return the full result
    identify_shock: Run the identification, return the impact column only

Examples:
    >>> import statsmodels.api as sm
    >>> fitted = sm.tsa.VAR(data[["logip", "logcpi", "gs1", "ebp"]]).fit(12)
    >>> identify_shock(fitted, data["ff4_tc"], "gs1")
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import Any, Hashable, Optional, Sequence

import numpy as np
import pandas as pd

from proxysvar.core.config import get_estimation_config, get_numerical_config
from proxysvar.core.results import ModelResult
from proxysvar.core.types import InstrumentData, VariableName
from proxysvar.models.alignment import align_sample, resolve_input
from proxysvar.models.covariance import CovariancePartition, partition_covariance
from proxysvar.models.relative_response import (
    FirstStageDiagnostics, estimate_relative_responses
)
from proxysvar.models.scale import ScaleRecovery, recover_scale

# Set up module-level logger
logger = logging.getLogger("proxysvar.models.identification")


@dataclass
class ExternalInstrumentResult(ModelResult):
    """
    Results of external-instrument shock identification.

    Attributes:
        instrumented_variable: Name of the instrumented series
        impact: Relative impact column in the caller's variable order
            (instrumented entry exactly 1)
        scaled_impact: ``impact`` multiplied by ``scale``, the impact of a
            one-standard-deviation shock
        scale: Standard deviation of the shock's impact on the instrumented variable
        s11_squared: Recovered variance behind ``scale``
        s12s12: Quadratic form subtracted from gamma_11
        relative_response: Relative responses in instrumented-first order
        partition: Residual covariance partition
        first_stage: First-stage regression diagnostics
        scale_recovery: Intermediate quantities of the scale recovery
        nobs: Observations in the aligned sample
        n_missing: Residual periods dropped for a missing instrument
        lag_order: Lag order of the originating VAR
    """
    instrumented_variable: Hashable = None
    impact: pd.Series = field(default_factory=lambda: pd.Series(dtype=float))
    scaled_impact: pd.Series = field(default_factory=lambda: pd.Series(dtype=float))
    scale: float = float("nan")
    s11_squared: float = float("nan")
    s12s12: float = float("nan")
    relative_response: np.ndarray = field(default_factory=lambda: np.empty(0))
    partition: Optional[CovariancePartition] = None
    first_stage: Optional[FirstStageDiagnostics] = None
    scale_recovery: Optional[ScaleRecovery] = field(default=None, repr=False)
    nobs: int = 0
    n_missing: int = 0
    lag_order: int = 0

    def summary(self) -> str:
        """Generate a text summary of the identification results."""
        base_summary = super().summary()

        lines = [
            f"Instrumented variable: {self.instrumented_variable}",
            f"Observations: {self.nobs} ({self.n_missing} periods without instrument)",
            f"Lag order: {self.lag_order}",
        ]
        if self.first_stage is not None:
            lines.append(
                f"First stage: slope {self.first_stage.slope:.4f}, "
                f"F-statistic {self.first_stage.f_statistic:.2f}, "
                f"R-squared {self.first_stage.r_squared:.4f}"
            )
        lines.append(f"Shock scale: {self.scale:.6g} (s11^2 = {self.s11_squared:.6g})")
        lines.append("")

        table = self.to_dataframe().to_string(float_format=lambda x: f"{x:.6f}")
        return base_summary + "\n".join(lines) + "\n" + table + "\n"

    def to_dataframe(self) -> pd.DataFrame:
        """Relative and scaled impact columns side by side."""
        return pd.DataFrame({"relative": self.impact, "scaled": self.scaled_impact})


def estimate_external_instrument(
    var: Any,
    instrument: InstrumentData,
    instrumented_variable: VariableName,
    lag_order: Optional[int] = None,
    *,
    names: Optional[Sequence[VariableName]] = None,
    instrument_offset: int = 0,
    model_name: str = "External Instrument SVAR"
) -> ExternalInstrumentResult:
    """
    Identify the impact column of the instrumented shock.

    Args:
        var: Reduced-form residuals (DataFrame or T x k array) or a fitted VAR
            (statsmodels ``VARResults`` or any object with ``residuals`` and ``p``)
        instrument: Instrument series; NaN marks periods without an observation.
            For a fitted VAR an unindexed instrument covers the full estimation
            sample and its first ``p`` values are discarded.
        instrumented_variable: Name of the residual series being instrumented
        lag_order: Lag order of the VAR, required for raw residuals
        names: Series names for residual arrays without names
        instrument_offset: Extra leading instrument observations to discard
            under positional alignment
        model_name: Name stored on the result

    Returns:
        ExternalInstrumentResult: Impact column, shock scale and diagnostics

    Raises:
        UnknownVariableError: If the instrumented variable is not a residual series
        InsufficientDataError: If no overlapping observed periods remain
        DegreesOfFreedomError: If T - k*p - 1 <= 0
        RegressionDegenerateError: If a regression design is rank deficient
        SingularCovarianceError: If Q cannot be inverted
        NegativeVarianceError: If the recovered shock variance is negative
    """
    numerical_config = get_numerical_config()
    estimation_config = get_estimation_config()

    residual_input = resolve_input(var, lag_order=lag_order, names=names)
    sample = align_sample(residual_input, instrument, instrumented_variable,
                          instrument_offset=instrument_offset)

    u = sample.residuals.to_numpy()
    partition = partition_covariance(u, sample.lag_order)
    estimate = estimate_relative_responses(u, sample.instrument.to_numpy(),
                                           config=estimation_config)
    recovery = recover_scale(partition, estimate.beta, config=numerical_config)

    impact = sample.order.restore(estimate.relative_response, name="impact")
    scaled_impact = (impact * recovery.scale).rename("scaled_impact")

    logger.debug(
        f"Identified shock to {instrumented_variable!r}: T={sample.nobs}, "
        f"k={sample.n_series}, p={sample.lag_order}, scale={recovery.scale:.6g}"
    )
    return ExternalInstrumentResult(
        model_name=model_name,
        metadata={"input": type(residual_input).__name__},
        instrumented_variable=instrumented_variable,
        impact=impact,
        scaled_impact=scaled_impact,
        scale=recovery.scale,
        s11_squared=recovery.s11_squared,
        s12s12=recovery.s12s12,
        relative_response=estimate.relative_response,
        partition=partition,
        first_stage=estimate.first_stage,
        scale_recovery=recovery,
        nobs=sample.nobs,
        n_missing=sample.n_missing,
        lag_order=sample.lag_order,
    )


def identify_shock(
    var: Any,
    instrument: InstrumentData,
    instrumented_variable: VariableName,
    lag_order: Optional[int] = None,
    *,
    names: Optional[Sequence[VariableName]] = None,
    instrument_offset: int = 0
) -> pd.Series:
    """
    Impact column of the instrumented shock, relative to the instrumented variable.

    See ``estimate_external_instrument`` for arguments and errors.

    Returns:
        pd.Series: One entry per residual series in the caller's order, the
            instrumented variable's entry exactly 1
    """
    return estimate_external_instrument(
        var, instrument, instrumented_variable, lag_order,
        names=names, instrument_offset=instrument_offset
    ).impact


class ExternalInstrumentSVAR:
    """
    Estimator object for external-instrument identification.

    Holds the identification settings so the same setup can be fitted
    to several residual sets or instruments.

    Args:
        instrumented_variable: Name of the residual series being instrumented
        lag_order: Lag order for raw residual input
        instrument_offset: Extra leading instrument observations to discard
        name: Model name stored on results
    """

    def __init__(self,
                 instrumented_variable: VariableName,
                 lag_order: Optional[int] = None,
                 instrument_offset: int = 0,
                 name: str = "External Instrument SVAR"):
        self.instrumented_variable = instrumented_variable
        self.lag_order = lag_order
        self.instrument_offset = instrument_offset
        self._name = name
        self._results: Optional[ExternalInstrumentResult] = None

    @property
    def results(self) -> Optional[ExternalInstrumentResult]:
        """Results of the most recent fit, or None."""
        return self._results

    def fit(self, var: Any, instrument: InstrumentData,
            names: Optional[Sequence[VariableName]] = None) -> ExternalInstrumentResult:
        """Identify the shock from ``var`` and ``instrument``."""
        self._results = estimate_external_instrument(
            var, instrument, self.instrumented_variable, self.lag_order,
            names=names, instrument_offset=self.instrument_offset,
            model_name=self._name
        )
        return self._results

    async def fit_async(self, var: Any, instrument: InstrumentData,
                        names: Optional[Sequence[VariableName]] = None) -> ExternalInstrumentResult:
        """Run ``fit`` in the default executor of the running event loop."""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, lambda: self.fit(var, instrument, names=names))

    def __repr__(self) -> str:
        return (f"{self.__class__.__name__}(instrumented_variable={self.instrumented_variable!r}, "
                f"lag_order={self.lag_order!r})")
