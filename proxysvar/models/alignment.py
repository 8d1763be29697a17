# proxysvar/models/alignment.py
"""
Sample alignment for external-instrument identification.

The identification routine accepts either reduced-form residuals supplied
directly or a fitted VAR. Both are resolved once, at the entry point, into a
small closed set of input variants:

    RawResiduals       residual panel plus a caller-supplied lag order
    FittedModelHandle  residual panel and lag order read from a fitted VAR

Everything downstream of ``align_sample`` sees only the canonical
``AlignedSample``: the residuals reordered so that the instrumented variable
comes first, restricted to the periods where the instrument is observed.

Alignment rules:
    - When both the residual panel and the instrument carry a pandas index
      other than a RangeIndex, the instrument is matched by label. Instrument
      periods outside the residual sample are ignored; every residual period
      must appear in the instrument index (NaN marks an unobserved one), and
      ``instrument_offset`` must be 0.
    - Otherwise alignment is positional. For a fitted VAR the first ``p``
      instrument observations are discarded (one residual row is lost per lag);
      ``instrument_offset`` discards further leading observations. The next
      ``T`` instrument values are matched to the ``T`` residual rows.
    - Periods where the instrument is NaN are dropped.
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Hashable, Optional, Sequence, Tuple, Union

import numpy as np
import pandas as pd

from proxysvar.core.exceptions import (
    InsufficientDataError, UnknownVariableError,
    raise_data_error, raise_parameter_error
)
from proxysvar.core.types import (
    GenericVARLike, InstrumentData, StatsmodelsVARLike, VariableName
)
from proxysvar.core.validation import (
    has_time_index, validate_instrument, validate_lag_order, validate_residual_panel
)

# Set up module-level logger
logger = logging.getLogger("proxysvar.models.alignment")


@dataclass(frozen=True)
class RawResiduals:
    """Residual panel supplied directly by the caller.

    Attributes:
        panel: T x k residuals with named columns
        lag_order: Lag order of the VAR that produced the residuals
        indexed: Whether the caller's residuals carried their own time index
    """
    panel: pd.DataFrame
    lag_order: int
    indexed: bool

    @property
    def instrument_lag_offset(self) -> int:
        """Leading instrument observations lost to lag truncation."""
        return 0


@dataclass(frozen=True)
class FittedModelHandle:
    """Residual panel and lag order extracted from a fitted VAR.

    Attributes:
        panel: T x k residuals with named columns
        lag_order: Lag order of the fitted VAR
        indexed: Whether the fitted residuals carried their own time index
        model: The fitted VAR object
    """
    panel: pd.DataFrame
    lag_order: int
    indexed: bool
    model: Any = field(repr=False, compare=False)

    @property
    def instrument_lag_offset(self) -> int:
        """Leading instrument observations lost to lag truncation."""
        return self.lag_order


ResidualInput = Union[RawResiduals, FittedModelHandle]


def resolve_input(
    var: Any,
    lag_order: Optional[int] = None,
    names: Optional[Sequence[VariableName]] = None
) -> ResidualInput:
    """
    Resolve the caller's residual source into a RawResiduals or FittedModelHandle.

    Args:
        var: A residual DataFrame/array, a statsmodels ``VARResults`` (``resid``,
            ``k_ar``, ``names``), or any fitted VAR exposing ``residuals`` and ``p``
        lag_order: Lag order; required for raw residuals, optional (and checked
            against the fitted value) for a fitted VAR
        names: Series names for residuals that do not carry their own

    Returns:
        ResidualInput: The resolved input variant

    Raises:
        TypeError: If var is none of the supported inputs
        ParameterError: If the lag order is missing, invalid or inconsistent
    """
    if isinstance(var, (pd.DataFrame, np.ndarray)):
        p = validate_lag_order(lag_order)
        panel = validate_residual_panel(var, names=names)
        return RawResiduals(panel=panel, lag_order=p, indexed=has_time_index(var))

    if isinstance(var, StatsmodelsVARLike):
        residuals, fitted_p = var.resid, var.k_ar
        fitted_names = names if names is not None else getattr(var, "names", None)
    elif isinstance(var, GenericVARLike):
        residuals, fitted_p = var.residuals, var.p
        fitted_names = names if names is not None else getattr(var, "var_names", None)
    else:
        raise TypeError(
            "var must be a residual DataFrame/array or a fitted VAR exposing "
            f"residuals and a lag order, got {type(var).__name__}"
        )

    p = validate_lag_order(fitted_p, param_name="fitted lag order")
    if lag_order is not None and validate_lag_order(lag_order) != p:
        raise_parameter_error(
            "lag_order does not match the lag order of the fitted VAR",
            param_name="lag_order",
            param_value=lag_order,
            constraint=f"must equal the fitted lag order {p}"
        )

    if isinstance(residuals, pd.DataFrame):
        panel = validate_residual_panel(residuals, names=names)
    else:
        panel = validate_residual_panel(np.asarray(residuals, dtype=float), names=fitted_names)
    logger.debug(f"Extracted {panel.shape[0]} x {panel.shape[1]} residuals from fitted VAR (p={p})")
    return FittedModelHandle(panel=panel, lag_order=p, indexed=has_time_index(residuals), model=var)


@dataclass(frozen=True)
class ColumnOrder:
    """
    Index permutation that moves the instrumented variable to the front.

    ``order[j]`` is the original position of the j-th internal column and
    ``inverse[i]`` is the internal position of the i-th original column, so
    ``internal[inverse]`` restores the caller's ordering.

    Attributes:
        names: Series names in the caller's original order
        instrumented: Name of the instrumented variable
        order: Original positions in instrumented-first order
        inverse: Inverse permutation of ``order``
    """
    names: Tuple[Hashable, ...]
    instrumented: Hashable
    order: Tuple[int, ...]
    inverse: Tuple[int, ...]

    @classmethod
    def from_names(cls, names: Sequence[Hashable], instrumented: Hashable) -> 'ColumnOrder':
        """
        Build the permutation for ``names`` with ``instrumented`` first.

        Raises:
            UnknownVariableError: If ``instrumented`` is not one of ``names``
        """
        names = tuple(names)
        if instrumented not in names:
            raise UnknownVariableError(instrumented, names)

        first = names.index(instrumented)
        order = (first,) + tuple(i for i in range(len(names)) if i != first)
        inverse = tuple(int(i) for i in np.argsort(order))
        return cls(names=names, instrumented=instrumented, order=order, inverse=inverse)

    @property
    def ordered_names(self) -> Tuple[Hashable, ...]:
        """Series names in instrumented-first order."""
        return tuple(self.names[i] for i in self.order)

    def restore(self, values: Any, name: Optional[str] = None) -> pd.Series:
        """Map an instrumented-first vector back to the caller's ordering."""
        values = np.asarray(values, dtype=float)
        return pd.Series(values[list(self.inverse)], index=pd.Index(self.names), name=name)


@dataclass(frozen=True)
class AlignedSample:
    """
    Residuals and instrument on their common, fully observed sample.

    Attributes:
        residuals: T x k residuals, instrumented variable in column 0
        instrument: Instrument values for the same T periods
        order: Column permutation applied to the residuals
        lag_order: Lag order of the originating VAR
        n_missing: Residual periods dropped because the instrument was missing
    """
    residuals: pd.DataFrame
    instrument: pd.Series
    order: ColumnOrder
    lag_order: int
    n_missing: int = 0

    @property
    def nobs(self) -> int:
        return self.residuals.shape[0]

    @property
    def n_series(self) -> int:
        return self.residuals.shape[1]


def _match_instrument(
    residual_input: ResidualInput,
    instrument: InstrumentData,
    instrument_offset: int
) -> pd.Series:
    panel = residual_input.panel
    series = validate_instrument(instrument)

    if residual_input.indexed and has_time_index(instrument):
        if instrument_offset:
            raise_parameter_error(
                "instrument_offset only applies to positional alignment; shift a "
                "labelled instrument before passing it",
                param_name="instrument_offset",
                param_value=instrument_offset,
                constraint="must be 0 when residuals and instrument are matched by label"
            )
        if not series.index.is_unique:
            raise_data_error(
                "instrument index contains duplicate labels",
                data_name="instrument",
                issue="duplicate index labels"
            )
        uncovered = panel.index.difference(series.index)
        if len(uncovered) > 0:
            raise_data_error(
                f"{len(uncovered)} of {panel.shape[0]} residual periods are absent from "
                f"the instrument index; mark unobserved periods with NaN instead",
                data_name="instrument",
                issue="residual periods missing from index",
                details=f"first absent labels: {list(uncovered[:5])}"
            )
        return series.reindex(panel.index)

    offset = residual_input.instrument_lag_offset + instrument_offset
    values = series.to_numpy()[offset:]
    if values.shape[0] < panel.shape[0]:
        raise InsufficientDataError(
            f"Instrument has {values.shape[0]} observations after discarding the "
            f"first {offset}, fewer than the {panel.shape[0]} residual periods",
            nobs=int(values.shape[0]),
            required=int(panel.shape[0]),
            context={"Instrument Length": series.shape[0], "Offset": offset}
        )
    return pd.Series(values[:panel.shape[0]], index=panel.index, name=series.name)


def align_sample(
    residual_input: ResidualInput,
    instrument: InstrumentData,
    instrumented_variable: VariableName,
    instrument_offset: int = 0
) -> AlignedSample:
    """
    Align residuals and instrument and drop periods with a missing instrument.

    Args:
        residual_input: Resolved residual source
        instrument: Instrument series (NaN marks a missing period)
        instrumented_variable: Name of the residual series being instrumented
        instrument_offset: Extra leading instrument observations to discard
            under positional alignment

    Returns:
        AlignedSample: Instrumented-first residuals and matching instrument;
            may have zero rows when the instrument is never observed

    Raises:
        UnknownVariableError: If the instrumented variable is not a residual series
        InsufficientDataError: If a positional instrument is shorter than the sample
        DataError: If residual periods are absent from a labelled instrument
        ParameterError: If instrument_offset is non-zero under label alignment
    """
    panel = residual_input.panel
    order = ColumnOrder.from_names(list(panel.columns), instrumented_variable)
    instrument_offset = validate_lag_order(instrument_offset, param_name="instrument_offset")

    matched = _match_instrument(residual_input, instrument, instrument_offset)
    observed = matched.notna().to_numpy()

    residuals = panel.iloc[observed, list(order.order)]
    aligned_instrument = matched[observed]
    n_missing = int((~observed).sum())

    logger.debug(
        f"Aligned sample: {residuals.shape[0]} periods, {residuals.shape[1]} series, "
        f"{n_missing} periods without instrument"
    )
    return AlignedSample(
        residuals=residuals,
        instrument=aligned_instrument,
        order=order,
        lag_order=residual_input.lag_order,
        n_missing=n_missing,
    )
