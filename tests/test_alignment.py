'''
Tests for input resolution and sample alignment.
'''

import numpy as np
import pandas as pd
import pytest

from proxysvar.core.exceptions import (
    DataError, InsufficientDataError, ParameterError, UnknownVariableError
)
from proxysvar.core.validation import has_time_index
from proxysvar.models.alignment import (
    ColumnOrder, FittedModelHandle, RawResiduals, align_sample, resolve_input
)


class _GenericFittedVAR:
    """Minimal fitted VAR exposing residuals and a lag order."""

    def __init__(self, residuals, p, var_names=None):
        self.residuals = residuals
        self.p = p
        self.var_names = var_names


class TestResolveInput:
    """Tests for resolving residual sources into input variants."""

    def test_dataframe_is_raw_residuals(self, proxy_system):
        resolved = resolve_input(proxy_system["residuals"], lag_order=1)
        assert isinstance(resolved, RawResiduals)
        assert resolved.lag_order == 1
        assert resolved.indexed is True
        assert list(resolved.panel.columns) == ["rate", "output", "prices"]

    def test_array_gets_generated_names(self, rng):
        resolved = resolve_input(rng.standard_normal((20, 3)), lag_order=0)
        assert list(resolved.panel.columns) == ["y1", "y2", "y3"]
        assert resolved.indexed is False

    def test_array_with_names(self, rng):
        resolved = resolve_input(rng.standard_normal((20, 2)), lag_order=2, names=["a", "b"])
        assert list(resolved.panel.columns) == ["a", "b"]

    def test_raw_residuals_require_lag_order(self, proxy_system):
        with pytest.raises(ParameterError):
            resolve_input(proxy_system["residuals"])

    def test_negative_lag_order(self, proxy_system):
        with pytest.raises(ParameterError):
            resolve_input(proxy_system["residuals"], lag_order=-1)

    def test_non_integer_lag_order(self, proxy_system):
        with pytest.raises(ParameterError):
            resolve_input(proxy_system["residuals"], lag_order=1.5)

    def test_statsmodels_results(self, fitted_var):
        resolved = resolve_input(fitted_var["results"])
        assert isinstance(resolved, FittedModelHandle)
        assert resolved.lag_order == 1
        assert resolved.instrument_lag_offset == 1
        assert resolved.panel.shape == (499, 3)

    def test_statsmodels_lag_order_mismatch(self, fitted_var):
        with pytest.raises(ParameterError):
            resolve_input(fitted_var["results"], lag_order=2)

    def test_generic_fitted_var(self, rng):
        model = _GenericFittedVAR(rng.standard_normal((30, 2)), p=3, var_names=["x", "z"])
        resolved = resolve_input(model)
        assert isinstance(resolved, FittedModelHandle)
        assert resolved.lag_order == 3
        assert list(resolved.panel.columns) == ["x", "z"]

    def test_unsupported_input(self):
        with pytest.raises(TypeError):
            resolve_input([[1.0, 2.0], [3.0, 4.0]], lag_order=1)

    def test_residuals_with_nan(self, proxy_system):
        residuals = proxy_system["residuals"].copy()
        residuals.iloc[3, 1] = np.nan
        with pytest.raises(DataError):
            resolve_input(residuals, lag_order=1)


class TestColumnOrder:
    """Tests for the instrumented-first permutation."""

    def test_instrumented_first(self):
        order = ColumnOrder.from_names(["a", "b", "c", "d"], "c")
        assert order.ordered_names == ("c", "a", "b", "d")
        assert order.order == (2, 0, 1, 3)

    def test_restore_inverts_order(self):
        order = ColumnOrder.from_names(["a", "b", "c", "d"], "c")
        internal = np.array([1.0, 10.0, 20.0, 40.0])
        restored = order.restore(internal)
        assert restored.to_dict() == {"a": 10.0, "b": 20.0, "c": 1.0, "d": 40.0}

    def test_unknown_variable(self):
        with pytest.raises(UnknownVariableError) as excinfo:
            ColumnOrder.from_names(["a", "b"], "gs1")
        assert excinfo.value.requested == "gs1"
        assert excinfo.value.available == ["a", "b"]
        assert "gs1" in str(excinfo.value)
        assert "'a'" in str(excinfo.value)


class TestAlignSample:
    """Tests for matching the instrument to the residual sample."""

    def test_label_alignment(self, proxy_system):
        resolved = resolve_input(proxy_system["residuals"], lag_order=1)
        sample = align_sample(resolved, proxy_system["instrument"], "output")
        assert sample.nobs == proxy_system["T"]
        assert sample.n_missing == 0
        assert list(sample.residuals.columns) == ["output", "rate", "prices"]
        assert sample.instrument.index.equals(sample.residuals.index)

    def test_missing_instrument_rows_dropped(self, proxy_system):
        instrument = proxy_system["instrument"].copy()
        instrument.iloc[:50] = np.nan
        resolved = resolve_input(proxy_system["residuals"], lag_order=1)
        sample = align_sample(resolved, instrument, "rate")
        assert sample.nobs == proxy_system["T"] - 50
        assert sample.n_missing == 50
        assert not sample.instrument.isna().any()
        assert sample.residuals.index.equals(proxy_system["residuals"].index[50:])

    def test_label_alignment_ignores_extra_periods(self, proxy_system):
        instrument = proxy_system["instrument"]
        extra_index = pd.date_range(instrument.index[-1], periods=13, freq="MS")[1:]
        extended = pd.concat([instrument, pd.Series(np.nan, index=extra_index)])
        resolved = resolve_input(proxy_system["residuals"], lag_order=1)
        sample = align_sample(resolved, extended, "rate")
        assert sample.nobs == proxy_system["T"]

    def test_positional_alignment(self, proxy_system):
        residuals = proxy_system["residuals"].to_numpy()
        instrument = proxy_system["instrument"].to_numpy()
        resolved = resolve_input(residuals, lag_order=1, names=["rate", "output", "prices"])
        sample = align_sample(resolved, instrument, "rate")
        np.testing.assert_array_equal(sample.instrument.to_numpy(), instrument)

    def test_positional_offset(self, proxy_system):
        residuals = proxy_system["residuals"].to_numpy()
        instrument = np.concatenate([[99.0, 98.0], proxy_system["instrument"].to_numpy()])
        resolved = resolve_input(residuals, lag_order=1)
        sample = align_sample(resolved, instrument, "y1", instrument_offset=2)
        np.testing.assert_array_equal(sample.instrument.to_numpy(),
                                      proxy_system["instrument"].to_numpy())

    def test_positional_instrument_too_short(self, proxy_system):
        resolved = resolve_input(proxy_system["residuals"].to_numpy(), lag_order=1)
        with pytest.raises(InsufficientDataError):
            align_sample(resolved, np.ones(proxy_system["T"] - 1), "y1")

    def test_fitted_var_discards_leading_instrument(self, fitted_var):
        resolved = resolve_input(fitted_var["results"])
        instrument = fitted_var["instrument"].to_numpy()
        sample = align_sample(resolved, instrument, "rate")
        assert sample.nobs == instrument.shape[0] - 1
        np.testing.assert_array_equal(sample.instrument.to_numpy(), instrument[1:])

    def test_all_missing_gives_empty_sample(self, proxy_system):
        instrument = pd.Series(np.nan, index=proxy_system["instrument"].index)
        resolved = resolve_input(proxy_system["residuals"], lag_order=1)
        sample = align_sample(resolved, instrument, "rate")
        assert sample.nobs == 0

    def test_unknown_instrumented_variable(self, proxy_system):
        resolved = resolve_input(proxy_system["residuals"], lag_order=1)
        with pytest.raises(UnknownVariableError):
            align_sample(resolved, proxy_system["instrument"], "gs1")

    def test_duplicate_instrument_labels(self, proxy_system):
        instrument = proxy_system["instrument"]
        duplicated = pd.concat([instrument, instrument.iloc[:1]])
        resolved = resolve_input(proxy_system["residuals"], lag_order=1)
        with pytest.raises(DataError):
            align_sample(resolved, duplicated, "rate")

    def test_range_index_aligns_by_position(self, proxy_system):
        T = proxy_system["T"]
        residuals = proxy_system["residuals"].set_axis(pd.RangeIndex(3, 3 + T))
        instrument = pd.Series(proxy_system["instrument"].to_numpy())
        resolved = resolve_input(residuals, lag_order=3)
        sample = align_sample(resolved, instrument, "rate")

        assert resolved.indexed is False
        assert sample.nobs == T
        assert sample.n_missing == 0
        np.testing.assert_array_equal(sample.instrument.to_numpy(), instrument.to_numpy())

    def test_range_index_instrument_with_dated_residuals(self, proxy_system):
        instrument = pd.Series(proxy_system["instrument"].to_numpy())
        resolved = resolve_input(proxy_system["residuals"], lag_order=1)
        sample = align_sample(resolved, instrument, "rate")
        assert sample.nobs == proxy_system["T"]
        assert sample.instrument.index.equals(proxy_system["residuals"].index)

    def test_residual_periods_absent_from_instrument(self, proxy_system):
        resolved = resolve_input(proxy_system["residuals"], lag_order=1)
        with pytest.raises(DataError) as excinfo:
            align_sample(resolved, proxy_system["instrument"].iloc[5:], "rate")
        assert excinfo.value.issue == "residual periods missing from index"

    def test_offset_rejected_under_label_alignment(self, proxy_system):
        resolved = resolve_input(proxy_system["residuals"], lag_order=1)
        with pytest.raises(ParameterError):
            align_sample(resolved, proxy_system["instrument"], "rate", instrument_offset=2)


class TestHasTimeIndex:
    """Only non-default pandas indexes count as labels."""

    def test_datetime_index(self, proxy_system):
        assert has_time_index(proxy_system["instrument"])
        assert has_time_index(proxy_system["residuals"])

    def test_integer_labels(self):
        assert has_time_index(pd.Series([1.0, 2.0], index=pd.Index([1990, 1991])))

    def test_range_index(self):
        assert not has_time_index(pd.Series([1.0, 2.0, 3.0]))
        assert not has_time_index(pd.DataFrame({"a": [1.0, 2.0]}, index=pd.RangeIndex(4, 6)))

    def test_arrays(self):
        assert not has_time_index(np.ones(3))
        assert not has_time_index([1.0, 2.0])
