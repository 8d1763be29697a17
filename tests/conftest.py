'''
Pytest configuration and fixtures for the proxysvar test suite.

Provides seeded random generators and simulated proxy-SVAR systems whose
structural impact matrix is known, so that identified impact columns can be
compared against the generating coefficients.
'''

from typing import Dict, Tuple

import numpy as np
import pandas as pd
import pytest

from proxysvar.core.config import reset_config


# Impact matrix of the simulated three-variable system; column 0 belongs to
# the instrumented shock.
IMPACT_MATRIX = np.array([
    [0.8, 0.3, -0.2],
    [0.5, 1.0, 0.4],
    [-0.6, 0.2, 0.9],
])

VARIABLE_NAMES = ["rate", "output", "prices"]

# Coefficients of the VAR(1) used for the fitted-model tests
VAR1_COEFFICIENTS = np.array([
    [0.5, 0.1, 0.0],
    [0.1, 0.4, 0.1],
    [0.0, 0.2, 0.3],
])


def orthonormal_shocks(rng: np.random.Generator, T: int, k: int) -> np.ndarray:
    """Draw T x k shocks with zero sample mean and identity sample covariance."""
    e = rng.standard_normal((T, k))
    e = e - e.mean(axis=0)
    chol = np.linalg.cholesky(e.T @ e / T)
    return e @ np.linalg.inv(chol).T


def simulate_var1(rng: np.random.Generator, T: int) -> Tuple[np.ndarray, np.ndarray]:
    """Simulate a VAR(1) driven by IMPACT_MATRIX from y[0] = 0; returns (levels, shocks).

    Shocks over the estimation sample t = 1..T-1 are orthonormal in sample; the
    shock at t = 0 is zero.
    """
    k = IMPACT_MATRIX.shape[0]
    e = np.zeros((T, k))
    e[1:] = orthonormal_shocks(rng, T - 1, k)
    y = np.zeros((T, k))
    for t in range(1, T):
        y[t] = VAR1_COEFFICIENTS @ y[t - 1] + IMPACT_MATRIX @ e[t]
    return y, e


@pytest.fixture(autouse=True)
def _reset_configuration():
    """Restore default configuration after every test."""
    yield
    reset_config()


@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def true_relative_response() -> pd.Series:
    """Impact column of the instrumented shock, normalised on 'rate'."""
    column = IMPACT_MATRIX[:, 0] / IMPACT_MATRIX[0, 0]
    return pd.Series(column, index=VARIABLE_NAMES)


@pytest.fixture
def proxy_system(rng: np.random.Generator) -> Dict[str, object]:
    """Three-variable residual panel, T=200, with an instrument proportional to shock 0."""
    T = 200
    shocks = orthonormal_shocks(rng, T, 3)
    index = pd.date_range("2000-01-01", periods=T, freq="MS")
    residuals = pd.DataFrame(shocks @ IMPACT_MATRIX.T, index=index, columns=VARIABLE_NAMES)
    instrument = pd.Series(0.5 * shocks[:, 0], index=index, name="proxy")
    return {
        "residuals": residuals,
        "instrument": instrument,
        "shocks": shocks,
        "lag_order": 1,
        "T": T,
    }


@pytest.fixture
def fitted_var(rng: np.random.Generator) -> Dict[str, object]:
    """statsmodels VAR(1) fitted to a simulated system, with its instrument."""
    from statsmodels.tsa.api import VAR

    T = 500
    levels, shocks = simulate_var1(rng, T)
    index = pd.date_range("1980-01-01", periods=T, freq="MS")
    data = pd.DataFrame(levels, index=index, columns=VARIABLE_NAMES)
    results = VAR(data).fit(1)
    instrument = pd.Series(shocks[:, 0], index=index, name="proxy")
    return {"results": results, "data": data, "instrument": instrument}
