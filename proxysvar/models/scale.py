# proxysvar/models/scale.py
"""
Scale recovery for the identified shock.

With beta the relative responses of the k-1 non-instrumented series, the
partitioned covariance must satisfy

    Q        = (beta * gamma_11) beta' - (gamma_21 beta' + beta gamma_21') + gamma_22
    s12s12   = (gamma_21 - beta * gamma_11)' Q^{-1} (gamma_21 - beta * gamma_11)
    s11^2    = gamma_11 - s12s12

``sqrt(s11^2)`` is the standard deviation of the identified shock's impact on
the instrumented variable. A negative ``s11^2`` means the instrument is weak
or the proxy assumption is violated; it is surfaced as an error (or, under
the ``"warn"`` policy, a warning and a NaN scale), never as a complex number.
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np
from scipy import linalg

from proxysvar.core.config import NumericalConfig, get_numerical_config
from proxysvar.core.exceptions import (
    DimensionError, NegativeVarianceError, SingularCovarianceError, warn_negative_variance
)
from proxysvar.core.types import Matrix, Vector
from proxysvar.models.covariance import CovariancePartition
from proxysvar.utils.matrix_ops import ensure_symmetric, singular_values

# Set up module-level logger
logger = logging.getLogger("proxysvar.models.scale")


@dataclass(frozen=True)
class ScaleRecovery:
    """
    Intermediate and final quantities of the scale recovery.

    Attributes:
        q_matrix: The (k-1) x (k-1) matrix Q
        s12s12: Quadratic form (gamma_21 - beta*gamma_11)' Q^{-1} (...)
        s11_squared: gamma_11 - s12s12
        scale: sqrt(s11_squared), NaN when s11_squared < 0 under the "warn" policy
        condition_number: Condition number of Q (1.0 when k == 1)
    """
    q_matrix: Matrix
    s12s12: float
    s11_squared: float
    scale: float
    condition_number: float


def compute_q_matrix(partition: CovariancePartition, beta: Vector) -> Matrix:
    """Form Q from the covariance partition and the relative responses."""
    b = np.asarray(beta, dtype=float).reshape(-1, 1)
    g21 = partition.gamma_21.reshape(-1, 1)
    if b.shape != g21.shape:
        raise DimensionError(
            "beta must have one entry per non-instrumented series",
            array_name="beta",
            expected_shape=g21.shape,
            actual_shape=b.shape
        )
    q = (b * partition.gamma_11) @ b.T - (g21 @ b.T + b @ g21.T) + partition.gamma_22
    return ensure_symmetric(q)


def _check_invertible(q: Matrix, partition: CovariancePartition, tolerance: float) -> float:
    if not np.all(np.isfinite(q)):
        raise SingularCovarianceError(
            "Q contains non-finite values and cannot be inverted",
            condition_number=float("inf"),
            shape=q.shape
        )

    sv = singular_values(q)
    condition_number = float(sv[0] / sv[-1]) if sv[-1] > 0 else float("inf")
    reference = float(np.max(np.abs(np.diag(partition.gamma_22))))
    if reference == 0.0 or sv[-1] <= tolerance * reference:
        raise SingularCovarianceError(
            "Q is singular or nearly singular: the instrument is too weak or the "
            "non-instrumented series are collinear",
            condition_number=condition_number,
            shape=q.shape,
            details=f"smallest singular value {sv[-1]:.3g}, reference scale {reference:.3g}"
        )
    return condition_number


def recover_scale(
    partition: CovariancePartition,
    beta: Vector,
    config: Optional[NumericalConfig] = None
) -> ScaleRecovery:
    """
    Solve for the variance of the identified shock's impact.

    Args:
        partition: Covariance partition of the aligned residuals
        beta: Relative responses of the k-1 non-instrumented series
        config: Numerical settings (defaults to the global configuration)

    Returns:
        ScaleRecovery: Q, s12s12, s11_squared and the scale

    Raises:
        SingularCovarianceError: If Q cannot be inverted
        NegativeVarianceError: If s11_squared < 0 and the policy is "raise"
    """
    config = config or get_numerical_config()
    gamma_11 = partition.gamma_11

    if partition.n_series == 1:
        # No rest-of-system block: the shock carries the whole residual variance
        q = np.empty((0, 0))
        s12s12 = 0.0
        condition_number = 1.0
    else:
        q = compute_q_matrix(partition, beta)
        condition_number = _check_invertible(q, partition, config.singular_tolerance)
        d = partition.gamma_21 - np.asarray(beta, dtype=float) * gamma_11
        s12s12 = float(d @ linalg.solve(q, d, assume_a="sym"))

    s11_squared = gamma_11 - s12s12
    logger.debug(
        f"Scale recovery: gamma_11={gamma_11:.6g}, s12s12={s12s12:.6g}, "
        f"s11^2={s11_squared:.6g}, cond(Q)={condition_number:.3g}"
    )

    if s11_squared < 0:
        if config.negative_variance_policy == "raise":
            raise NegativeVarianceError(
                s11_squared,
                details=f"gamma_11 = {gamma_11:.6g}, s12s12 = {s12s12:.6g}"
            )
        logger.warning(f"Negative recovered shock variance s11^2={s11_squared:.6g}")
        warn_negative_variance(s11_squared)
        scale = float("nan")
    else:
        scale = float(np.sqrt(s11_squared))

    return ScaleRecovery(
        q_matrix=q,
        s12s12=s12s12,
        s11_squared=s11_squared,
        scale=scale,
        condition_number=condition_number,
    )
