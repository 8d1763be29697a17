# proxysvar/models/covariance.py
"""
Residual covariance partition.

Computes the degrees-of-freedom corrected residual covariance

    Gamma = U'U / (T - k*p - 1)

on the aligned sample and splits it around the instrumented variable, which
sits in column 0:

    gamma_11 = Gamma[0, 0]       own variance of the instrumented variable
    gamma_21 = Gamma[1:, 0]      covariances with the other k-1 series
    gamma_22 = Gamma[1:, 1:]     covariance among the other k-1 series
"""

import logging
from dataclasses import dataclass

import numpy as np

from proxysvar.core.exceptions import DegreesOfFreedomError, InsufficientDataError
from proxysvar.core.types import CovarianceMatrix, Matrix, Vector
from proxysvar.utils.matrix_ops import ensure_symmetric

# Set up module-level logger
logger = logging.getLogger("proxysvar.models.covariance")


@dataclass(frozen=True)
class CovariancePartition:
    """
    Residual covariance split around the instrumented variable.

    Attributes:
        gamma: Full k x k covariance matrix (exactly symmetric)
        gamma_11: Variance of the instrumented variable's residual
        gamma_21: Covariances of the other series with it, length k-1
        gamma_22: Covariance matrix of the other series, (k-1) x (k-1)
        dof: Degrees of freedom T - k*p - 1 used for the scaling
    """
    gamma: CovarianceMatrix
    gamma_11: float
    gamma_21: Vector
    gamma_22: CovarianceMatrix
    dof: int

    @property
    def n_series(self) -> int:
        return self.gamma.shape[0]


def partition_covariance(residuals: Matrix, lag_order: int) -> CovariancePartition:
    """
    Compute and partition the residual covariance matrix.

    Args:
        residuals: T x k residuals with the instrumented variable in column 0
        lag_order: Lag order p of the originating VAR

    Returns:
        CovariancePartition: gamma_11, gamma_21 and gamma_22 with the full matrix

    Raises:
        InsufficientDataError: If no aligned observations remain
        DegreesOfFreedomError: If T - k*p - 1 <= 0
    """
    u = np.asarray(residuals, dtype=float)
    if u.ndim != 2 or u.shape[1] == 0:
        raise InsufficientDataError(
            "Residual matrix has no series",
            nobs=0,
            context={"Shape": u.shape}
        )
    T, k = u.shape
    if T == 0:
        raise InsufficientDataError(
            "No periods where both residuals and instrument are observed",
            nobs=0,
            required=1,
            context={"Series": k}
        )

    dof = T - k * lag_order - 1
    if dof <= 0:
        raise DegreesOfFreedomError(T, k, lag_order)

    gamma = ensure_symmetric((u.T @ u) / dof)

    logger.debug(f"Covariance partition: T={T}, k={k}, p={lag_order}, dof={dof}")
    return CovariancePartition(
        gamma=gamma,
        gamma_11=float(gamma[0, 0]),
        gamma_21=gamma[1:, 0].copy(),
        gamma_22=gamma[1:, 1:].copy(),
        dof=dof,
    )
