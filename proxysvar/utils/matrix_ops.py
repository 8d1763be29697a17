# proxysvar/utils/matrix_ops.py
"""
Matrix Operations Module

Small dense-matrix helpers used by the covariance partition and the scale
recovery.

Functions:
    ensure_symmetric: Make a square matrix exactly symmetric
    singular_values: Singular values of a matrix, largest first
"""

import logging

import numpy as np
from scipy import linalg

from proxysvar.core.exceptions import raise_dimension_error
from proxysvar.core.types import Matrix, Vector

# Set up module-level logger
logger = logging.getLogger("proxysvar.utils.matrix_ops")


def ensure_symmetric(matrix: Matrix) -> Matrix:
    """
    Make a matrix exactly symmetric by averaging it with its transpose.

    Floating-point addition is commutative, so ``(A + A.T) / 2`` is symmetric
    bit for bit even when ``A`` came out of a BLAS product that is not.

    Args:
        matrix: Square matrix

    Returns:
        Symmetric matrix

    Raises:
        DimensionError: If the input matrix is not square

    Examples:
        >>> import numpy as np
        >>> from proxysvar.utils.matrix_ops import ensure_symmetric
        >>> A = np.array([[1, 2.000001], [2, 3]])
        >>> ensure_symmetric(A)
        array([[1.       , 2.0000005],
               [2.0000005, 3.       ]])
    """
    matrix = np.asarray(matrix, dtype=float)

    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        raise_dimension_error(
            "Input must be a square matrix",
            array_name="matrix",
            expected_shape="(n, n)",
            actual_shape=matrix.shape
        )

    return (matrix + matrix.T) / 2


def singular_values(matrix: Matrix) -> Vector:
    """Singular values of ``matrix`` in descending order."""
    matrix = np.asarray(matrix, dtype=float)
    if matrix.size == 0:
        return np.empty(0)
    return linalg.svdvals(matrix)
