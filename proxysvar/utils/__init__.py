"""
proxysvar utilities module.

Matrix helpers shared by the identification stages.
"""

import logging

# Set up module-level logger
logger = logging.getLogger("proxysvar.utils")

from .matrix_ops import ensure_symmetric, singular_values

__all__ = [
    'ensure_symmetric',
    'singular_values',
]
