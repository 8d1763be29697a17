# proxysvar/models/__init__.py
"""
proxysvar models module.

The four identification stages and the entry points that chain them:

    alignment          residual/instrument alignment and input resolution
    covariance         degrees-of-freedom corrected covariance partition
    relative_response  two-stage least squares relative responses
    scale              closed-form recovery of the shock scale
    identification     identify_shock / estimate_external_instrument
"""

import logging

# Set up module-level logger
logger = logging.getLogger("proxysvar.models")

from .alignment import (
    AlignedSample,
    ColumnOrder,
    FittedModelHandle,
    RawResiduals,
    align_sample,
    resolve_input,
)
from .covariance import CovariancePartition, partition_covariance
from .relative_response import (
    FirstStageDiagnostics,
    RelativeResponseEstimate,
    estimate_relative_responses,
    first_stage,
)
from .scale import ScaleRecovery, compute_q_matrix, recover_scale
from .identification import (
    ExternalInstrumentResult,
    ExternalInstrumentSVAR,
    estimate_external_instrument,
    identify_shock,
)

__all__ = [
    'AlignedSample',
    'ColumnOrder',
    'FittedModelHandle',
    'RawResiduals',
    'align_sample',
    'resolve_input',
    'CovariancePartition',
    'partition_covariance',
    'FirstStageDiagnostics',
    'RelativeResponseEstimate',
    'estimate_relative_responses',
    'first_stage',
    'ScaleRecovery',
    'compute_q_matrix',
    'recover_scale',
    'ExternalInstrumentResult',
    'ExternalInstrumentSVAR',
    'estimate_external_instrument',
    'identify_shock',
]
