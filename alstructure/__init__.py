from ._logging import logger
from ._types import (
    AlstructureError,
    DimensionMismatch,
    InvalidDimensionConfig,
    SvdMethod,
    OrderMethod,
    Status,
    Diagnostic,
    DiagnosticKind,
    Rowspace,
    DimensionEstimate,
    InitialFactors,
    AlstructureResult,
)
from . import data, estimate, factor, simulate, utils
from .estimate import compute_dimension, estimate_subspace, estimate_initial_factors
from .factor import run_alstructure
from .version import __version__

__all__ = [
    "data",
    "estimate",
    "factor",
    "simulate",
    "utils",
    "compute_dimension",
    "estimate_subspace",
    "estimate_initial_factors",
    "run_alstructure",
    "AlstructureError",
    "DimensionMismatch",
    "InvalidDimensionConfig",
    "SvdMethod",
    "OrderMethod",
    "Status",
    "Diagnostic",
    "DiagnosticKind",
    "Rowspace",
    "DimensionEstimate",
    "InitialFactors",
    "AlstructureResult",
]
