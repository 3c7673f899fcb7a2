"""
Spectral estimators of the latent structure: the rowspace of Q, its dimension
and the individual-specific allele frequencies F.
"""

from ._subspace import estimate_subspace, estimate_initial_factors, top_eigen
from ._dimension import (
    compute_dimension,
    compute_dimension_report,
    GRID_LENGTH,
    PLATEAU_LENGTH,
    MIN_RANK,
)

__all__ = [
    "estimate_subspace",
    "estimate_initial_factors",
    "top_eigen",
    "compute_dimension",
    "compute_dimension_report",
    "GRID_LENGTH",
    "PLATEAU_LENGTH",
    "MIN_RANK",
]
