"""
Alternating least squares factorization of the individual-specific allele
frequencies F into ancestral allele frequencies P and admixture proportions Q.
"""

from ._als import run_alstructure, factor_F
from ._order import order_components, eigen_r2
from ._simplex import project_simplex, successive_projection

__all__ = [
    "run_alstructure",
    "factor_F",
    "order_components",
    "eigen_r2",
    "project_simplex",
    "successive_projection",
]
