"""
alstructure.data holds the genotype matrix helpers shared by the estimators:
validation, heteroskedasticity correction and the corrected second-moment matrix.

These functions work on plain (n_snp, n_indiv) numpy or dask arrays.
"""

from ._geno import PLOIDY, as_geno_matrix, hetero_correction, corrected_gram

__all__ = ["PLOIDY", "as_geno_matrix", "hetero_correction", "corrected_gram"]
