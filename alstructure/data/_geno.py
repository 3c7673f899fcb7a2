import numpy as np
import dask.array as da
from tqdm import tqdm
from typing import Union

import alstructure
from .._types import DimensionMismatch

# number of allele copies per individual at each SNP
PLOIDY = 2


def as_geno_matrix(X: Union[np.ndarray, da.Array]) -> Union[np.ndarray, da.Array]:
    """Check that `X` is a usable (n_snp, n_indiv) genotype matrix

    numpy input is converted to float64; dask input is returned as-is and only
    its shape is checked here, the values are checked chunk by chunk when the
    matrix is read.

    Parameters
    ----------
    X : np.ndarray or da.Array
        (n_snp, n_indiv) genotype matrix with entries in [0, PLOIDY]

    Returns
    -------
    np.ndarray or da.Array
        the validated genotype matrix
    """
    if not isinstance(X, da.Array):
        X = np.asarray(X, dtype=np.float64)
    if X.ndim != 2:
        raise DimensionMismatch(
            f"genotype matrix must be 2-dimensional (n_snp, n_indiv), got ndim={X.ndim}"
        )
    n_snp, n_indiv = X.shape
    if n_snp < 2 or n_indiv < 2:
        raise DimensionMismatch(
            f"genotype matrix needs at least 2 SNPs and 2 individuals, got {X.shape}"
        )
    if isinstance(X, np.ndarray):
        _check_geno_values(X)
    return X


def _check_geno_values(X: np.ndarray):
    if not np.all(np.isfinite(X)):
        raise ValueError(
            "genotype matrix contains missing or infinite values, impute them first"
        )
    if X.min() < 0 or X.max() > PLOIDY:
        raise ValueError(f"genotype values must lie within [0, {PLOIDY}]")


def _snp_chunks(X: Union[np.ndarray, da.Array]):
    """Iterate over SNP blocks of X as numpy arrays"""
    if isinstance(X, da.Array):
        indices = np.insert(np.cumsum(X.chunks[0]), 0, 0)
        for i in tqdm(range(len(indices) - 1), desc="alstructure.data"):
            start, stop = indices[i], indices[i + 1]
            chunk = np.asarray(X[start:stop, :].compute(), dtype=np.float64)
            _check_geno_values(chunk)
            yield chunk
    else:
        yield X


def _variance_sum(chunk: np.ndarray) -> np.ndarray:
    """Per-individual sum over SNPs of v(x) = (s * x - x^2) / (s - 1), s = PLOIDY"""
    return ((PLOIDY * chunk - chunk ** 2) / (PLOIDY - 1)).sum(axis=0)


def hetero_correction(X: Union[np.ndarray, da.Array]) -> np.ndarray:
    """Diagonal correction matrix D removing the binomial sampling variance

    For individual i, the i-th diagonal entry is the average over SNPs of

        v(x) = (s * x - x^2) / (s - 1),  s = PLOIDY

    which is unbiased for the variance of a Binomial(s, f) draw x.

    Parameters
    ----------
    X : np.ndarray or da.Array
        (n_snp, n_indiv) genotype matrix

    Returns
    -------
    np.ndarray
        (n_indiv, n_indiv) diagonal matrix D

    References
    ----------
    Chen, X., and J. D. Storey. 2015. Consistent Estimation of Low-Dimensional
    Latent Structure in High-Dimensional Data. arXiv:1510.03497.
    """
    X = as_geno_matrix(X)
    n_snp = X.shape[0]
    delta = 0
    for chunk in _snp_chunks(X):
        delta += _variance_sum(chunk)
    return np.diag(delta / n_snp)


def corrected_gram(X: Union[np.ndarray, da.Array]) -> np.ndarray:
    """Compute G = 1/m X^T X - D

    The top eigenvectors of G span the same space as the rows of the admixture
    proportion matrix Q. With dask input, the matrix is read sequentially along
    the SNP dimension.

    Parameters
    ----------
    X : np.ndarray or da.Array
        (n_snp, n_indiv) genotype matrix

    Returns
    -------
    np.ndarray
        (n_indiv, n_indiv) symmetric matrix G
    """
    X = as_geno_matrix(X)
    n_snp, n_indiv = X.shape
    alstructure.logger.info(
        f"Calculating corrected second-moment matrix with {n_snp} SNPs and {n_indiv} individuals"
    )
    mat = np.zeros((n_indiv, n_indiv))
    delta = np.zeros(n_indiv)
    for chunk in _snp_chunks(X):
        mat += np.dot(chunk.T, chunk)
        delta += _variance_sum(chunk)
    mat = (mat - np.diag(delta)) / n_snp
    # remove round-off asymmetry
    return (mat + mat.T) / 2
