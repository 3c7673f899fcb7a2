import numpy as np
import dask.array as da
from scipy import linalg
from scipy.sparse.linalg import eigsh, ArpackError
from typing import Union

import alstructure
from ..data import as_geno_matrix, corrected_gram
from .._types import DimensionMismatch, InitialFactors, Rowspace, SvdMethod


def _check_rank(d, n_indiv: int) -> int:
    if isinstance(d, bool) or not isinstance(d, (int, np.integer)):
        raise DimensionMismatch(f"d must be an integer, got {d!r}")
    if not 1 <= d <= n_indiv:
        raise DimensionMismatch(
            f"d must lie within [1, n_indiv={n_indiv}], got d={d}"
        )
    return int(d)


def _fix_sign(vectors: np.ndarray) -> np.ndarray:
    """Flip each eigenvector so that its largest-magnitude entry is positive"""
    idx = np.argmax(np.abs(vectors), axis=0)
    signs = np.sign(vectors[idx, np.arange(vectors.shape[1])])
    signs[signs == 0] = 1
    return vectors * signs


def top_eigen(G: np.ndarray, d: int, method: Union[str, SvdMethod] = "exact"):
    """Top-d eigenpairs of a symmetric matrix, sorted by decreasing eigenvalue

    Parameters
    ----------
    G : np.ndarray
        (n, n) symmetric matrix, may be indefinite
    d : int
        number of eigenpairs
    method : str or SvdMethod
        "exact" uses LAPACK restricted to the top-d index range,
        "truncated" uses the Lanczos solver from ARPACK

    Returns
    -------
    Rowspace
    """
    method = SvdMethod(method)
    n = G.shape[0]
    d = _check_rank(d, n)

    values = None
    # ARPACK needs d < n
    if method == SvdMethod.TRUNCATED and d < n - 1:
        v0 = np.ones(n) / np.sqrt(n)
        try:
            values, vectors = eigsh(G, k=d, which="LA", v0=v0)
        except ArpackError as e:
            # e.g. G v0 = 0 or no convergence
            alstructure.logger.warning(
                f"truncated eigensolver failed ({e}), using the exact solver"
            )
    if values is None:
        values, vectors = linalg.eigh(G, subset_by_index=[n - d, n - 1])

    order = np.argsort(values)[::-1]
    return Rowspace(vectors=_fix_sign(vectors[:, order]), values=values[order])


def estimate_subspace(
    X: Union[np.ndarray, da.Array], d: int, method: Union[str, SvdMethod] = "exact"
) -> Rowspace:
    """Latent subspace estimation of the rowspace of Q

    Returns the top `d` eigenpairs of

        G = 1/m X^T X - D

    where D is the diagonal heteroskedasticity correction. The span of the top
    `d` eigenvectors of G converges to the span of the rows of Q.

    Parameters
    ----------
    X : np.ndarray or da.Array
        (n_snp, n_indiv) genotype matrix
    d : int
        dimension of the subspace, 1 <= d <= n_indiv. Use d = n_indiv to
        obtain the full spectrum.
    method : str or SvdMethod
        "exact" (default) or "truncated"

    Returns
    -------
    Rowspace
        vectors: (n_indiv, d) orthonormal eigenvectors
        values: (d,) eigenvalues in decreasing order
    """
    X = as_geno_matrix(X)
    method = SvdMethod(method)
    d = _check_rank(d, X.shape[1])
    return top_eigen(corrected_gram(X), d, method)


def estimate_initial_factors(
    X: Union[np.ndarray, da.Array], d: int, method: Union[str, SvdMethod] = "exact"
) -> InitialFactors:
    """Estimate the individual-specific allele frequency matrix F

    F_hat = 1/2 X V V^T with V the top-d eigenvectors of G, truncated to
    [0, 1].

    Parameters
    ----------
    X : np.ndarray or da.Array
        (n_snp, n_indiv) genotype matrix
    d : int
        rank of F, can be estimated with `compute_dimension`
    method : str or SvdMethod
        "exact" (default) or "truncated"

    Returns
    -------
    InitialFactors
        F_hat: (n_snp, n_indiv) matrix with entries in [0, 1]
        rowspace: the estimated latent subspace

    References
    ----------
    Cabreros, I., and J. D. Storey. 2017. A Nonparametric Estimator of Population
    Structure Unifying Admixture Models and Principal Components Analysis.
    bioRxiv 240812.
    """
    X = as_geno_matrix(X)
    rowspace = estimate_subspace(X, d, method)
    V = rowspace.vectors

    XV = X @ V
    if isinstance(XV, da.Array):
        XV = XV.compute()
    F_hat = 0.5 * np.dot(XV, V.T)
    # simple truncation of out-of-bound values
    np.clip(F_hat, 0.0, 1.0, out=F_hat)

    alstructure.logger.info(
        f"Estimated F with rank d={rowspace.d}, "
        f"top eigenvalues: {np.round(rowspace.values[:5], 3)}"
    )
    return InitialFactors(F_hat=F_hat, rowspace=rowspace)
