import numpy as np
import dask.array as da
from math import ceil
from scipy import linalg
from typing import List, Union

import alstructure
from ..data import as_geno_matrix, corrected_gram
from .._types import Diagnostic, DiagnosticKind, DimensionEstimate

# number of grid points for the eigenvalue threshold
GRID_LENGTH = 1000
# number of consecutive identical estimates that form a plateau
PLATEAU_LENGTH = ceil(GRID_LENGTH / 30)
# the admixture model needs at least two ancestral populations
MIN_RANK = 2


def _plateau_search(eigenvalues: np.ndarray, n_snp: int, n_indiv: int):
    """Scan thresholds a * m^(-1/3) for a in [1, n] and find the first plateau
    in the number of eigenvalues exceeding the threshold

    Returns
    -------
    (d_raw, run_length, found)
    """
    grid = np.linspace(1, n_indiv, GRID_LENGTH)
    thresholds = grid * n_snp ** (-1 / 3)
    counts = (eigenvalues[None, :] > thresholds[:, None]).sum(axis=1)

    run_length = 0
    d_prev = None
    for d_new in counts:
        if d_new == d_prev:
            run_length += 1
        else:
            run_length = 1
        d_prev = d_new
        if run_length >= PLATEAU_LENGTH:
            return int(d_new), run_length, True
    return int(d_prev), run_length, False


def compute_dimension_report(X: Union[np.ndarray, da.Array]) -> DimensionEstimate:
    """Estimate the dimension of the rowspace of Q, with diagnostics

    The estimate is the number of eigenvalues of G = 1/m X^T X - D exceeding the
    threshold a * m^(-1/3), where `a` is chosen as the start of the first
    stable stretch (plateau) of this count along a grid of `GRID_LENGTH` values
    of `a` spanning [1, n_indiv].

    Parameters
    ----------
    X : np.ndarray or da.Array
        (n_snp, n_indiv) genotype matrix

    Returns
    -------
    DimensionEstimate
        d_hat is always >= 2. `diagnostics` contains UnreliableEstimate when
        no plateau is found, and MinimumDimensionEnforced when the raw
        estimate was 1.

    References
    ----------
    Leek, J. T. 2011. Asymptotic conditional singular value decomposition for
    high-dimensional genomic data. Biometrics 67 (2): 344-52.
    """
    X = as_geno_matrix(X)
    n_snp, n_indiv = X.shape
    eigenvalues = linalg.eigvalsh(corrected_gram(X))[::-1]

    d_raw, run_length, found = _plateau_search(eigenvalues, n_snp, n_indiv)

    diagnostics: List[Diagnostic] = []
    if not found:
        diagnostics.append(
            Diagnostic(
                DiagnosticKind.UNRELIABLE_ESTIMATE,
                f"estimated d unreliable: no plateau of length {PLATEAU_LENGTH} found, "
                f"returning the last estimate d={d_raw}",
            )
        )
    d_hat = d_raw
    if d_raw < MIN_RANK:
        diagnostics.append(
            Diagnostic(
                DiagnosticKind.MINIMUM_DIMENSION_ENFORCED,
                f"d = {d_raw} estimated: a minimum of d = {MIN_RANK} required",
            )
        )
        d_hat = MIN_RANK
    for diag in diagnostics:
        alstructure.logger.warning(str(diag))

    alstructure.logger.info(f"Estimated latent dimension d_hat={d_hat}")
    return DimensionEstimate(
        d_hat=d_hat,
        d_raw=d_raw,
        plateau_length=run_length,
        eigenvalues=eigenvalues,
        diagnostics=tuple(diagnostics),
    )


def compute_dimension(X: Union[np.ndarray, da.Array]) -> int:
    """Estimate the number of ancestral populations d

    See `compute_dimension_report` for details; advisory diagnostics are
    logged as warnings.

    Parameters
    ----------
    X : np.ndarray or da.Array
        (n_snp, n_indiv) genotype matrix

    Returns
    -------
    int
        estimated dimension, at least 2
    """
    return compute_dimension_report(X).d_hat
