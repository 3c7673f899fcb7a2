import dataclasses
import numpy as np
import dask.array as da
from scipy import linalg
from tqdm import tqdm
from typing import List, Optional, Tuple, Union

import alstructure
from .._logging import log_params
from .._types import (
    AlstructureResult,
    Diagnostic,
    DiagnosticKind,
    DimensionMismatch,
    InvalidDimensionConfig,
    OrderMethod,
    Rowspace,
    Status,
    SvdMethod,
)
from ..data import as_geno_matrix
from ..estimate import compute_dimension_report, estimate_initial_factors, MIN_RANK
from ._order import order_components
from ._simplex import project_simplex, successive_projection


def _check_options(tol, max_iters):
    if not tol > 0:
        raise ValueError(f"tol must be positive, got {tol}")
    if isinstance(max_iters, bool) or not isinstance(max_iters, (int, np.integer)):
        raise ValueError(f"max_iters must be an integer, got {max_iters!r}")
    if max_iters < 1:
        raise ValueError(f"max_iters must be at least 1, got {max_iters}")


def _check_init(
    P_init, Q_init, n_snp: int, n_indiv: int, d: Optional[int]
) -> Tuple[Optional[np.ndarray], Optional[np.ndarray]]:
    """Validate a user supplied starting point, return copies"""
    if (P_init is None) != (Q_init is None):
        raise InvalidDimensionConfig(
            "P_init and Q_init must be supplied together, got only "
            + ("P_init" if Q_init is None else "Q_init")
        )
    if P_init is None:
        return None, None

    P_init = np.array(P_init, dtype=np.float64)
    Q_init = np.array(Q_init, dtype=np.float64)
    if P_init.ndim != 2 or Q_init.ndim != 2:
        raise DimensionMismatch("P_init and Q_init must be 2-dimensional")
    if P_init.shape[0] != n_snp:
        raise DimensionMismatch(
            f"P_init has {P_init.shape[0]} rows, expected n_snp={n_snp}"
        )
    if Q_init.shape[1] != n_indiv:
        raise DimensionMismatch(
            f"Q_init has {Q_init.shape[1]} columns, expected n_indiv={n_indiv}"
        )
    if P_init.shape[1] != Q_init.shape[0]:
        raise DimensionMismatch(
            f"P_init is {P_init.shape} but Q_init is {Q_init.shape}: "
            "the number of populations differs"
        )
    if d is not None and P_init.shape[1] != d:
        raise DimensionMismatch(
            f"P_init and Q_init have {P_init.shape[1]} populations but d_hat={d}"
        )
    return P_init, Q_init


def _initialize(F: np.ndarray, rowspace: Rowspace) -> Tuple[np.ndarray, np.ndarray]:
    """Deterministic starting point from the estimated rowspace

    The least admixed individuals are the vertices of the point cloud formed by
    the rows of the eigenvector matrix. Their columns of F seed P, and Q is
    the simplex-constrained least-squares fit of F on that P.
    """
    anchors = successive_projection(rowspace.vectors.T, rowspace.d)
    P = F[:, anchors].copy()
    Q = project_simplex(linalg.lstsq(P, F)[0])
    return P, Q


def _update_P(F: np.ndarray, Q: np.ndarray) -> np.ndarray:
    # Q^T P^T ~ F^T, then truncate to [0, 1]
    P = linalg.lstsq(Q.T, F.T)[0].T
    return np.clip(P, 0.0, 1.0)


def _update_Q(F: np.ndarray, P: np.ndarray) -> np.ndarray:
    return project_simplex(linalg.lstsq(P, F)[0])


def _rmse(A: np.ndarray, B: np.ndarray) -> float:
    return float(np.sqrt(np.mean((A - B) ** 2)))


def factor_F(
    F: np.ndarray,
    rowspace: Rowspace,
    tol: float = 1e-5,
    max_iters: int = 1000,
    order_method: Union[str, OrderMethod] = "ave_admixture",
    P_init: np.ndarray = None,
    Q_init: np.ndarray = None,
    verbose: bool = False,
) -> AlstructureResult:
    """Factor F ~ P Q with alternating constrained least squares

    Each iteration solves for P with Q fixed (entries truncated to [0, 1]) and
    then for Q with P fixed (columns projected onto the probability simplex).
    Iterations stop when the root mean squared change of Q drops below `tol`.

    Parameters
    ----------
    F : np.ndarray
        (n_snp, n_indiv) individual-specific allele frequencies
    rowspace : Rowspace
        estimated rowspace of Q; the number of populations is `rowspace.d`
    tol : float
        convergence tolerance on the RMSE between successive Q
    max_iters : int
        maximum number of iterations
    order_method : str or OrderMethod
        how to order the populations in the output
    P_init : np.ndarray, optional
        (n_snp, d) starting allele frequencies, must come with Q_init
    Q_init : np.ndarray, optional
        (d, n_indiv) starting admixture proportions, must come with P_init
    verbose : bool
        show a progress bar

    Returns
    -------
    AlstructureResult
    """
    _check_options(tol, max_iters)
    order_method = OrderMethod(order_method)
    n_snp, n_indiv = F.shape
    d = rowspace.d
    P_init, Q_init = _check_init(P_init, Q_init, n_snp, n_indiv, d)

    if P_init is None:
        P, Q = _initialize(F, rowspace)
    else:
        P, Q = np.clip(P_init, 0.0, 1.0), project_simplex(Q_init)

    status = Status.MAX_ITER_REACHED
    rmse = np.nan
    n_iter = 0
    for n_iter in tqdm(range(1, max_iters + 1), desc="ALS", disable=not verbose):
        P_new = _update_P(F, Q)
        Q_new = _update_Q(F, P_new)
        rmse = _rmse(Q_new, Q)
        P, Q = P_new, Q_new
        if rmse < tol:
            status = Status.CONVERGED
            break

    diagnostics: List[Diagnostic] = []
    if status == Status.CONVERGED:
        alstructure.logger.info(
            f"ALS converged after {n_iter} iterations (rmse={rmse:.3g})"
        )
    else:
        diag = Diagnostic(
            DiagnosticKind.NON_CONVERGENCE,
            f"ALS did not converge within max_iters={max_iters} "
            f"(rmse={rmse:.3g}, tol={tol:.3g})",
        )
        alstructure.logger.warning(str(diag))
        diagnostics.append(diag)

    perm = order_components(Q, rowspace, order_method)
    return AlstructureResult(
        P_hat=P[:, perm],
        Q_hat=Q[perm, :],
        rowspace=rowspace,
        status=status,
        diagnostics=tuple(diagnostics),
        n_iter=n_iter,
        rmse=rmse,
        d_hat=d,
    )


def run_alstructure(
    X: Union[np.ndarray, da.Array],
    d_hat: Optional[int] = None,
    svd_method: Union[str, SvdMethod] = "exact",
    tol: float = 1e-5,
    max_iters: int = 1000,
    order_method: Union[str, OrderMethod] = "ave_admixture",
    P_init: np.ndarray = None,
    Q_init: np.ndarray = None,
    verbose: bool = False,
) -> AlstructureResult:
    """Estimate ancestral allele frequencies P and admixture proportions Q

    The pipeline is:

    1. estimate d with `compute_dimension` unless `d_hat` is given
    2. estimate F and the rowspace of Q by latent subspace estimation
    3. factor F ~ P Q with alternating constrained least squares
    4. order the populations by `order_method`

    Parameters
    ----------
    X : np.ndarray or da.Array
        (n_snp, n_indiv) genotype matrix with entries in {0, 1, 2}
    d_hat : int, optional
        number of ancestral populations, at least 2. Estimated from X if not
        given (or taken from P_init / Q_init when they are supplied).
    svd_method : str or SvdMethod
        "exact" (default) or "truncated"
    tol : float
        convergence tolerance on the RMSE between successive Q
    max_iters : int
        maximum number of ALS iterations
    order_method : str or OrderMethod
        "ave_admixture" (default) or "var_explained"
    P_init : np.ndarray, optional
        (n_snp, d) starting allele frequencies, must come with Q_init
    Q_init : np.ndarray, optional
        (d, n_indiv) starting admixture proportions, must come with P_init
    verbose : bool
        show a progress bar over the ALS iterations

    Returns
    -------
    AlstructureResult
        P_hat, Q_hat, rowspace, status and advisory diagnostics

    Raises
    ------
    InvalidDimensionConfig
        only one of P_init / Q_init given, or d_hat < 2
    DimensionMismatch
        shapes of X, d_hat, P_init and Q_init are inconsistent

    References
    ----------
    Cabreros, I., and J. D. Storey. 2017. A Nonparametric Estimator of Population
    Structure Unifying Admixture Models and Principal Components Analysis.
    bioRxiv 240812.
    """
    # all argument checks come before any numeric work
    if (P_init is None) != (Q_init is None):
        raise InvalidDimensionConfig(
            "P_init and Q_init must be supplied together, got only "
            + ("P_init" if Q_init is None else "Q_init")
        )
    if d_hat is not None:
        if isinstance(d_hat, bool) or not isinstance(d_hat, (int, np.integer)):
            raise InvalidDimensionConfig(f"d_hat must be an integer, got {d_hat!r}")
        if d_hat < MIN_RANK:
            raise InvalidDimensionConfig(
                f"d_hat must be at least {MIN_RANK}, got d_hat={d_hat}"
            )
        d_hat = int(d_hat)
    _check_options(tol, max_iters)
    svd_method = SvdMethod(svd_method)
    order_method = OrderMethod(order_method)

    X = as_geno_matrix(X)
    n_snp, n_indiv = X.shape
    P_init, Q_init = _check_init(P_init, Q_init, n_snp, n_indiv, d_hat)
    if d_hat is None and P_init is not None:
        d_hat = P_init.shape[1]
        if d_hat < MIN_RANK:
            raise InvalidDimensionConfig(
                f"P_init and Q_init must have at least {MIN_RANK} populations"
            )
    if d_hat is not None and d_hat > n_indiv:
        raise DimensionMismatch(
            f"d_hat={d_hat} exceeds the number of individuals n_indiv={n_indiv}"
        )

    log_params(
        "run_alstructure",
        {
            "n_snp": n_snp,
            "n_indiv": n_indiv,
            "d_hat": d_hat,
            "svd_method": svd_method.value,
            "tol": tol,
            "max_iters": max_iters,
            "order_method": order_method.value,
            "init": "user" if P_init is not None else "anchors",
        },
    )

    diagnostics: List[Diagnostic] = []
    if d_hat is None:
        report = compute_dimension_report(X)
        d_hat = report.d_hat
        diagnostics.extend(report.diagnostics)

    init = estimate_initial_factors(X, d_hat, svd_method)
    res = factor_F(
        init.F_hat,
        init.rowspace,
        tol=tol,
        max_iters=max_iters,
        order_method=order_method,
        P_init=P_init,
        Q_init=Q_init,
        verbose=verbose,
    )
    return dataclasses.replace(
        res, diagnostics=tuple(diagnostics) + res.diagnostics
    )
