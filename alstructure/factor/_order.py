import numpy as np
from typing import Union

from .._types import OrderMethod, Rowspace


def eigen_r2(Q: np.ndarray, rowspace: Rowspace) -> np.ndarray:
    """Eigen-R2 of each row of Q with respect to the top eigenvectors of G

    For population k, the R2 of regressing Q[k] on each of the top-d
    eigenvectors is averaged with weights given by the corresponding
    eigenvalues.

    Parameters
    ----------
    Q : np.ndarray
        (d, n_indiv) admixture proportions
    rowspace : Rowspace
        eigenpairs of G, at least d of them

    Returns
    -------
    np.ndarray
        (d,) eigen-R2 per population, within [0, 1]

    References
    ----------
    Chen, L., and J. D. Storey. 2008. Eigen-R2 for dissecting variation in
    high-dimensional studies. Bioinformatics 24 (19): 2260-62.
    """
    d, n_indiv = Q.shape
    assert rowspace.vectors.shape[0] == n_indiv, "rowspace does not match Q"
    assert rowspace.d >= d, "rowspace has fewer than d eigenvectors"

    V = rowspace.vectors[:, :d]
    weights = np.maximum(rowspace.values[:d], 0.0)
    if weights.sum() == 0:
        weights = np.ones(d)

    Qc = Q - Q.mean(axis=1, keepdims=True)
    Vc = V - V.mean(axis=0, keepdims=True)
    q_ss = (Qc ** 2).sum(axis=1)
    v_ss = (Vc ** 2).sum(axis=0)

    cross = Qc @ Vc
    denom = np.outer(q_ss, v_ss)
    # rows of Q or eigenvectors without variation explain nothing
    r2 = np.divide(cross ** 2, denom, out=np.zeros_like(cross), where=denom > 0)
    return r2 @ weights / weights.sum()


def order_components(
    Q: np.ndarray,
    rowspace: Rowspace,
    method: Union[str, OrderMethod] = "ave_admixture",
) -> np.ndarray:
    """Order the latent populations

    Parameters
    ----------
    Q : np.ndarray
        (d, n_indiv) admixture proportions
    rowspace : Rowspace
        eigenpairs of G, used by "var_explained"
    method : str or OrderMethod
        - "ave_admixture": decreasing average admixture proportion
        - "var_explained": decreasing eigen-R2

    Returns
    -------
    np.ndarray
        permutation of range(d); apply it to the rows of Q and the columns of P
    """
    method = OrderMethod(method)
    if method == OrderMethod.AVE_ADMIXTURE:
        stat = Q.mean(axis=1)
    elif method == OrderMethod.VAR_EXPLAINED:
        stat = eigen_r2(Q, rowspace)
    else:
        raise NotImplementedError(f"{method} is not implemented")
    return np.argsort(-stat, kind="stable")
