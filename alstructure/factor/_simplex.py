import numpy as np
from typing import List


def project_simplex(Q: np.ndarray) -> np.ndarray:
    """Euclidean projection of each column of Q onto the probability simplex

    Parameters
    ----------
    Q : np.ndarray
        (d, n) matrix, or a length-d vector

    Returns
    -------
    np.ndarray
        matrix of the same shape whose columns are non-negative and sum to 1

    References
    ----------
    Duchi, J., S. Shalev-Shwartz, Y. Singer, and T. Chandra. 2008. Efficient
    projections onto the l1-ball for learning in high dimensions. ICML.
    """
    Q = np.asarray(Q, dtype=np.float64)
    is_vector = Q.ndim == 1
    if is_vector:
        Q = Q[:, None]
    d, n = Q.shape

    # sort each column in descending order
    u = -np.sort(-Q, axis=0)
    cssv = np.cumsum(u, axis=0) - 1.0
    ind = np.arange(1, d + 1)[:, None]
    cond = u - cssv / ind > 0
    # index of the last entry satisfying the condition, per column
    rho = d - 1 - np.argmax(cond[::-1, :], axis=0)
    theta = cssv[rho, np.arange(n)] / (rho + 1)
    proj = np.maximum(Q - theta[None, :], 0.0)

    if is_vector:
        return proj[:, 0]
    return proj


def successive_projection(Z: np.ndarray, d: int) -> List[int]:
    """Select `d` columns of Z that span the vertices of its convex hull

    When columns of Z are convex combinations of d points, the column with the
    largest norm is one of them. After picking it, all columns are projected
    onto its orthogonal complement and the search is repeated.

    Parameters
    ----------
    Z : np.ndarray
        (k, n) matrix, one column per individual
    d : int
        number of columns to select

    Returns
    -------
    List[int]
        indices of the selected columns, in order of selection
    """
    R = np.array(Z, dtype=np.float64)
    n = R.shape[1]
    assert d <= n, "cannot select more anchors than columns"
    anchors: List[int] = []
    for _ in range(d):
        norms = (R ** 2).sum(axis=0)
        norms[anchors] = -np.inf
        j = int(np.argmax(norms))
        anchors.append(j)
        norm_j = np.sqrt(norms[j])
        if norm_j > 0:
            u = R[:, j] / norm_j
            R -= np.outer(u, u @ R)
    return anchors
