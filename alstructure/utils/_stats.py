import numpy as np
from scipy.optimize import linear_sum_assignment
from typing import Tuple

"""
evaluation of estimated admixture against a known truth
"""


def rmse(A: np.ndarray, B: np.ndarray) -> float:
    """root mean squared difference between two matrices of the same shape"""
    assert A.shape == B.shape, "A and B must have the same shape"
    return float(np.sqrt(np.mean((A - B) ** 2)))


def align_components(
    Q_hat: np.ndarray, Q_true: np.ndarray
) -> Tuple[np.ndarray, np.ndarray]:
    """Match estimated populations to the true ones

    Populations are matched by maximizing the summed Pearson correlation
    between rows of `Q_hat` and rows of `Q_true` (Hungarian algorithm).

    Parameters
    ----------
    Q_hat : np.ndarray
        (d, n_indiv) estimated admixture proportions
    Q_true : np.ndarray
        (d, n_indiv) true admixture proportions

    Returns
    -------
    perm : np.ndarray
        `Q_hat[perm]` is aligned with `Q_true`
    cor : np.ndarray
        (d,) correlation between `Q_hat[perm][k]` and `Q_true[k]`
    """
    assert Q_hat.shape == Q_true.shape, "Q_hat and Q_true must have the same shape"
    d = Q_true.shape[0]
    cor = np.corrcoef(Q_true, Q_hat)[:d, d:]
    cor = np.nan_to_num(cor)
    row_ind, col_ind = linear_sum_assignment(cor, maximize=True)
    perm = col_ind[np.argsort(row_ind)]
    return perm, cor[np.arange(d), perm]


def binomial_loglik(
    X: np.ndarray, P: np.ndarray, Q: np.ndarray, eps: float = 1e-6
) -> float:
    """Log-likelihood of genotypes under the admixture model

    X[snp, indiv] ~ Binomial(2, (P Q)[snp, indiv]), the binomial coefficient is
    omitted.
    """
    F = np.clip(P @ Q, eps, 1 - eps)
    return float(np.sum(X * np.log(F) + (2 - X) * np.log(1 - F)))
