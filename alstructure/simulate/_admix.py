import numpy as np
from dataclasses import dataclass
from typing import List, Union


@dataclass(frozen=True)
class SimulatedAdmixture:
    """Genotypes simulated from the admixture model X ~ Binomial(2, P Q)

    X : (n_snp, n_indiv) genotype matrix
    P : (n_snp, n_anc) ancestral allele frequencies
    Q : (n_anc, n_indiv) admixture proportions
    """

    X: np.ndarray
    P: np.ndarray
    Q: np.ndarray

    @property
    def F(self) -> np.ndarray:
        """individual-specific allele frequencies"""
        return self.P @ self.Q


def admix_geno(
    n_snp: int,
    n_indiv: int,
    n_anc: int,
    alpha: Union[float, List[float]] = 0.5,
    af_range: List[float] = [0.1, 0.9],
    seed: int = None,
) -> SimulatedAdmixture:
    """Simulate genotypes of admixed individuals

    The generative model is:

    - for each ancestry and each SNP, the allele frequency is drawn uniformly
        within `af_range`
    - for each individual, the admixture proportions are drawn from a
        Dirichlet distribution with concentration `alpha`
    - each genotype is drawn from Binomial(2, f) with f = (P Q)[snp, indiv]

    Parameters
    ----------
    n_snp : int
        Number of SNPs
    n_indiv : int
        Number of individuals
    n_anc : int
        Number of ancestral populations
    alpha : float or list of float
        Dirichlet concentration, a scalar is shared across ancestries. Smaller
        values give less admixed individuals.
    af_range : [float, float]
        range of the ancestral allele frequencies
    seed : int, optional
        random seed

    Returns
    -------
    SimulatedAdmixture
    """
    assert n_anc >= 1, "n_anc must be positive"
    assert 0 <= af_range[0] < af_range[1] <= 1, "af_range must be within [0, 1]"
    alpha = np.broadcast_to(np.asarray(alpha, dtype=np.float64), (n_anc,))
    assert np.all(alpha > 0), "alpha must be positive"

    rng = np.random.default_rng(seed)
    P = rng.uniform(low=af_range[0], high=af_range[1], size=(n_snp, n_anc))
    Q = rng.dirichlet(alpha, size=n_indiv).T
    X = rng.binomial(n=2, p=P @ Q).astype(np.float64)
    return SimulatedAdmixture(X=X, P=P, Q=Q)
