"""Shared types for `alstructure`: method selectors, diagnostics, errors and results"""
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Tuple

import numpy as np
import pandas as pd
import xarray as xr


class AlstructureError(Exception):
    """Base class of all errors raised by alstructure"""


class DimensionMismatch(AlstructureError, ValueError):
    """Shape of the genotype matrix is inconsistent with the requested dimension
    or with the supplied initial factors"""


class InvalidDimensionConfig(AlstructureError, ValueError):
    """Invalid combination of rank / initialization options"""


class SvdMethod(str, Enum):
    """How the top eigenpairs of the corrected second-moment matrix are found

    - EXACT: full symmetric eigendecomposition
    - TRUNCATED: partial (Lanczos) eigensolver for the top-d pairs only
    """

    EXACT = "exact"
    TRUNCATED = "truncated"

    @classmethod
    def _missing_(cls, value):
        # spellings used by the R package
        aliases = {"base": cls.EXACT, "truncated_svd": cls.TRUNCATED}
        if isinstance(value, str) and value.lower() in aliases:
            return aliases[value.lower()]
        return None


class OrderMethod(str, Enum):
    """Criterion used to order the latent populations"""

    AVE_ADMIXTURE = "ave_admixture"
    VAR_EXPLAINED = "var_explained"


class Status(str, Enum):
    CONVERGED = "converged"
    MAX_ITER_REACHED = "max_iter_reached"


class DiagnosticKind(str, Enum):
    UNRELIABLE_ESTIMATE = "UnreliableEstimate"
    MINIMUM_DIMENSION_ENFORCED = "MinimumDimensionEnforced"
    NON_CONVERGENCE = "NonConvergence"


@dataclass(frozen=True)
class Diagnostic:
    """Advisory message attached to a result, never raised"""

    kind: DiagnosticKind
    message: str

    def __str__(self):
        return f"{self.kind.value}: {self.message}"


@dataclass(frozen=True)
class Rowspace:
    """Top eigenpairs of G, sorted by decreasing eigenvalue

    vectors : (n_indiv, d) orthonormal columns
    values : (d,) eigenvalues
    """

    vectors: np.ndarray
    values: np.ndarray

    @property
    def d(self) -> int:
        return self.vectors.shape[1]


@dataclass(frozen=True)
class DimensionEstimate:
    """Outcome of the plateau search over eigenvalue thresholds"""

    d_hat: int
    d_raw: int
    plateau_length: int
    eigenvalues: np.ndarray
    diagnostics: Tuple[Diagnostic, ...] = ()


@dataclass(frozen=True)
class InitialFactors:
    F_hat: np.ndarray
    rowspace: Rowspace


@dataclass(frozen=True)
class AlstructureResult:
    """Output of `alstructure.run_alstructure`

    P_hat : (n_snp, d) ancestral allele frequencies
    Q_hat : (d, n_indiv) admixture proportions, columns on the simplex
    """

    P_hat: np.ndarray
    Q_hat: np.ndarray
    rowspace: Rowspace
    status: Status
    diagnostics: Tuple[Diagnostic, ...] = ()
    n_iter: int = 0
    rmse: float = np.nan
    d_hat: Optional[int] = field(default=None)

    @property
    def converged(self) -> bool:
        return self.status == Status.CONVERGED

    def to_frame(self, indiv=None) -> pd.DataFrame:
        """Admixture proportions as a (n_indiv, d) data frame"""
        d, n_indiv = self.Q_hat.shape
        if indiv is None:
            indiv = [f"indiv_{i}" for i in range(n_indiv)]
        return pd.DataFrame(
            self.Q_hat.T,
            index=pd.Index(indiv, name="indiv"),
            columns=[f"pop{k + 1}" for k in range(d)],
        )

    def to_dataset(self, snp=None, indiv=None) -> xr.Dataset:
        """Pack the estimates into an xarray Dataset with dims (snp, indiv, pop)

        Parameters
        ----------
        snp : list-like, optional
            SNP labels, defaults to `snp_{i}`
        indiv : list-like, optional
            individual labels, defaults to `indiv_{i}`
        """
        n_snp, d = self.P_hat.shape
        n_indiv = self.Q_hat.shape[1]
        if snp is None:
            snp = [f"snp_{i}" for i in range(n_snp)]
        if indiv is None:
            indiv = [f"indiv_{i}" for i in range(n_indiv)]
        assert len(snp) == n_snp, "`snp` must have length n_snp"
        assert len(indiv) == n_indiv, "`indiv` must have length n_indiv"

        return xr.Dataset(
            data_vars={
                "P": (("snp", "pop"), self.P_hat),
                "Q": (("pop", "indiv"), self.Q_hat),
                "rowspace": (("indiv", "eigen"), self.rowspace.vectors),
                "eigenvalue": (("eigen",), self.rowspace.values),
            },
            coords={
                "snp": np.asarray(snp),
                "indiv": np.asarray(indiv),
                "pop": np.arange(1, d + 1),
            },
            attrs={
                "status": self.status.value,
                "n_iter": self.n_iter,
                "rmse": self.rmse,
                "diagnostics": [str(diag) for diag in self.diagnostics],
            },
        )
