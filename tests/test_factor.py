import numpy as np
import pytest
import alstructure
from alstructure import (
    DiagnosticKind,
    DimensionMismatch,
    InvalidDimensionConfig,
    Rowspace,
    Status,
)
from alstructure.factor import (
    project_simplex,
    successive_projection,
    order_components,
    eigen_r2,
)


def _simulate(seed, n_snp=500, n_indiv=200, n_anc=3):
    return alstructure.simulate.admix_geno(
        n_snp=n_snp, n_indiv=n_indiv, n_anc=n_anc, alpha=0.5, seed=seed
    )


def _check_constraints(res):
    assert np.allclose(res.Q_hat.sum(axis=0), 1, atol=1e-6)
    assert np.all(res.Q_hat >= 0)
    assert np.all((res.P_hat >= 0) & (res.P_hat <= 1))
    assert res.status in [Status.CONVERGED, Status.MAX_ITER_REACHED]


def test_project_simplex():
    assert np.allclose(project_simplex(np.array([2.0, 0.0])), [1, 0])
    assert np.allclose(project_simplex(np.array([1.0, 1.0])), [0.5, 0.5])
    assert np.allclose(project_simplex(np.array([0.2, 0.3, 0.5])), [0.2, 0.3, 0.5])
    assert np.allclose(project_simplex(np.array([-1.0, 0.5, 0.7])), [0, 0.4, 0.6])

    np.random.seed(0)
    Q = np.random.randn(4, 30) * 3
    proj = project_simplex(Q)
    assert proj.shape == Q.shape
    assert np.allclose(proj.sum(axis=0), 1)
    assert np.all(proj >= 0)
    # idempotent
    assert np.allclose(project_simplex(proj), proj)


def test_successive_projection():
    np.random.seed(1)
    W = np.random.randn(3, 3)
    H = np.random.dirichlet([1, 1, 1], size=20).T
    pure = [4, 11, 17]
    H[:, pure] = np.eye(3)
    anchors = successive_projection(W @ H, 3)
    assert sorted(anchors) == pure


def test_order_components():
    Q = np.array([[0.2, 0.2], [0.5, 0.5], [0.3, 0.3]])
    rowspace = Rowspace(vectors=np.eye(2, 3).T, values=np.array([2.0, 1.0, 0.5]))
    perm = order_components(Q, rowspace, "ave_admixture")
    assert list(perm) == [1, 2, 0]


def test_eigen_r2():
    np.random.seed(2)
    n_indiv = 50
    V, _ = np.linalg.qr(np.random.randn(n_indiv, 2))
    rowspace = Rowspace(vectors=V, values=np.array([10.0, 1.0]))
    Q = np.vstack([0.5 + V[:, 1], 0.5 + V[:, 0]])
    r2 = eigen_r2(Q, rowspace)
    assert np.all((r2 >= 0) & (r2 <= 1 + 1e-12))
    # the row following the leading eigenvector explains more
    assert r2[1] > r2[0]
    assert list(order_components(Q, rowspace, "var_explained")) == [1, 0]

    # constant rows explain nothing
    Q_const = np.full((2, n_indiv), 0.5)
    assert np.allclose(eigen_r2(Q_const, rowspace), 0)


def test_run_alstructure():
    sim = _simulate(0)
    res = alstructure.run_alstructure(sim.X, d_hat=3)
    _check_constraints(res)
    assert res.P_hat.shape == (500, 3)
    assert res.Q_hat.shape == (3, 200)
    assert res.d_hat == 3
    assert res.rowspace.vectors.shape == (200, 3)
    # ordered by decreasing average admixture
    assert np.all(np.diff(res.Q_hat.mean(axis=1)) <= 0)

    # recovers the simulated admixture proportions
    perm, cor = alstructure.utils.align_components(res.Q_hat, sim.Q)
    assert np.all(cor > 0.9)


def test_run_alstructure_estimated_d():
    sim = _simulate(1)
    res = alstructure.run_alstructure(sim.X)
    _check_constraints(res)
    assert res.d_hat >= 2
    assert res.Q_hat.shape[0] == res.d_hat


def test_run_alstructure_deterministic():
    sim = _simulate(2, n_snp=300, n_indiv=100)
    res1 = alstructure.run_alstructure(sim.X, d_hat=3, svd_method="exact")
    res2 = alstructure.run_alstructure(sim.X, d_hat=3, svd_method="exact")
    assert np.allclose(res1.P_hat, res2.P_hat)
    assert np.allclose(res1.Q_hat, res2.Q_hat)
    assert res1.n_iter == res2.n_iter


def test_run_alstructure_truncated():
    sim = _simulate(3, n_snp=300, n_indiv=100)
    res = alstructure.run_alstructure(sim.X, d_hat=3, svd_method="truncated")
    _check_constraints(res)


def test_run_alstructure_var_explained():
    sim = _simulate(4, n_snp=300, n_indiv=100)
    res = alstructure.run_alstructure(sim.X, d_hat=3, order_method="var_explained")
    _check_constraints(res)
    r2 = eigen_r2(res.Q_hat, res.rowspace)
    assert np.all(np.diff(r2) <= 1e-12)


def test_run_alstructure_init():
    sim = _simulate(5, n_snp=300, n_indiv=100)
    res = alstructure.run_alstructure(sim.X, P_init=sim.P, Q_init=sim.Q)
    _check_constraints(res)
    # dimension is taken from the starting point
    assert res.d_hat == 3
    perm, cor = alstructure.utils.align_components(res.Q_hat, sim.Q)
    assert np.all(cor > 0.9)


def test_only_one_init():
    sim = _simulate(6, n_snp=50, n_indiv=20)
    with pytest.raises(InvalidDimensionConfig):
        alstructure.run_alstructure(sim.X, P_init=sim.P)
    with pytest.raises(InvalidDimensionConfig):
        alstructure.run_alstructure(sim.X, Q_init=sim.Q)


def test_only_one_init_before_numeric_work(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("numeric work started")

    monkeypatch.setattr(alstructure.factor._als, "as_geno_matrix", fail)
    monkeypatch.setattr(alstructure.factor._als, "estimate_initial_factors", fail)
    monkeypatch.setattr(alstructure.factor._als, "compute_dimension_report", fail)
    sim = _simulate(7, n_snp=50, n_indiv=20)
    with pytest.raises(InvalidDimensionConfig):
        alstructure.run_alstructure(sim.X, P_init=sim.P)


def test_invalid_options():
    sim = _simulate(8, n_snp=50, n_indiv=20)
    with pytest.raises(InvalidDimensionConfig):
        alstructure.run_alstructure(sim.X, d_hat=1)
    with pytest.raises(DimensionMismatch):
        alstructure.run_alstructure(sim.X, d_hat=21)
    with pytest.raises(DimensionMismatch):
        alstructure.run_alstructure(sim.X, P_init=sim.P[:10], Q_init=sim.Q)
    with pytest.raises(DimensionMismatch):
        alstructure.run_alstructure(sim.X, d_hat=2, P_init=sim.P, Q_init=sim.Q)
    with pytest.raises(ValueError):
        alstructure.run_alstructure(sim.X, d_hat=2, tol=0)
    with pytest.raises(ValueError):
        alstructure.run_alstructure(sim.X, d_hat=2, max_iters=0)
    with pytest.raises(ValueError):
        alstructure.run_alstructure(sim.X, d_hat=2, order_method="random")


def test_max_iter_reached():
    sim = _simulate(9, n_snp=300, n_indiv=100)
    res = alstructure.run_alstructure(sim.X, d_hat=3, max_iters=1, tol=1e-15)
    _check_constraints(res)
    assert res.status == Status.MAX_ITER_REACHED
    assert not res.converged
    assert res.n_iter == 1
    kinds = [diag.kind for diag in res.diagnostics]
    assert DiagnosticKind.NON_CONVERGENCE in kinds


def test_rank_one_with_d2():
    # a single population has no admixture structure
    sim = alstructure.simulate.admix_geno(n_snp=300, n_indiv=80, n_anc=1, seed=10)
    res = alstructure.run_alstructure(sim.X, d_hat=2)
    _check_constraints(res)
    assert res.Q_hat.shape == (2, 80)


def test_result_export():
    sim = _simulate(11, n_snp=100, n_indiv=40)
    res = alstructure.run_alstructure(sim.X, d_hat=3)
    df = res.to_frame()
    assert df.shape == (40, 3)
    assert np.allclose(df.values.sum(axis=1), 1)
    ds = res.to_dataset()
    assert ds["P"].shape == (100, 3)
    assert ds["Q"].shape == (3, 40)
    assert ds.attrs["status"] == res.status.value


def test_dimension_diagnostics_in_result():
    sim = alstructure.simulate.admix_geno(n_snp=500, n_indiv=200, n_anc=1, seed=12)
    res = alstructure.run_alstructure(sim.X)
    _check_constraints(res)
    assert res.d_hat == 2
    kinds = [diag.kind for diag in res.diagnostics]
    assert DiagnosticKind.MINIMUM_DIMENSION_ENFORCED in kinds


def test_run_alstructure_zero_matrix():
    X = np.zeros((50, 20))
    for svd_method in ["exact", "truncated"]:
        res = alstructure.run_alstructure(X, d_hat=3, svd_method=svd_method)
        _check_constraints(res)
