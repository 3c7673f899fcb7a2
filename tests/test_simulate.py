import numpy as np
import alstructure


def test_admix_geno():
    sim = alstructure.simulate.admix_geno(n_snp=100, n_indiv=40, n_anc=3, seed=1)
    assert sim.X.shape == (100, 40)
    assert sim.P.shape == (100, 3)
    assert sim.Q.shape == (3, 40)
    assert set(np.unique(sim.X)) <= {0.0, 1.0, 2.0}
    assert np.allclose(sim.Q.sum(axis=0), 1)
    assert np.all((sim.P >= 0.1) & (sim.P <= 0.9))
    assert np.allclose(sim.F, sim.P @ sim.Q)

    sim2 = alstructure.simulate.admix_geno(n_snp=100, n_indiv=40, n_anc=3, seed=1)
    assert np.all(sim.X == sim2.X)


def test_align_components():
    sim = alstructure.simulate.admix_geno(n_snp=10, n_indiv=50, n_anc=3, seed=2)
    perm_true = np.array([2, 0, 1])
    # Q_hat[k] = Q[perm_true[k]], so Q_hat[inverse] recovers Q
    Q_hat = sim.Q[perm_true]
    perm, cor = alstructure.utils.align_components(Q_hat, sim.Q)
    assert np.allclose(Q_hat[perm], sim.Q)
    assert np.allclose(cor, 1)


def test_loglik():
    sim = alstructure.simulate.admix_geno(n_snp=200, n_indiv=50, n_anc=2, seed=3)
    ll_true = alstructure.utils.binomial_loglik(sim.X, sim.P, sim.Q)
    ll_flat = alstructure.utils.binomial_loglik(
        sim.X, np.full_like(sim.P, 0.5), sim.Q
    )
    assert ll_true > ll_flat
    assert alstructure.utils.rmse(sim.P, sim.P) == 0
