import numpy as np
import pytest

from ftcs import HeatConfig, mesh_parameters, solve
from stability import (
    amplification_factors,
    dirichlet_eigenvalue_1d_discrete,
    ftcs_operator,
    max_stable_dt,
    min_stable_steps,
    spectral_radius,
)


@pytest.mark.parametrize('nodes', [3, 4, 10, 25])
@pytest.mark.parametrize('r', [0.1, 0.5, 2.])
def test_operator_spectrum(nodes, r):

    A = ftcs_operator(nodes, r).toarray()
    eig = np.sort(np.linalg.eigvalsh(A))

    np.testing.assert_allclose(eig, np.sort(amplification_factors(r=r, nodes=nodes)), atol=1e-12)


def test_operator_reproduces_interior_update():
    result = solve(HeatConfig(steps=38, nodes=20))
    A = ftcs_operator(20, result.params.r)
    for j in range(1, result.t.size):
        np.testing.assert_allclose(A @ result.U[1:-1, j - 1], result.U[1:-1, j], atol=1e-14)


def test_eigenvalue_consistency():
    nodes, L, r = 12, 2., 0.3
    dx = L / (nodes - 1)
    g = amplification_factors(r=r, nodes=nodes)
    lam = np.array([dirichlet_eigenvalue_1d_discrete(n=n, L=L, nodes=nodes) for n in range(1, nodes - 1)])
    np.testing.assert_allclose(g, 1 - r * dx**2 * lam)


def test_eigenvalue_continuum_limit():
    lam = dirichlet_eigenvalue_1d_discrete(n=1, L=1., nodes=1001)
    assert lam == pytest.approx(np.pi**2, rel=1e-5)


@pytest.mark.parametrize('kwargs', [
    {'n': 0, 'L': 1., 'nodes': 5},
    {'n': 4, 'L': 1., 'nodes': 5},
    {'n': 1, 'L': 0., 'nodes': 5},
    {'n': 1, 'L': 1., 'nodes': 2},
])
def test_eigenvalue_bad_input(kwargs):
    with pytest.raises(ValueError):
        dirichlet_eigenvalue_1d_discrete(**kwargs)


def test_spectral_radius_threshold():
    assert spectral_radius(r=0.5, nodes=50) <= 1.
    assert spectral_radius(r=0.49, nodes=50) < 1.
    assert spectral_radius(r=0.6, nodes=50) > 1.


def test_min_stable_steps():

    nt = min_stable_steps(alpha=0.1, L=1., tmax=0.5, nodes=20)
    assert nt == 38

    p = mesh_parameters(HeatConfig(steps=nt, nodes=20))
    assert p.r <= 0.5
    p = mesh_parameters(HeatConfig(steps=nt - 1, nodes=20))
    assert p.r > 0.5


def test_zero_diffusivity_limits():
    assert max_stable_dt(alpha=0., L=1., nodes=10) == float('inf')
    assert min_stable_steps(alpha=0., L=1., tmax=1., nodes=10) == 2
    with pytest.raises(ValueError):
        max_stable_dt(alpha=-1., L=1., nodes=10)
