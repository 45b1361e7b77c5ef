import warnings

import numpy as np
import pytest

from ftcs import (
    FTCSResult,
    HeatConfig,
    apply_boundary,
    exact_solution,
    ftcs_step,
    heat_ftcs,
    iter_columns,
    mesh_parameters,
    solve,
    validate_config,
)


def stable(**kw):
    # r = 0.1 * (0.5 / 37) * 19**2 ~ 0.488
    return HeatConfig(steps=38, nodes=20, **kw)


def test_defaults():
    config = HeatConfig()
    assert (config.steps, config.nodes) == (10, 20)
    assert config.diffusivity == 0.1
    assert config.length == 1.0
    assert config.horizon == 0.5
    assert config.produce_plots is False
    assert config.u0 is None and config.uL is None


def test_mesh_parameters():
    p = mesh_parameters(HeatConfig())
    assert np.isclose(p.dx, 1 / 19)
    assert np.isclose(p.dt, 0.5 / 9)
    assert np.isclose(p.r, 0.1 * (0.5 / 9) * 19**2)
    assert np.isclose(p.r2, 1 - 2 * p.r)


def test_default_error():

    with pytest.warns(RuntimeWarning, match="stability ratio"):
        result = solve()

    assert isinstance(result, FTCSResult)
    assert np.isfinite(result.error)
    assert 1e-3 < result.error < 1e-1

    assert result.x.shape == (20,)
    assert result.t.shape == (10,)
    assert result.U.shape == (20, 10)
    assert np.isclose(result.final_time, 0.5)
    np.testing.assert_allclose(result.x, np.linspace(0, 1, 20))
    np.testing.assert_allclose(result.t, np.linspace(0, 0.5, 10))


def test_overrides_match_config():
    a = solve(stable())
    b = solve(steps=38, nodes=20)
    assert a.error == b.error
    np.testing.assert_array_equal(a.U, b.U)


def test_initial_column():
    result = solve(stable())
    np.testing.assert_array_equal(result.U[:, 0], np.sin(np.pi * result.x))


def test_initial_column_kept_with_constants():
    result = solve(stable(u0=1., uL=-1.))
    np.testing.assert_array_equal(result.U[:, 0], np.sin(np.pi * result.x))


def test_boundary_rows_follow_initial_values():

    result = solve(stable())

    assert np.all(result.U[0, :] == result.U[0, 0])
    assert np.all(result.U[-1, :] == result.U[-1, 0])
    assert result.U[-1, 0] == np.sin(np.pi)


@pytest.mark.parametrize('u0,uL', [(0., 0.), (1., 0.), (0.25, -2.)])
def test_boundary_rows_fixed(u0, uL):

    result = solve(stable(u0=u0, uL=uL))

    assert np.all(result.U[0, 1:] == u0)
    assert np.all(result.U[-1, 1:] == uL)


@pytest.mark.parametrize('u0,uL', [(0., 0.), (0.5, 1.)])
def test_stencil(u0, uL):

    result = solve(stable(u0=u0, uL=uL))
    U, r = result.U, result.params.r

    expected = r * U[:-2, :-1] + (1 - 2 * r) * U[1:-1, :-1] + r * U[2:, :-1]

    np.testing.assert_allclose(U[1:-1, 1:], expected, rtol=1e-12, atol=1e-15)


def test_ftcs_step_single_column():
    u = np.array([0.5, 1., 3., 2., -0.5])
    r = 0.25
    new = ftcs_step(u, r, 1 - 2 * r)
    np.testing.assert_allclose(new, [0.5, 1.25, 2.25, 1.75, -0.5])
    # input is untouched
    np.testing.assert_array_equal(u, [0.5, 1., 3., 2., -0.5])

    new = ftcs_step(u, r, 1 - 2 * r, u0=0., uL=0.)
    assert new[0] == 0. and new[-1] == 0.


def test_apply_boundary_history():
    U = np.ones((4, 3))
    apply_boundary(U, 2., -1.)
    assert np.all(U[0] == 2.)
    assert np.all(U[-1] == -1.)
    assert np.all(U[1:-1] == 1.)


def test_refinement_error_decreases():

    errors = []
    for nx in [11, 21, 41, 81]:
        dx = 1 / (nx - 1)
        nt = int(np.ceil(0.5 / (0.4 * dx**2 / 0.1))) + 1
        result = solve(HeatConfig(steps=nt, nodes=nx))
        assert result.params.r <= 0.4 + 1e-12
        errors.append(result.error)

    assert all(e > 0 for e in errors)
    assert np.all(np.diff(errors) < 0)


def test_unstable_blows_up():

    with pytest.warns(RuntimeWarning):
        unstable = solve(HeatConfig(steps=30, nodes=60))
    assert unstable.params.r > 0.5

    with warnings.catch_warnings():
        warnings.simplefilter("error")
        good = solve(HeatConfig(steps=400, nodes=60))
    assert good.params.r < 0.5

    assert unstable.error > 1e3 * good.error


def test_degenerate_mesh():

    result = solve(HeatConfig(steps=2, nodes=3))

    assert result.U.shape == (3, 2)
    r = result.params.r
    assert np.isclose(result.U[1, 1], (1 - 2 * r) * result.U[1, 0])
    assert result.U[0, 1] == result.U[0, 0]
    assert result.U[2, 1] == result.U[2, 0]
    assert np.isfinite(result.error)


def test_zero_diffusivity_freezes_field():

    result = solve(stable(diffusivity=0.))

    assert result.params.r == 0.
    for j in range(1, result.t.size):
        np.testing.assert_array_equal(result.U[:, j], result.U[:, 0])
    assert result.error == 0.


def test_exact_solution():
    x = np.linspace(0, 2, 11)
    ue = exact_solution(x, 0.3, 0.1, 2.)
    np.testing.assert_allclose(ue, np.sin(np.pi * x / 2) * np.exp(-0.3 * 0.1 * (np.pi / 2)**2))


@pytest.mark.parametrize('changes', [
    {'nodes': 2},
    {'steps': 1},
    {'length': 0.},
    {'horizon': -1.},
    {'diffusivity': -0.1},
    {'diffusivity': float('nan')},
    {'uL': float('inf')},
])
def test_validation_rejects(changes):
    with pytest.raises(ValueError):
        validate_config(HeatConfig().replace(**changes))
    with pytest.raises(ValueError):
        solve(HeatConfig(), **changes)


def test_no_guardrails():
    config = HeatConfig(steps=10, nodes=20, validate=False)
    with warnings.catch_warnings():
        warnings.simplefilter("error")
        result = solve(config)
    assert result.params.r > 0.5
    assert np.isfinite(result.error)


def test_iter_columns_matches_history():

    config = stable(u0=0.1)
    result = solve(config)

    columns = list(iter_columns(config))

    assert len(columns) == result.t.size
    for j, (t, u) in enumerate(columns):
        assert t == pytest.approx(result.t[j])
        np.testing.assert_array_equal(u, result.U[:, j])


def test_iter_columns_is_lazy():
    gen = iter_columns(stable())
    t0, u0 = next(gen)
    assert t0 == 0.
    assert u0.shape == (20,)
    rest = list(gen)
    assert len(rest) == 37
    assert list(gen) == []


def test_heat_ftcs_without_plots(capsys):
    result = heat_ftcs(stable())
    assert isinstance(result, FTCSResult)
    assert capsys.readouterr().out == ''


def test_heat_ftcs_with_plots(tmp_path, capsys):

    base = str(tmp_path / 'run')
    result = heat_ftcs(stable(produce_plots=True), file_base_name=base)

    out = capsys.readouterr().out
    assert 'Norm of error' in out
    assert 'dt, dx, r' in out
    for suffix in ['_solution', '_error']:
        assert (tmp_path / f'run{suffix}.png').exists()
        assert (tmp_path / f'run{suffix}.jpeg').exists()
    assert result.error > 0


def test_config_round_trip_dict():
    config = HeatConfig(steps=12, nodes=7, u0=1.)
    d = config.as_dict()
    d['unknown'] = 3
    assert HeatConfig.from_dict(d) == config
