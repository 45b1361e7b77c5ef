import numpy as np
import pytest

import plot_from_npz
from ftcs import HeatConfig, solve
from npz_io import save_result_npz
from plots import create_error_plots, create_history_surface, plot_pointwise_error


@pytest.fixture
def result():
    return solve(HeatConfig(steps=38, nodes=20))


def test_error_plots(tmp_path, result):

    paths = create_error_plots(result, str(tmp_path / 'run'))

    assert len(paths) == 4
    for path in paths:
        assert (tmp_path / path).exists()
        assert (tmp_path / path).stat().st_size > 0


def test_pointwise_error_labels(tmp_path, result, monkeypatch):

    captured = {}
    import matplotlib.pyplot as plt
    close = plt.close

    def keep(fig):
        captured['fig'] = fig
        close(fig)

    monkeypatch.setattr(plt, 'close', keep)
    plot_pointwise_error(result.x, result.final_field, result.exact, str(tmp_path / 'err'))

    ax = captured['fig'].axes[0]
    assert ax.get_xlabel() == 'x'
    assert ax.get_ylabel() == 'u − u_e'
    np.testing.assert_allclose(ax.lines[0].get_ydata(), result.pointwise_error)


def test_history_surface(tmp_path, result):
    paths = create_history_surface(result.t, result.x, result.U, 'FTCS', str(tmp_path / 'hist'))
    assert all((tmp_path / p).exists() for p in paths)


def test_plot_from_npz(tmp_path, result, capsys):

    npz = save_result_npz(str(tmp_path / 'run.npz'), result)

    plot_from_npz.main([npz, '--surface', 'yes'])

    for suffix in ['_solution', '_error', '_history']:
        assert (tmp_path / f'run{suffix}.png').exists()
    assert 'Norm of error' in capsys.readouterr().out


def test_plot_from_npz_no_overwrite(tmp_path, result):

    npz = save_result_npz(str(tmp_path / 'run.npz'), result)
    plot_from_npz.main([npz])

    with pytest.raises(FileExistsError):
        plot_from_npz.main([npz, '--overwrite', 'no'])


def test_plot_from_npz_bad_input(tmp_path):
    with pytest.raises(ValueError):
        plot_from_npz.main([str(tmp_path / 'run.txt')])
    with pytest.raises(FileNotFoundError):
        plot_from_npz.main([str(tmp_path / 'missing.npz')])
