#!/usr/bin/env python3
from __future__ import annotations

import os
import tempfile
from typing import List

# Matplotlib writes cache files (including TeX-related caches when usetex=True).
# Ensure a writable cache directory even in sandboxed / restricted environments.
if "MPLCONFIGDIR" not in os.environ:
    mpl_config_dir = os.path.join(tempfile.gettempdir(), "heat-ftcs-mplconfig")
    os.makedirs(mpl_config_dir, exist_ok=True)
    os.environ["MPLCONFIGDIR"] = mpl_config_dir

import matplotlib.pyplot as plt
import numpy as np
from matplotlib import rc
from matplotlib.ticker import FormatStrFormatter

from ftcs import FTCSResult


USE_TEX = os.environ.get("HEAT_FTCS_USETEX", "no").strip().lower() in (
    "1",
    "yes",
    "true",
)
rc("text", usetex=USE_TEX)


def _save(fig, file_base_name: str) -> List[str]:
    paths = [f"{file_base_name}.png", f"{file_base_name}.jpeg"]
    for path in paths:
        fig.savefig(path, bbox_inches="tight")
    plt.close(fig)
    return paths


def plot_final_solution(
    x_values: np.ndarray,
    u_final: np.ndarray,
    u_exact: np.ndarray,
    file_base_name: str,
) -> List[str]:
    """
    Overlay the computed field at the final time (markers) on the exact
    solution (solid line). Saves <file_base_name>.{png,jpeg}.
    """
    fig, ax = plt.subplots(1, 1, figsize=(6.4, 4.8), dpi=150)
    ax.plot(x_values, u_final, "o--", label="FTCS")
    ax.plot(x_values, u_exact, "-", label="Exact")
    if USE_TEX:
        ax.set_xlabel(r"$x$")
        ax.set_ylabel(r"$u$")
    else:
        ax.set_xlabel("x")
        ax.set_ylabel("u")
    ax.legend(loc="best", frameon=False)
    plt.tight_layout()
    return _save(fig, file_base_name)


def plot_pointwise_error(
    x_values: np.ndarray,
    u_final: np.ndarray,
    u_exact: np.ndarray,
    file_base_name: str,
) -> List[str]:
    """Plot u - u_e at the final time. Saves <file_base_name>.{png,jpeg}."""
    fig, ax = plt.subplots(1, 1, figsize=(6.4, 4.8), dpi=150)
    ax.plot(x_values, u_final - u_exact, "o--")
    if USE_TEX:
        ax.set_xlabel(r"$x$")
        ax.set_ylabel(r"$u - u_e$")
    else:
        ax.set_xlabel("x")
        ax.set_ylabel("u − u_e")
    plt.tight_layout()
    return _save(fig, file_base_name)


def create_error_plots(result: FTCSResult, file_base_name: str) -> List[str]:
    """
    Render the two final-time figures for a solver result:
    <base>_solution.{png,jpeg} and <base>_error.{png,jpeg}.
    """
    paths = plot_final_solution(
        result.x, result.final_field, result.exact, f"{file_base_name}_solution"
    )
    paths += plot_pointwise_error(
        result.x, result.final_field, result.exact, f"{file_base_name}_error"
    )
    print("\n    Output files saved:")
    for path in paths:
        print(f"    - Image: {path}")
    return paths


def create_history_surface(
    t_mesh: np.ndarray,
    x_mesh: np.ndarray,
    U: np.ndarray,
    SetupDes: str,
    FileBaseName: str,
) -> List[str]:
    """
    3D surface of the full field history U[i, j] = u(x_i, t_j).
    Saves <FileBaseName>.{png,jpeg}.
    """
    fig_3d = plt.figure(figsize=(8, 6), dpi=200)
    ax_3d = fig_3d.add_subplot(111, projection="3d")
    T_grid, X_grid = np.meshgrid(t_mesh, x_mesh, indexing="xy")
    ax_3d.plot_surface(T_grid, X_grid, U, cmap="viridis", alpha=0.8)

    Zero_grid = np.full_like(T_grid, 0)
    ax_3d.plot_surface(
        T_grid,
        X_grid,
        Zero_grid,
        alpha=0.2,
        rstride=100,
        cstride=100,
        color="lightgray",
    )

    if USE_TEX:
        ax_3d.set_xlabel(r"Time $t$")
        ax_3d.set_ylabel(r"Space $x$")
    else:
        ax_3d.set_xlabel("Time t")
        ax_3d.set_ylabel("Space x")
    u_min, u_max = float(np.min(U)), float(np.max(U))
    if u_max > u_min:
        ax_3d.set_zlim(u_min, u_max)
        ax_3d.set_zticks(np.linspace(u_min, u_max, 5))
    ax_3d.zaxis.set_major_formatter(FormatStrFormatter("%.3f"))
    ax_3d.set_title("Solution u(t,x)", pad=10)

    fig_3d.suptitle(SetupDes, fontsize=10)
    plt.tight_layout()
    return _save(fig_3d, FileBaseName)
