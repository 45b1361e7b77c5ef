#!/usr/bin/env python3
from __future__ import annotations

import math

import numpy as np
from scipy.sparse import csr_matrix, diags


def dirichlet_eigenvalue_1d_discrete(*, n: int, L: float, nodes: int) -> float:
    """
    Eigenvalues of the negative 3-point Laplacian with homogeneous Dirichlet
    conditions on a uniform grid of [0, L] with `nodes` points (nodes-2 unknowns).

      h = L / (nodes - 1)
      lambda_n^disc = 4/h^2 * sin^2(n*pi/(2*(nodes-1))),  n = 1, ..., nodes-2.
    """
    if nodes < 3:
        raise ValueError("nodes must be >= 3")
    if n < 1 or n > nodes - 2:
        raise ValueError("n must satisfy 1 <= n <= nodes - 2")
    if L <= 0:
        raise ValueError("L must be > 0")
    intervals = nodes - 1
    h = float(L) / float(intervals)
    return float((4.0 / (h * h)) * (np.sin(n * np.pi / (2.0 * intervals)) ** 2))


def amplification_factors(*, r: float, nodes: int) -> np.ndarray:
    """
    Per-step growth factors g_n = 1 - 4 r sin^2(n pi / (2 (nodes-1))) of the
    discrete sine modes n = 1, ..., nodes-2 under the FTCS update.
    """
    if nodes < 3:
        raise ValueError("nodes must be >= 3")
    intervals = nodes - 1
    n = np.arange(1, intervals, dtype=np.float64)
    return 1.0 - 4.0 * r * np.sin(n * np.pi / (2.0 * intervals)) ** 2


def spectral_radius(*, r: float, nodes: int) -> float:
    return float(np.max(np.abs(amplification_factors(r=r, nodes=nodes))))


def ftcs_operator(nodes: int, r: float) -> csr_matrix:
    """
    Sparse (nodes-2) x (nodes-2) matrix mapping the interior values of one
    time column to the next for zero boundary values: r2 on the diagonal and
    r on the first off-diagonals.
    """
    if nodes < 3:
        raise ValueError("nodes must be >= 3")
    m = nodes - 2
    if m == 1:
        return csr_matrix(np.array([[1.0 - 2.0 * r]]))
    main_diag = np.full(m, 1.0 - 2.0 * r)
    off_diag = np.full(m - 1, r)
    return diags([main_diag, off_diag, off_diag], [0, 1, -1], format="csr")


def max_stable_dt(*, alpha: float, L: float, nodes: int) -> float:
    """Largest dt with alpha * dt / dx^2 <= 1/2. Infinite for alpha == 0."""
    if alpha < 0:
        raise ValueError("alpha must be >= 0")
    if alpha == 0:
        return float("inf")
    dx = float(L) / (nodes - 1)
    return 0.5 * dx * dx / alpha


def min_stable_steps(*, alpha: float, L: float, tmax: float, nodes: int) -> int:
    """Smallest number of time nodes nt (>= 2) whose dt = tmax/(nt-1) is stable."""
    dt_max = max_stable_dt(alpha=alpha, L=L, nodes=nodes)
    if math.isinf(dt_max):
        return 2
    return max(2, int(math.ceil(tmax / dt_max)) + 1)
