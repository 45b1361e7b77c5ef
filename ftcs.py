#!/usr/bin/env python3
"""
Explicit FTCS solver for the 1D heat equation.

Solves u_t = alpha * u_xx on [0, L] with Dirichlet boundary values u(0) = u0,
u(L) = uL and the initial profile u(x, 0) = sin(pi * x / L), using the
forward-time, centered-space finite-difference scheme

    U[i, j] = r * U[i-1, j-1] + (1 - 2r) * U[i, j-1] + r * U[i+1, j-1],
    r = alpha * dt / dx**2.

The final time column is compared against the exact solution

    u_e(x, t) = sin(pi * x / L) * exp(-t * alpha * (pi / L)**2),

which is only valid for the built-in initial condition with its own endpoint
values (u0 = uL = None) or with u0 = uL = 0.

Usage:
    >>> from ftcs import HeatConfig, solve
    >>> result = solve(HeatConfig(steps=40, nodes=20))
    >>> result.error
"""

from __future__ import annotations

import math
import warnings
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Iterator, Optional, Tuple

import numpy as np
from tqdm import tqdm

# The explicit scheme is stable only for r <= 1/2.
STABILITY_LIMIT: float = 0.5


@dataclass(frozen=True)
class HeatConfig:
    """
    Parameters of one FTCS run.

    Attributes:
    - steps (int): Number of time nodes nt, including t = 0 (default 10).
    - nodes (int): Number of spatial nodes nx, including both ends (default 20).
    - diffusivity (float): Thermal diffusivity alpha (default 0.1).
    - length (float): Length L of the domain [0, L] (default 1.0).
    - horizon (float): Final simulation time tmax (default 0.5).
    - produce_plots (bool): Print the error report and draw the solution and
      error figures after solving (default False).
    - u0 (float, optional): Dirichlet value at x = 0 for t > 0. None keeps the
      initial profile's end value, sin(0) (default None).
    - uL (float, optional): Dirichlet value at x = L for t > 0. None keeps the
      initial profile's end value, sin(pi) (default None).
    - validate (bool): Reject degenerate inputs and warn on r > 1/2
      (default True). With False the solver runs without any guardrails.
    """

    steps: int = 10
    nodes: int = 20
    diffusivity: float = 0.1
    length: float = 1.0
    horizon: float = 0.5
    produce_plots: bool = False
    u0: Optional[float] = None
    uL: Optional[float] = None
    validate: bool = True

    def replace(self, **changes: Any) -> "HeatConfig":
        return replace(self, **changes)

    def as_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "HeatConfig":
        """Build a config from a mapping, ignoring unknown keys."""
        known = cls.__dataclass_fields__.keys()
        return cls(**{k: v for k, v in d.items() if k in known})


@dataclass(frozen=True)
class MeshParameters:
    dx: float
    dt: float
    r: float
    r2: float


@dataclass(frozen=True)
class FTCSResult:
    """
    Output of :func:`solve`.

    Attributes:
    - error (float): L2 norm of U[:, -1] - exact over all spatial nodes.
    - x (np.ndarray): Spatial nodes, shape (nx,).
    - t (np.ndarray): Time nodes, shape (nt,).
    - U (np.ndarray): Field history, shape (nx, nt); U[:, j] is u(x, t[j]).
    - exact (np.ndarray): Exact profile at t[-1], shape (nx,).
    - params (MeshParameters): dx, dt, r and 1 - 2r.
    - config (HeatConfig): The configuration that produced this result.
    """

    error: float
    x: np.ndarray
    t: np.ndarray
    U: np.ndarray
    exact: np.ndarray
    params: MeshParameters
    config: HeatConfig

    @property
    def final_time(self) -> float:
        return float(self.t[-1])

    @property
    def final_field(self) -> np.ndarray:
        return self.U[:, -1]

    @property
    def pointwise_error(self) -> np.ndarray:
        return self.U[:, -1] - self.exact


def validate_config(config: HeatConfig) -> None:
    """Raise ValueError for inputs that make the mesh or the loop degenerate."""
    values = {
        "steps": config.steps,
        "nodes": config.nodes,
        "diffusivity": config.diffusivity,
        "length": config.length,
        "horizon": config.horizon,
        "u0": config.u0,
        "uL": config.uL,
    }
    for name, value in values.items():
        if value is None:
            continue
        if not math.isfinite(float(value)):
            raise ValueError(f"{name} must be finite, got {value!r}")
    if int(config.nodes) != config.nodes or config.nodes < 3:
        raise ValueError(f"nodes must be an integer >= 3, got {config.nodes!r}")
    if int(config.steps) != config.steps or config.steps < 2:
        raise ValueError(f"steps must be an integer >= 2, got {config.steps!r}")
    if config.length <= 0:
        raise ValueError(f"length must be > 0, got {config.length!r}")
    if config.horizon <= 0:
        raise ValueError(f"horizon must be > 0, got {config.horizon!r}")
    if config.diffusivity < 0:
        raise ValueError(f"diffusivity must be >= 0, got {config.diffusivity!r}")


def mesh_parameters(config: HeatConfig) -> MeshParameters:
    dx = config.length / (config.nodes - 1)
    dt = config.horizon / (config.steps - 1)
    r = config.diffusivity * dt / dx**2
    return MeshParameters(dx=dx, dt=dt, r=r, r2=1 - 2 * r)


def check_stability(params: MeshParameters) -> bool:
    """
    Return True when r <= 1/2. Otherwise emit a RuntimeWarning and return False;
    the run is never stopped.
    """
    if params.r <= STABILITY_LIMIT:
        return True
    warnings.warn(
        f"FTCS stability ratio r = {params.r:.4f} exceeds {STABILITY_LIMIT}; "
        "the solution will oscillate and grow. Increase steps or reduce nodes.",
        RuntimeWarning,
        stacklevel=3,
    )
    return False


def build_grids(config: HeatConfig) -> Tuple[np.ndarray, np.ndarray]:
    x = np.linspace(0.0, config.length, int(config.nodes), dtype=np.float64)
    t = np.linspace(0.0, config.horizon, int(config.steps), dtype=np.float64)
    return x, t


def initial_condition(x: np.ndarray, L: float) -> np.ndarray:
    return np.sin(np.pi * x / L)


def apply_boundary(U: np.ndarray, u0: float, uL: float) -> np.ndarray:
    """
    Overwrite the boundary rows of U in place with the Dirichlet values.

    Works on a single column (shape (nx,)) as well as on a full history
    (shape (nx, nt)), where every column gets the same boundary values.
    """
    U[0, ...] = u0
    U[-1, ...] = uL
    return U


def ftcs_step(
    u_prev: np.ndarray,
    r: float,
    r2: float,
    u0: Optional[float] = None,
    uL: Optional[float] = None,
    out: Optional[np.ndarray] = None,
) -> np.ndarray:
    """
    Advance one time column with the three-point FTCS stencil.

    Parameters:
    - u_prev (np.ndarray): Field at the previous time node, shape (nx,).
    - r (float): Stability ratio alpha * dt / dx**2.
    - r2 (float): 1 - 2r.
    - u0, uL (float, optional): Dirichlet values written to the end nodes.
      None carries the end value of u_prev forward unchanged.
    - out (np.ndarray, optional): Destination column. Must not alias u_prev.

    Returns:
    - np.ndarray: The new column. Every interior value depends only on u_prev.
    """
    if out is None:
        out = np.empty_like(u_prev)
    out[1:-1] = r * u_prev[:-2] + r2 * u_prev[1:-1] + r * u_prev[2:]
    apply_boundary(
        out,
        u_prev[0] if u0 is None else u0,
        u_prev[-1] if uL is None else uL,
    )
    return out


def exact_solution(x: np.ndarray, t: float, alpha: float, L: float) -> np.ndarray:
    return np.sin(np.pi * x / L) * np.exp(-t * alpha * (np.pi / L) ** 2)


def l2_error(u: np.ndarray, ue: np.ndarray) -> float:
    return float(np.linalg.norm(u - ue))


def _prepare(config: Optional[HeatConfig], overrides: Dict[str, Any]) -> HeatConfig:
    if config is None:
        config = HeatConfig()
    if overrides:
        config = config.replace(**overrides)
    return config


def solve(
    config: Optional[HeatConfig] = None,
    *,
    progress: bool = False,
    **overrides: Any,
) -> FTCSResult:
    """
    Run the FTCS scheme and keep every time column.

    Parameters:
    - config (HeatConfig, optional): Run parameters; defaults to HeatConfig().
    - progress (bool): Show a tqdm progress bar over the time columns.
    - **overrides: Field overrides applied on top of config, e.g. steps=40.

    Returns:
    - FTCSResult: Error at the final time together with x, t, U and the exact
      final profile.
    """
    config = _prepare(config, overrides)
    if config.validate:
        validate_config(config)
    params = mesh_parameters(config)
    if config.validate:
        check_stability(params)

    x, t = build_grids(config)
    nx, nt = x.size, t.size

    U = np.zeros((nx, nt), dtype=np.float64)
    # column 0 is the initial condition, boundary nodes included
    U[:, 0] = initial_condition(x, config.length)

    for j in tqdm(range(1, nt), desc="Time stepping", disable=not progress):
        ftcs_step(U[:, j - 1], params.r, params.r2, config.u0, config.uL, out=U[:, j])

    ue = exact_solution(x, t[-1], config.diffusivity, config.length)
    err = l2_error(U[:, -1], ue)

    return FTCSResult(
        error=err, x=x, t=t, U=U, exact=ue, params=params, config=config
    )


def iter_columns(
    config: Optional[HeatConfig] = None, **overrides: Any
) -> Iterator[Tuple[float, np.ndarray]]:
    """
    Yield (t_j, u_j) for j = 0 .. nt-1 while holding only two columns.

    The yielded arrays are copies, so callers may keep them. The generator is
    lazy and can be consumed once.
    """
    config = _prepare(config, overrides)
    if config.validate:
        validate_config(config)
    params = mesh_parameters(config)
    if config.validate:
        check_stability(params)

    x, t = build_grids(config)
    prev = initial_condition(x, config.length)
    curr = np.empty_like(prev)

    yield float(t[0]), prev.copy()
    for j in range(1, t.size):
        ftcs_step(prev, params.r, params.r2, config.u0, config.uL, out=curr)
        prev, curr = curr, prev
        yield float(t[j]), prev.copy()


def heat_ftcs(
    config: Optional[HeatConfig] = None,
    *,
    file_base_name: str = "heat_ftcs",
    progress: bool = False,
    **overrides: Any,
) -> FTCSResult:
    """
    Solve and, when config.produce_plots is set, print the error report and
    write the solution and error figures under file_base_name.
    """
    result = solve(config, progress=progress, **overrides)
    if result.config.produce_plots:
        from plots import create_error_plots
        from simulation import print_report

        print_report(result)
        create_error_plots(result, file_base_name)
    return result
