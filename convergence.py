#!/usr/bin/env python3
"""
Mesh refinement study for the FTCS heat solver.

For each number of spatial nodes nx the number of time nodes nt is chosen as
the smallest value that keeps r = alpha * dt / dx^2 at or below a target, so
dt shrinks like dx^2 and the run stays in the stable regime. The table reports
the L2 error of the last time step, its grid-scaled counterpart
rms = error * sqrt(dx), and the observed order of accuracy in dx.
"""

from __future__ import annotations

import argparse
import json
import math
import sys
from dataclasses import asdict, dataclass
from typing import List, Optional, Sequence

import numpy as np
from tabulate import tabulate
from tqdm import tqdm

from ftcs import HeatConfig, solve
from simulation import _apply_config_defaults, _load_yaml_config_as_overrides


@dataclass(frozen=True)
class RefinementRow:
    nodes: int
    steps: int
    dx: float
    dt: float
    r: float
    error: float
    rms_error: float
    observed_order: Optional[float]


def steps_for_ratio(*, r_target: float, alpha: float, L: float, tmax: float, nodes: int) -> int:
    """Smallest nt >= 2 with alpha * (tmax/(nt-1)) / dx^2 <= r_target."""
    if r_target <= 0:
        raise ValueError("r_target must be > 0")
    if alpha == 0:
        return 2
    dx = float(L) / (nodes - 1)

    def ratio(nt: int) -> float:
        return alpha * (tmax / (nt - 1)) / dx**2

    nt = max(2, int(math.ceil(tmax / (r_target * dx**2 / alpha))) + 1)
    # ceil is off by one when tmax/dt_target is an integer up to round-off
    while ratio(nt) > r_target:
        nt += 1
    while nt > 2 and ratio(nt - 1) <= r_target:
        nt -= 1
    return nt


def refinement_study(
    nodes_list: Sequence[int],
    *,
    r_target: float = 0.4,
    alpha: float = 0.1,
    L: float = 1.0,
    tmax: float = 0.5,
    progress: bool = False,
) -> List[RefinementRow]:
    rows: List[RefinementRow] = []
    prev: Optional[RefinementRow] = None
    for nx in tqdm(sorted(nodes_list), desc="Refining", disable=not progress):
        nt = steps_for_ratio(r_target=r_target, alpha=alpha, L=L, tmax=tmax, nodes=nx)
        result = solve(
            HeatConfig(steps=nt, nodes=nx, diffusivity=alpha, length=L, horizon=tmax)
        )
        p = result.params
        rms = result.error * math.sqrt(p.dx)
        order = None
        if prev is not None and rms > 0 and prev.rms_error > 0:
            order = math.log(prev.rms_error / rms) / math.log(prev.dx / p.dx)
        row = RefinementRow(
            nodes=nx,
            steps=nt,
            dx=p.dx,
            dt=p.dt,
            r=p.r,
            error=result.error,
            rms_error=rms,
            observed_order=order,
        )
        rows.append(row)
        prev = row
    return rows


def format_table(rows: Sequence[RefinementRow]) -> str:
    data = [
        [
            row.nodes,
            row.steps,
            f"{row.dx:.4e}",
            f"{row.dt:.4e}",
            f"{row.r:.4f}",
            f"{row.error:.4e}",
            f"{row.rms_error:.4e}",
            "-" if row.observed_order is None else f"{row.observed_order:.3f}",
        ]
        for row in rows
    ]
    headers = ["nx", "nt", "dx", "dt", "r", "L2 error", "rms error", "order"]
    return tabulate(data, headers=headers, tablefmt="grid")


def _build_parser() -> argparse.ArgumentParser:
    examples = """Examples:
  # Default study: nx = 11, 21, 41, 81 at r <= 0.4
  heat-ftcs-converge

  # Custom meshes and ratio
  heat-ftcs-converge --nodes 10 20 40 80 160 --r 0.25

  # JSON output (useful for scripts)
  heat-ftcs-converge --format json
"""
    parser = argparse.ArgumentParser(
        description=__doc__,
        epilog=examples,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument("--config", type=str, default="", help="Load defaults from YAML")
    parser.add_argument(
        "--nodes",
        type=int,
        nargs="+",
        default=[11, 21, 41, 81],
        help="Spatial node counts to run (default: 11 21 41 81)",
    )
    parser.add_argument(
        "--r",
        dest="r_target",
        type=float,
        default=0.4,
        help="Upper bound for the stability ratio r (default: 0.4)",
    )
    parser.add_argument("--alpha", dest="diffusivity", type=float, default=0.1)
    parser.add_argument("--L", dest="length", type=float, default=1.0)
    parser.add_argument("--tmax", dest="horizon", type=float, default=0.5)
    parser.add_argument(
        "--format",
        choices=["text", "json"],
        default="text",
        help="Output format (default: text)",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> None:
    argv = sys.argv[1:] if argv is None else argv
    pre = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    pre.add_argument("--config", type=str, default="")
    pre_args, _ = pre.parse_known_args(argv)

    parser = _build_parser()
    if pre_args.config:
        cfg = _load_yaml_config_as_overrides(pre_args.config)
        # a single-run mesh from the YAML file is not a refinement sequence
        cfg = {k: v for k, v in cfg.items() if k not in ("nodes", "steps")}
        _apply_config_defaults(parser, cfg)
    args = parser.parse_args(argv)

    if any(n < 3 for n in args.nodes):
        parser.error("every --nodes value must be >= 3")

    rows = refinement_study(
        args.nodes,
        r_target=float(args.r_target),
        alpha=float(args.diffusivity),
        L=float(args.length),
        tmax=float(args.horizon),
        progress=args.format == "text",
    )

    if args.format == "json":
        print(json.dumps([asdict(row) for row in rows], indent=2))
        return

    print(format_table(rows))
    errors = np.array([row.error for row in rows])
    if errors.size > 1 and np.all(np.diff(errors) < 0):
        print("\nThe error decreases monotonically under refinement.")
    elif errors.size > 1:
        print("\nWarning: the error does not decrease monotonically under refinement.")


if __name__ == "__main__":
    main()
