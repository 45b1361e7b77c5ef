#!/usr/bin/env python3
from __future__ import annotations

import argparse
import os
from dataclasses import dataclass
from typing import List, Optional

import numpy as np

from npz_io import load_result_npz
from plots import create_history_surface, plot_final_solution, plot_pointwise_error


@dataclass(frozen=True)
class PlotConfig:
    npz_file: str
    out_base: str
    overwrite: bool
    surface: bool


def _build_arg_parser() -> argparse.ArgumentParser:
    examples = """Examples:
  # Render <basename>_solution and <basename>_error next to the .npz
  heat-ftcs-plot runs/nt=40_nx=20_alpha=0-1_L=1-0_tmax=0-5.npz

  # Put outputs in a specific directory with a new basename
  heat-ftcs-plot runs/some_run.npz --output_dir images --basename some_run

  # Also render the 3D history surface (<basename>_history.{png,jpeg})
  heat-ftcs-plot runs/some_run.npz --surface yes
"""
    parser = argparse.ArgumentParser(
        description=(
            "Generate the final-time solution and error plots from a saved .npz.\n\n"
            "Intended for batch workflows: run `heat-ftcs-sim --plots no --save_data yes`,\n"
            "then render the figures later from the saved data."
        ),
        epilog=examples,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "npz_file",
        type=str,
        help="Input .npz created by heat-ftcs-sim",
    )
    parser.add_argument(
        "--out_base",
        type=str,
        default="",
        help=(
            "Output base path (without extension). "
            "Default: input path with '.npz' stripped."
        ),
    )
    parser.add_argument(
        "--output_dir",
        type=str,
        default="",
        help="Output directory (used with --basename; overrides directory of --out_base if provided)",
    )
    parser.add_argument(
        "--basename",
        type=str,
        default="",
        help="Output basename (used with --output_dir)",
    )
    parser.add_argument(
        "--overwrite",
        choices=["yes", "no"],
        default="yes",
        help="Overwrite existing output images (default: yes)",
    )
    parser.add_argument(
        "--surface",
        choices=["yes", "no"],
        default="no",
        help="Also render <out_base>_history.{png,jpeg} (default: no)",
    )
    return parser


def _parse_args(argv: Optional[List[str]] = None) -> PlotConfig:
    parser = _build_arg_parser()
    try:
        import argcomplete  # type: ignore
    except ModuleNotFoundError:
        argcomplete = None
    if argcomplete is not None:
        argcomplete.autocomplete(parser)
    args = parser.parse_args(argv)

    npz_file = args.npz_file
    if not npz_file.endswith(".npz"):
        raise ValueError(f"Expected a .npz file, got: {npz_file!r}")
    if not os.path.exists(npz_file):
        raise FileNotFoundError(npz_file)

    out_base = (args.out_base or "").strip()
    output_dir = (args.output_dir or "").strip()
    basename = (args.basename or "").strip()

    if output_dir or basename:
        if not output_dir or not basename:
            raise ValueError("Use --output_dir and --basename together (or neither).")
        if os.sep in basename or (os.altsep and os.altsep in basename):
            raise ValueError("`--basename` must not contain path separators; use `--output_dir`.")
        os.makedirs(output_dir, exist_ok=True)
        out_base = os.path.join(output_dir, basename)

    if not out_base:
        out_base = os.path.splitext(npz_file)[0]

    return PlotConfig(
        npz_file=npz_file,
        out_base=out_base,
        overwrite=args.overwrite == "yes",
        surface=args.surface == "yes",
    )


def _output_paths(out_base: str, *, surface: bool) -> List[str]:
    suffixes = ["_solution", "_error"] + (["_history"] if surface else [])
    return [f"{out_base}{s}.{ext}" for s in suffixes for ext in ("png", "jpeg")]


def _maybe_remove_existing(out_base: str, *, overwrite: bool, surface: bool) -> None:
    if overwrite:
        return
    existing = [p for p in _output_paths(out_base, surface=surface) if os.path.exists(p)]
    if existing:
        raise FileExistsError(
            "Refusing to overwrite existing outputs (use --overwrite yes): "
            + ", ".join(existing)
        )


def main(argv: Optional[List[str]] = None) -> None:
    cfg = _parse_args(argv)

    data = load_result_npz(cfg.npz_file)
    config = data.get("config", {})

    x_values = np.asarray(data["x_values"], dtype=np.float64)
    t_values = np.asarray(data["t_values"], dtype=np.float64)
    U = np.asarray(data["U"], dtype=np.float64)
    exact = np.asarray(data["exact"], dtype=np.float64)

    _maybe_remove_existing(cfg.out_base, overwrite=cfg.overwrite, surface=cfg.surface)

    written = plot_final_solution(x_values, U[:, -1], exact, f"{cfg.out_base}_solution")
    written += plot_pointwise_error(x_values, U[:, -1], exact, f"{cfg.out_base}_error")

    if cfg.surface:
        SetupDes = (
            f"FTCS: alpha = {config.get('diffusivity')}, L = {config.get('length')}, "
            f"nx = {config.get('nodes')}, nt = {config.get('steps')}, r = {data['r']:.3f}"
        )
        written += create_history_surface(
            t_values, x_values, U, SetupDes, f"{cfg.out_base}_history"
        )

    print(f"Norm of error = {data['error']:12.3e} at t = {float(t_values[-1]):8.3f}")
    for path in written:
        print(f"wrote: {path}")


if __name__ == "__main__":
    main()
