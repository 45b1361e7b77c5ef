#!/usr/bin/env python3
"""
1D Heat Equation FTCS Simulation Tool

Solves u_t = alpha * u_xx on [0, L] with the explicit forward-time,
centered-space scheme, starting from u(x, 0) = sin(pi x / L) with fixed end
values, and reports the L2 error of the final time step against the exact
solution sin(pi x / L) * exp(-alpha (pi / L)^2 t).

Usage:
    python simulation.py [options]

Parameters:
    Model Parameters:
    --alpha FLOAT     Diffusivity (default: 0.1)
    --L FLOAT         Length of the domain (default: 1.0)
    --tmax FLOAT      Final simulation time (default: 0.5)
    --u0 FLOAT        Boundary value at x = 0 (default: sin(0) of the profile)
    --uL FLOAT        Boundary value at x = L (default: sin(pi) of the profile)

    Discretization:
    --nt INT          Number of time nodes, including t = 0 (default: 10)
    --nx INT          Number of spatial nodes, including both ends (default: 20)

    Output Control:
    --config FILE     Load defaults from a YAML file (CLI flags override it)
    --plots          Print the error report and save solution/error figures (default: yes)
    --surface        Also save a 3D plot of the whole history (default: no)
    --save_data      Save the run to <basename>.npz (default: no)
    --confirm        Skip confirmation prompt if set to yes (default: yes)
    --validate       Reject degenerate inputs, warn when r > 1/2 (default: yes)
    --progress       Show a progress bar while time stepping (default: yes)
    --verbose        Show terminal plots of the initial and final profiles (default: no)

Example:
    python simulation.py --nt 40 --nx 20 --alpha 0.1 --tmax 0.5 --confirm yes

Output:
    - The norm of the error at the final time and dt, dx, r on the console
    - <basename>_solution.{png,jpeg}: FTCS vs exact solution at t = tmax
    - <basename>_error.{png,jpeg}: pointwise error at t = tmax
    - All output files use a basename containing parameter values
"""

from __future__ import annotations

import argparse
import os
import sys
from typing import Any, List, Optional

import numpy as np
import questionary
import termplotlib as tpl
from tabulate import tabulate

from ftcs import FTCSResult, HeatConfig, heat_ftcs, mesh_parameters, validate_config
from stability import max_stable_dt, spectral_radius

YES_NO = ["yes", "no"]

# YAML keys accepted in addition to the argparse destinations.
_YAML_ALIASES = {
    "nt": "steps",
    "nx": "nodes",
    "alpha": "diffusivity",
    "L": "length",
    "tmax": "horizon",
    "plots": "produce_plots",
}


def _flatten_yaml_mapping(data: Any) -> dict[str, Any]:
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise TypeError("YAML config must be a mapping (dict-like) at the top level.")
    out: dict[str, Any] = {}
    for key, value in data.items():
        if not isinstance(key, str):
            raise TypeError("YAML config keys must be strings.")
        if isinstance(value, dict):
            out.update(_flatten_yaml_mapping(value))
        else:
            out[_YAML_ALIASES.get(key, key)] = value
    return out


def _load_yaml_config_as_overrides(path: str) -> dict[str, Any]:
    try:
        import yaml  # type: ignore
    except ModuleNotFoundError as exc:
        raise ModuleNotFoundError(
            "Missing dependency: PyYAML is required for `--config`. "
            "Install it with `pip install pyyaml`."
        ) from exc

    if not os.path.exists(path):
        raise FileNotFoundError(path)
    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f)
    return _flatten_yaml_mapping(raw)


def _apply_config_defaults(parser: argparse.ArgumentParser, cfg: dict[str, Any]) -> None:
    if not cfg:
        return
    by_dest = {a.dest: a for a in parser._actions if getattr(a, "dest", None)}  # pylint: disable=protected-access
    defaults: dict[str, Any] = {}
    for key, value in cfg.items():
        action = by_dest.get(key)
        if action is None:
            continue
        if value is None:
            continue
        # YAML reads bare yes/no as booleans
        if isinstance(value, bool) and action.choices == YES_NO:
            defaults[key] = "yes" if value else "no"
        elif action.type is not None:
            try:
                defaults[key] = action.type(value)  # pylint: disable=not-callable
            except (TypeError, ValueError):
                defaults[key] = action.type(str(value))  # pylint: disable=not-callable
        else:
            defaults[key] = value
    parser.set_defaults(**defaults)


def file_base_name(config: HeatConfig) -> str:
    return (
        f"nt={config.steps}_nx={config.nodes}_alpha={float(config.diffusivity)}"
        f"_L={float(config.length)}_tmax={float(config.horizon)}"
    ).replace(".", "-")


def format_report(result: FTCSResult) -> List[str]:
    """The two console lines: error at the final time, then dt, dx and r."""
    p = result.params
    return [
        "\nNorm of error = %12.3e at t = %8.3f" % (result.error, result.final_time),
        "\tdt, dx, r = %12.3e %12.3e %8.3f" % (p.dt, p.dx, p.r),
    ]


def print_report(result: FTCSResult) -> None:
    for line in format_report(result):
        print(line)


def plot_profile(x: np.ndarray, data: np.ndarray, label: str) -> None:
    """Print a text plot of one spatial profile using termplotlib."""
    print(f"\n# {label}")
    fig = tpl.figure()
    fig.plot(x, data, label=label, width=100, height=24)
    fig.show()


def display_parameters(config: HeatConfig) -> None:
    """Display the run parameters and the derived mesh quantities."""
    p = mesh_parameters(config)

    print("Model Parameters:")
    print(f"\talpha = {config.diffusivity}, L = {config.length}, tmax = {config.horizon}")
    u0 = "initial value" if config.u0 is None else config.u0
    uL = "initial value" if config.uL is None else config.uL
    print(f"\tu(0) = {u0}, u(L) = {uL}, u(x,0) = sin(pi x / L)")
    print("Discretization:")
    print(f"\tnt = {config.steps}, nx = {config.nodes}")

    data = [
        ["dx", f"{p.dx:.6g}"],
        ["dt", f"{p.dt:.6g}"],
        ["r = alpha dt / dx^2", f"{p.r:.6g}"],
        ["1 - 2r", f"{p.r2:.6g}"],
    ]
    if config.nodes >= 3 and config.diffusivity >= 0:
        data.append(["max |g_n|", f"{spectral_radius(r=p.r, nodes=config.nodes):.6g}"])
        dt_max = max_stable_dt(alpha=config.diffusivity, L=config.length, nodes=config.nodes)
        data.append(["largest stable dt", f"{dt_max:.6g}"])
    print()
    print(tabulate(data, headers=["Quantity", "Value"], tablefmt="grid"))
    if p.r > 0.5:
        print(f"\nr = {p.r:.3f} > 0.5: the explicit scheme is unstable for this mesh.")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Solve the 1D heat equation with the explicit FTCS scheme",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument(
        "--config",
        type=str,
        default="",
        help="Load defaults from YAML (CLI flags override it)",
    )
    parser.add_argument(
        "--nt", "--steps",
        dest="steps",
        type=int,
        default=10,
        help="Number of time nodes, including t = 0 (default: 10)",
    )
    parser.add_argument(
        "--nx", "--nodes",
        dest="nodes",
        type=int,
        default=20,
        help="Number of spatial nodes, including both ends (default: 20)",
    )
    parser.add_argument(
        "--alpha",
        dest="diffusivity",
        type=float,
        default=0.1,
        help="Diffusivity (default: 0.1)",
    )
    parser.add_argument(
        "--L",
        dest="length",
        type=float,
        default=1.0,
        help="Length of the domain (default: 1.0)",
    )
    parser.add_argument(
        "--tmax",
        dest="horizon",
        type=float,
        default=0.5,
        help="Final simulation time (default: 0.5)",
    )
    parser.add_argument(
        "--u0",
        type=float,
        default=None,
        help="Boundary value at x = 0 for t > 0 (default: keep the initial value)",
    )
    parser.add_argument(
        "--uL",
        type=float,
        default=None,
        help="Boundary value at x = L for t > 0 (default: keep the initial value)",
    )
    parser.add_argument(
        "--plots",
        dest="produce_plots",
        choices=YES_NO,
        default="yes",
        help="Print the error report and save solution/error figures (default: yes)",
    )
    parser.add_argument(
        "--surface",
        choices=YES_NO,
        default="no",
        help="Also save <basename>_history.{png,jpeg} (default: no)",
    )
    parser.add_argument(
        "--save_data",
        choices=YES_NO,
        default="no",
        help="Save x, t, U and the run config to <basename>.npz (default: no)",
    )
    parser.add_argument(
        "--max_frames",
        type=int,
        default=500,
        help="Maximum number of time columns stored by --save_data (default: 500)",
    )
    parser.add_argument(
        "--output_dir",
        type=str,
        default="",
        help="Directory for output files (default: current directory)",
    )
    parser.add_argument(
        "--confirm",
        choices=YES_NO,
        default="yes",
        help="Skip confirmation prompt if set to yes (default: yes)",
    )
    parser.add_argument(
        "--validate",
        choices=YES_NO,
        default="yes",
        help="Reject degenerate inputs and warn when r > 1/2 (default: yes)",
    )
    parser.add_argument(
        "--progress",
        choices=YES_NO,
        default="yes",
        help="Show a progress bar while time stepping (default: yes)",
    )
    parser.add_argument(
        "--verbose",
        choices=YES_NO,
        default="no",
        help="Show terminal plots of the initial and final profiles (default: no)",
    )
    return parser


def parse_args(argv: Optional[List[str]] = None) -> tuple[argparse.Namespace, HeatConfig]:
    """
    Parse command-line arguments into the namespace and a HeatConfig.

    A YAML file given with --config provides defaults; explicit flags win.
    """
    argv = sys.argv[1:] if argv is None else argv
    pre = argparse.ArgumentParser(add_help=False, allow_abbrev=False)
    pre.add_argument("--config", type=str, default="")
    pre_args, _ = pre.parse_known_args(argv)

    parser = _build_parser()
    if pre_args.config:
        _apply_config_defaults(parser, _load_yaml_config_as_overrides(pre_args.config))

    try:
        import argcomplete  # type: ignore
    except ModuleNotFoundError:
        argcomplete = None
    if argcomplete is not None:
        argcomplete.autocomplete(parser)

    args = parser.parse_args(argv)
    config = HeatConfig(
        steps=int(args.steps),
        nodes=int(args.nodes),
        diffusivity=float(args.diffusivity),
        length=float(args.length),
        horizon=float(args.horizon),
        produce_plots=args.produce_plots == "yes",
        u0=None if args.u0 is None else float(args.u0),
        uL=None if args.uL is None else float(args.uL),
        validate=args.validate == "yes",
    )
    return args, config


def run(
    config: HeatConfig,
    FileBaseName: str = "heat_ftcs",
    *,
    surface: bool = False,
    save_data: bool = False,
    max_frames: int = 500,
    verbose: bool = False,
    progress: bool = True,
) -> FTCSResult:
    """
    Solve, then hand the result to the optional consumers: console report,
    figures, history surface and .npz output.
    """
    result = heat_ftcs(config, file_base_name=FileBaseName, progress=progress)

    if surface:
        from plots import create_history_surface

        SetupDes = (
            f"FTCS: alpha = {config.diffusivity}, L = {config.length}, "
            f"nx = {config.nodes}, nt = {config.steps}, r = {result.params.r:.3f}"
        )
        paths = create_history_surface(
            result.t, result.x, result.U, SetupDes, f"{FileBaseName}_history"
        )
        for path in paths:
            print(f"    - Image: {path}")

    if save_data:
        from npz_io import save_result_npz

        filename = save_result_npz(
            f"{FileBaseName}.npz", result, max_frames=max_frames
        )
        print(f"Data saved as: {filename}")

    if verbose:
        plot_profile(result.x, result.U[:, 0], "u(x, 0)")
        plot_profile(result.x, result.final_field, f"u(x, {result.final_time:g})")

    return result


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main function to parse arguments, display the parameters and run the solver.

    Steps:
    1. Parse command-line arguments (and an optional YAML file) into a HeatConfig
    2. Display the parameters and the derived dx, dt, r
    3. Generate a base name for output files based on the parameters
    4. Prompt the user for confirmation to proceed
    5. Run the solver and the requested outputs, or exit if declined
    """
    args, config = parse_args(argv)
    if config.validate:
        validate_config(config)

    display_parameters(config)

    basename = file_base_name(config)
    if args.output_dir:
        os.makedirs(args.output_dir, exist_ok=True)
        basename = os.path.join(args.output_dir, basename)
    print(f"\nOutput files will be saved with the basename:\n\t {basename}\n")

    if (
        args.confirm == "yes"
        or questionary.confirm("Do you want to continue the simulation?").ask()
    ):
        print("Continuing simulation...")
        run(
            config,
            basename,
            surface=args.surface == "yes",
            save_data=args.save_data == "yes",
            max_frames=int(args.max_frames),
            verbose=args.verbose == "yes",
            progress=args.progress == "yes",
        )
    else:
        print("Exiting simulation.")
        sys.exit(0)


if __name__ == "__main__":
    main()
