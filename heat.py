#!/usr/bin/env python3
"""
Single `heat-ftcs` entry point.

The first argument picks the command and everything after it is handed
unchanged to that command's own parser, so

    heat-ftcs converge --nodes 11 21 --format json

behaves exactly like `heat-ftcs-converge --nodes 11 21 --format json`.
"""

from __future__ import annotations

import argparse
import importlib
import sys
from typing import Dict, List, Optional, Tuple

# command -> (module providing main(argv), one-line help)
COMMANDS: Dict[str, Tuple[str, str]] = {
    "sim": ("simulation", "run one FTCS simulation (heat-ftcs-sim)"),
    "converge": ("convergence", "mesh refinement study at fixed r (heat-ftcs-converge)"),
    "plot": ("plot_from_npz", "render figures from a saved .npz (heat-ftcs-plot)"),
}


def _distribution_version() -> str:
    from importlib.metadata import PackageNotFoundError, version

    try:
        return str(version("heat-ftcs"))
    except PackageNotFoundError:  # pragma: no cover
        return ""


def _build_parser() -> argparse.ArgumentParser:
    listing = "\n".join(f"  {name:<9} {text}" for name, (_, text) in COMMANDS.items())
    parser = argparse.ArgumentParser(
        prog="heat-ftcs",
        description="1D heat equation FTCS toolbox.\n\nCommands:\n" + listing,
        epilog=(
            "Options after the command belong to that command, e.g.\n"
            "  heat-ftcs sim --nt 40 --nx 20 --alpha 0.1 --tmax 0.5\n"
            "  heat-ftcs converge --nodes 11 21 41 81 --r 0.4\n"
            "  heat-ftcs plot runs/some_run.npz --surface yes"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        allow_abbrev=False,
    )
    parser.add_argument(
        "--version",
        action="store_true",
        help="Print installed package version and exit",
    )
    parser.add_argument("cmd", nargs="?", choices=list(COMMANDS), metavar="command")
    return parser


def run_command(cmd: str, argv: List[str]) -> None:
    """Import the module behind cmd and call its main with argv."""
    module_name, _ = COMMANDS[cmd]
    importlib.import_module(module_name).main(argv)


def main(argv: Optional[List[str]] = None) -> None:
    argv = list(sys.argv[1:] if argv is None else argv)
    if argv and argv[0] in COMMANDS:
        run_command(argv[0], argv[1:])
        return

    parser = _build_parser()
    try:
        import argcomplete  # type: ignore
    except ModuleNotFoundError:
        argcomplete = None
    if argcomplete is not None:
        argcomplete.autocomplete(parser)

    args, rest = parser.parse_known_args(argv)
    if args.version:
        print(f"heat-ftcs {_distribution_version() or 'unknown'}")
        return
    if args.cmd is None:
        if rest:
            parser.error(f"unrecognized arguments: {' '.join(rest)}")
        parser.print_help(sys.stderr)
        return
    run_command(args.cmd, rest)


if __name__ == "__main__":
    main()
