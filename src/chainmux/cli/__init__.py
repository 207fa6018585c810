"""Chainmux CLI: start a server or list its routes.

Entry point registered as ``chainmux`` in ``pyproject.toml``::

    [project.scripts]
    chainmux = "chainmux.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``chainmux`` command."""
    parser = argparse.ArgumentParser(
        prog="chainmux",
        description="Chainmux: versioned routing onto middleware chains.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- chainmux run -----------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start serving")
    run_parser.add_argument("server", help="Import string (e.g. myapi:server)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Worker count (0=auto-detect)",
    )

    # -- chainmux routes --------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("server", help="Import string (e.g. myapi:server)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from chainmux.cli._run import run_command

        run_command(args)
    elif args.command == "routes":
        from chainmux.cli._routes import run_routes

        run_routes(args)
