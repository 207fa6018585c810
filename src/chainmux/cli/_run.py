"""``chainmux run``: resolve a server and call ``listen()``."""

import argparse
import sys
from dataclasses import replace

from chainmux.cli._resolve import resolve_server


def run_command(args: argparse.Namespace) -> None:
    """Apply CLI overrides to the server's config, then block in ``listen()``."""
    try:
        server = resolve_server(args.server)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    overrides = {
        key: value
        for key, value in (("host", args.host), ("port", args.port), ("workers", args.workers))
        if value is not None
    }
    if overrides:
        server.config = replace(server.config, **overrides)

    server.listen()
