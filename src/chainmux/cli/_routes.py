"""``chainmux routes``: list registered routes per version.

Prints VERSION, METHOD, PATH and the middleware chain of every route,
plus the fallback chain of each version that has one.
"""

import argparse
import sys

from chainmux.access import AccessLogHandler
from chainmux.chain import MiddlewareChain
from chainmux.cli._resolve import resolve_server


def describe_handler(handler: object) -> str:
    """Human-readable middleware list for a registered handler."""
    if isinstance(handler, AccessLogHandler):
        return describe_handler(handler.inner) + " [access log]"
    if isinstance(handler, MiddlewareChain):
        return " -> ".join(getattr(m, "__name__", type(m).__name__) for m in handler.middlewares)
    return getattr(handler, "__name__", type(handler).__name__)


def run_routes(args: argparse.Namespace) -> None:
    try:
        server = resolve_server(args.server)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    rows: list[tuple[str, str, str, str]] = []
    for version, router in server.registry.items():
        for route in router.routes:
            methods = ", ".join(sorted(route.methods))
            rows.append((version, methods, route.path, describe_handler(route.handler)))
        if router.fallback is not None:
            rows.append((version, "*", "(fallback)", describe_handler(router.fallback)))

    if not rows:
        print("No routes registered.", file=sys.stderr)
        return

    widths = [max(len(r[i]) for r in (("VERSION", "METHOD", "PATH", ""), *rows)) for i in range(3)]
    fmt = f"{{:<{widths[0]}}}  {{:<{widths[1]}}}  {{:<{widths[2]}}}  {{}}"
    print(fmt.format("VERSION", "METHOD", "PATH", "CHAIN"))
    print("-" * min(sum(widths) + 6 + max(len(r[3]) for r in rows), 80))
    for row in rows:
        print(fmt.format(*row))
