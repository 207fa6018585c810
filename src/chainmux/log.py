"""Logger helpers for the status and access sinks.

Any ``logging.Logger`` works as a sink. ``new_simple_logger`` is a
shortcut for the common case: one stderr handler, a compact format.
"""

import logging
import sys

SIMPLE_FORMAT = "%(asctime)s %(name)s %(levelname)-8s %(message)s"


def new_simple_logger(name: str, level: int | str = logging.INFO) -> logging.Logger:
    """Return logger *name* writing to stderr in ``SIMPLE_FORMAT``.

    Idempotent: calling it twice for the same name does not stack handlers.
    """
    logger = logging.getLogger(name)
    logger.setLevel(level)
    if not any(getattr(h, "_chainmux_simple", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(SIMPLE_FORMAT))
        handler._chainmux_simple = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    logger.propagate = False
    return logger
