"""Server import resolution: ``"module:attribute"`` strings to Server instances.

Shared by ``chainmux run`` and ``chainmux routes``.
"""

import importlib
from typing import Any

from chainmux.app import Server


def resolve_server(import_string: str) -> Server[Any]:
    """Resolve an import string to a chainmux ``Server``.

    Accepts ``"module:attribute"``; the attribute defaults to ``server``.
    A callable that is not a ``Server`` is treated as a factory and called
    with no arguments.

    Raises:
        ModuleNotFoundError: If the module cannot be imported.
        AttributeError: If the attribute does not exist on the module.
        TypeError: If the result is not a ``Server``, or a factory failed.
    """
    module_path, _, attr_name = import_string.partition(":")
    module = importlib.import_module(module_path)
    obj = getattr(module, attr_name or "server")

    if callable(obj) and not isinstance(obj, Server):
        try:
            obj = obj()
        except Exception as exc:
            msg = f"Factory function {import_string!r} raised an error: {exc}"
            raise TypeError(msg) from exc

    if not isinstance(obj, Server):
        msg = f"{import_string!r} resolved to {type(obj).__name__}, not a chainmux.Server instance"
        raise TypeError(msg)

    return obj
