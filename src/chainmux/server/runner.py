"""Blocking listener: runs a pounce ASGI server around a chainmux Server.

Pounce's ``run()`` takes an import string, but ``Server.listen()`` has a
live object, so ``pounce.Server`` is used directly with the ASGI callable.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from chainmux.config import ServerConfig


def run_server(app: object, config: ServerConfig) -> None:
    """Bind ``config.addr`` and serve *app* until the process ends.

    Requires the ``server`` extra (``pip install chainmux[server]``).
    Any failure to bind or serve propagates to the caller.
    """
    from pounce.config import ServerConfig as PounceConfig
    from pounce.server import Server as PounceServer

    pounce_config = PounceConfig(
        host=config.host,
        port=config.port,
        workers=config.workers,
        reload=config.reload,
        log_level=config.log_level,
        keep_alive_timeout=config.keep_alive_timeout,
        request_timeout=config.request_timeout,
    )
    PounceServer(pounce_config, app).run()
