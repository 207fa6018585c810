"""Server configuration.

ServerConfig is a frozen dataclass, immutable after creation, no
string-key dict lookups.
"""

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Listener configuration. Immutable after creation.

    All fields have sensible defaults. Override what you need::

        config = ServerConfig(host="0.0.0.0", port=8080, workers=4)
    """

    # Listener
    host: str = "127.0.0.1"
    port: int = 8000

    # Process model (0 = let the ASGI server pick from CPU count)
    workers: int = 1
    reload: bool = False

    # Transport logging (chainmux's own sinks are set on the Server)
    log_level: str = "info"

    # Limits
    keep_alive_timeout: float = 5.0
    request_timeout: float = 30.0

    @property
    def addr(self) -> str:
        """The ``host:port`` listen address."""
        return f"{self.host}:{self.port}"
