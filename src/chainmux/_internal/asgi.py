"""Raw ASGI type aliases.

Only the transport-facing modules (server handler, sender, test client)
touch these. Middlewares see ``Request`` and ``ResponseWriter`` instead.
"""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]
