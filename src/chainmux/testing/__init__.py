"""Test utilities for chainmux servers.

    from chainmux.testing import TestClient, call_chain
"""

from chainmux.testing.client import TestClient
from chainmux.testing.direct import ChainResult, call_chain

__all__ = [
    "ChainResult",
    "TestClient",
    "call_chain",
]
