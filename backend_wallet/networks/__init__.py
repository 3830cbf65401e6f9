"""
Network registry and asset references shared by every engine component.
"""

from backend_wallet.networks.registry import (  # noqa: F401
    NetworkDescriptor,
    NetworkRegistry,
    default_registry,
)

__all__ = ["NetworkDescriptor", "NetworkRegistry", "default_registry"]
