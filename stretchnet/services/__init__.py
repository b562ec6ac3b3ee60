"""
Services Module

Key Submodules:
- networking: Stretch cluster networking providers (MCS)

Usage:
    from stretchnet.services import get_networking_provider

    provider = get_networking_provider("mcs")
    provider.initialize(config, registry)
"""

# Re-export networking module for convenience
from .networking import (
    get_networking_provider,
    BaseNetworkingProvider,
    ClusterEndpointRegistry,
)

__all__ = [
    # Networking
    "get_networking_provider",
    "BaseNetworkingProvider",
    "ClusterEndpointRegistry",
]
