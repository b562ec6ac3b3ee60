"""
Networking Provider Factory

Creates and caches networking providers by identifier. The host controller
selects a provider by the identifier in its stretch configuration ("mcs").
"""

import logging
from typing import Dict, Optional, Type

from .base import BaseNetworkingProvider
from .exceptions import ConfigurationError
from .mcs_provider import PROVIDER_IDENTIFIER, McsNetworkingProvider

logger = logging.getLogger(__name__)

# Cached provider instances (singleton pattern)
_providers: Dict[str, BaseNetworkingProvider] = {}

_provider_classes: Dict[str, Type[BaseNetworkingProvider]] = {
    PROVIDER_IDENTIFIER: McsNetworkingProvider,
}


class NetworkingProviderFactory:
    """
    Factory for networking providers.

    Providers are created on first use and cached, so the reconciliation
    deduplication state lives as long as the process.
    """

    @staticmethod
    def create_provider(identifier: str) -> BaseNetworkingProvider:
        """
        Create or get the cached provider for an identifier.

        Raises:
            ConfigurationError: If no provider is registered for the identifier
        """
        identifier = identifier.lower().strip()

        if identifier in _providers:
            return _providers[identifier]

        provider_class = _provider_classes.get(identifier)
        if provider_class is None:
            available = ", ".join(sorted(_provider_classes))
            raise ConfigurationError(
                f"Unknown networking provider: '{identifier}'. Available providers: {available}"
            )

        provider = provider_class()
        _providers[identifier] = provider
        logger.info(f"[MCS] Created networking provider: {identifier}")
        return provider

    @staticmethod
    def register_provider(identifier: str, provider_class: Type[BaseNetworkingProvider]) -> None:
        """Register a provider class under an identifier."""
        _provider_classes[identifier.lower().strip()] = provider_class

    @staticmethod
    def clear_cache() -> None:
        """Clear cached provider instances (for testing)."""
        global _providers
        _providers = {}


def get_networking_provider(identifier: Optional[str] = None) -> BaseNetworkingProvider:
    """
    Get a networking provider.

    Args:
        identifier: Provider identifier (default: "mcs")

    Returns:
        Provider instance
    """
    return NetworkingProviderFactory.create_provider(identifier or PROVIDER_IDENTIFIER)
