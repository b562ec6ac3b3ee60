"""
Stretch Cluster Networking Module - Multi-Cluster Services

This module contains the MCS networking provider for stretch clusters:
- McsNetworkingProvider: Ensures Services/ServiceExports and derives DNS names
- ExportResourceGateway: ServiceExport access on one cluster
- DnsNameFormatter: MCS DNS names, listeners, quorum voters, certificate SANs
- ReconciliationDeduplicator: Per-pass deduplication of shared work
- ClusterEndpointRegistry: API clients of the central and remote clusters

DNS Formats:
- service: <service>.<cluster-id>.<namespace>.svc.<clusterset-domain>
- pod:     <pod>.<cluster-id>.<service>.<namespace>.svc.<clusterset-domain>
"""

from .base import BaseNetworkingProvider
from .deduplication import ClaimOutcome, ReconciliationDeduplicator
from .dns import DnsNameFormatter, resolve_standard_port
from .exceptions import (
    ConfigurationError,
    NetworkingError,
    PortNotFoundError,
    ResourceNotFoundError,
    TransientClusterApiError,
    UnknownClusterError,
)
from .factory import NetworkingProviderFactory, get_networking_provider
from .mcs_provider import McsNetworkingProvider
from .models import (
    ClusterMembership,
    ControllerPodInfo,
    NetworkingResource,
    NetworkingTarget,
)
from .registry import ClusterEndpointRegistry
from .service_export import ExportResourceGateway, build_service_export

__all__ = [
    # Provider
    "BaseNetworkingProvider",
    "McsNetworkingProvider",
    "NetworkingProviderFactory",
    "get_networking_provider",
    # Components
    "ClusterEndpointRegistry",
    "ExportResourceGateway",
    "build_service_export",
    "DnsNameFormatter",
    "resolve_standard_port",
    "ReconciliationDeduplicator",
    "ClaimOutcome",
    # Models
    "ClusterMembership",
    "ControllerPodInfo",
    "NetworkingResource",
    "NetworkingTarget",
    # Errors
    "NetworkingError",
    "ConfigurationError",
    "UnknownClusterError",
    "ResourceNotFoundError",
    "PortNotFoundError",
    "TransientClusterApiError",
]
