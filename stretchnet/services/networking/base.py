"""
Abstract Base Networking Provider

Defines the interface a stretch cluster networking provider offers to the
host controller. The host calls ensure_networking_resources once per pod per
reconciliation pass, and uses the derive_* methods to render broker
configuration and certificates.
"""

from abc import ABC, abstractmethod
from typing import Dict, List, Mapping, Optional

from .models import ControllerPodInfo, NetworkingResource, NetworkingTarget
from .registry import ClusterEndpointRegistry


class BaseNetworkingProvider(ABC):
    """
    Abstract base class for stretch cluster networking providers.

    This interface provides:
    - Resource lifecycle (ensure, remove)
    - DNS name derivation (service, pod, listeners, voters, SANs)
    - Endpoint discovery
    """

    @abstractmethod
    def provider_identifier(self) -> str:
        """Return the identifier the host uses to select this provider."""
        pass

    @abstractmethod
    def initialize(
        self,
        config: Optional[Mapping[str, str]],
        registry: ClusterEndpointRegistry
    ) -> None:
        """
        Initialize the provider.

        Args:
            config: Provider configuration (string values)
            registry: Endpoints of the central and remote clusters

        Raises:
            ConfigurationError: If cluster endpoints are missing
        """
        pass

    # =========================================================================
    # RESOURCE LIFECYCLE
    # =========================================================================

    @abstractmethod
    async def ensure_networking_resources(
        self,
        target: NetworkingTarget
    ) -> List[NetworkingResource]:
        """
        Ensure the networking resources for one pod exist.

        Args:
            target: Pod, cluster and reconciliation pass to reconcile

        Returns:
            Resources created or updated by this call
        """
        pass

    @abstractmethod
    async def remove_networking_resources(
        self,
        namespace: str,
        pod_name: str,
        cluster_id: str
    ) -> None:
        """
        Remove the networking resources of a pod.

        Args:
            namespace: Namespace of the pod
            pod_name: Pod name
            cluster_id: Cluster the pod ran in
        """
        pass

    # =========================================================================
    # DNS DERIVATION
    # =========================================================================

    @abstractmethod
    def derive_service_dns_name(self, namespace: str, service_name: str, cluster_id: str) -> str:
        pass

    @abstractmethod
    def derive_pod_dns_name(self, namespace: str, service_name: str, pod_name: str, cluster_id: str) -> str:
        pass

    @abstractmethod
    def derive_advertised_listeners(
        self,
        namespace: str,
        pod_name: str,
        cluster_id: str,
        listeners: Dict[str, str],
        stretched_cluster_name: str
    ) -> str:
        """
        Build the advertised listeners of a broker.

        Args:
            namespace: Namespace of the stretched cluster
            pod_name: Broker pod name
            cluster_id: Cluster the pod runs in
            listeners: Listener name -> port name
            stretched_cluster_name: Logical stretched cluster name

        Returns:
            Comma-separated "LISTENER://host:port" entries
        """
        pass

    @abstractmethod
    def derive_quorum_voters(
        self,
        namespace: str,
        controllers: List[ControllerPodInfo],
        port_name: str
    ) -> str:
        """
        Build the controller quorum voters string.

        Returns:
            Comma-separated "nodeId@host:port" entries, in the given order
        """
        pass

    @abstractmethod
    def derive_certificate_sans(self, namespace: str, pod_name: str, cluster_id: str) -> List[str]:
        pass

    # =========================================================================
    # DISCOVERY
    # =========================================================================

    @abstractmethod
    async def discover_pod_endpoint(
        self,
        namespace: str,
        pod_name: str,
        cluster_id: str,
        port_name: str
    ) -> str:
        """
        Resolve the "host:port" endpoint of a pod for a named port.

        Raises:
            ResourceNotFoundError: If the pod's service does not exist
            PortNotFoundError: If the service has no port with that name
        """
        pass
