"""
Cluster Endpoint Registry

Holds one Kubernetes API client per physical cluster in the stretch topology.
Every cluster gets its own isolated ApiClient so concurrent calls against
different clusters never share auth headers or TLS settings.
"""

from kubernetes import client, config
from kubernetes.config import new_client_from_config
import logging
from typing import Dict, Iterator, List, Optional

from .exceptions import ConfigurationError
from .models import ClusterMembership

logger = logging.getLogger(__name__)


class ClusterEndpointRegistry:
    """
    Validated set of cluster memberships.

    Exactly one membership must be central and every membership must carry
    an API client.
    """

    def __init__(self, memberships: List[ClusterMembership]):
        self._memberships: Dict[str, ClusterMembership] = {}
        central: Optional[ClusterMembership] = None

        for membership in memberships:
            if not membership.cluster_id:
                raise ConfigurationError("Cluster membership without a cluster id")
            if membership.api_client is None:
                raise ConfigurationError(
                    f"No API client configured for cluster '{membership.cluster_id}'"
                )
            if membership.cluster_id in self._memberships:
                raise ConfigurationError(f"Duplicate cluster id: '{membership.cluster_id}'")
            if membership.is_central:
                if central is not None:
                    raise ConfigurationError(
                        f"Multiple central clusters: '{central.cluster_id}' and '{membership.cluster_id}'"
                    )
                central = membership
            self._memberships[membership.cluster_id] = membership

        if central is None:
            raise ConfigurationError("No central cluster configured")
        self._central = central

    @property
    def central(self) -> ClusterMembership:
        return self._central

    @property
    def cluster_ids(self) -> List[str]:
        return list(self._memberships.keys())

    @property
    def remote_cluster_ids(self) -> List[str]:
        return [cid for cid in self._memberships if cid != self._central.cluster_id]

    def get(self, cluster_id: str) -> Optional[ClusterMembership]:
        return self._memberships.get(cluster_id)

    def __contains__(self, cluster_id: str) -> bool:
        return cluster_id in self._memberships

    def __iter__(self) -> Iterator[ClusterMembership]:
        return iter(self._memberships.values())

    def __len__(self) -> int:
        return len(self._memberships)

    def close(self) -> None:
        """Close all API clients."""
        for membership in self._memberships.values():
            try:
                membership.api_client.close()
            except Exception as e:
                logger.warning(f"[MCS] Failed to close API client for {membership.cluster_id}: {e}")

    @classmethod
    def from_settings(cls, settings) -> "ClusterEndpointRegistry":
        """
        Build a registry from kubeconfig contexts.

        The central cluster uses `mcs_central_kube_context` when set, otherwise
        the in-cluster service account with a fallback to the current kubeconfig
        context. Remote clusters always use their named kubeconfig context.

        Raises:
            ConfigurationError: If a context cannot be loaded
        """
        try:
            remote_contexts = settings.remote_kube_contexts
        except ValueError as e:
            raise ConfigurationError(str(e)) from e

        memberships = [
            ClusterMembership(
                cluster_id=settings.mcs_central_cluster_id,
                is_central=True,
                api_client=_load_central_client(settings.mcs_central_kube_context),
            )
        ]

        for cluster_id, context in remote_contexts.items():
            try:
                api_client = new_client_from_config(context=context)
            except config.ConfigException as e:
                raise ConfigurationError(
                    f"Cannot load kubeconfig context '{context}' for cluster '{cluster_id}'"
                ) from e
            logger.info(f"[MCS] Loaded context {context} for remote cluster {cluster_id}")
            memberships.append(ClusterMembership(cluster_id=cluster_id, api_client=api_client))

        return cls(memberships)


def _load_central_client(context: str) -> client.ApiClient:
    if context:
        try:
            api_client = new_client_from_config(context=context)
        except config.ConfigException as e:
            raise ConfigurationError(f"Cannot load kubeconfig context '{context}'") from e
        logger.info(f"[MCS] Loaded context {context} for central cluster")
        return api_client

    try:
        # Try in-cluster config first (for production)
        configuration = client.Configuration()
        config.load_incluster_config(client_configuration=configuration)
        logger.info("[MCS] Loaded in-cluster configuration for central cluster")
        return client.ApiClient(configuration)
    except config.ConfigException:
        try:
            # Fall back to kubeconfig (for development)
            api_client = new_client_from_config()
            logger.info("[MCS] Loaded kubeconfig for central cluster")
            return api_client
        except config.ConfigException as e:
            logger.error(f"[MCS] Failed to load Kubernetes config: {e}")
            raise ConfigurationError("Cannot load Kubernetes configuration") from e
