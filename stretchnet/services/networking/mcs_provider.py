"""
MCS Networking Provider

Makes every pod of a stretched cluster resolvable by DNS from all clusters of
the stretch topology through the Multi-Cluster Services API:

- Remote clusters: one headless Service per cluster covering all brokers,
  plus a ServiceExport for it.
- Central cluster: only the ServiceExport (the stretched cluster's own
  controller creates the Service there).

The Service is required infrastructure: failures propagate. The ServiceExport
is best-effort: a missing MCS implementation must not block the pod and
volume reconciliation of the stretched cluster, so export failures are only
logged. The next reconciliation pass checks again and creates what is missing.
"""

from kubernetes import client
from kubernetes.client.rest import ApiException
import asyncio
import logging
from functools import lru_cache
from typing import Any, Dict, List, Mapping, Optional

from ...config import get_settings
from .base import BaseNetworkingProvider
from .deduplication import ClaimOutcome, ReconciliationDeduplicator
from .dns import DnsNameFormatter, PortResolver, resolve_standard_port
from .exceptions import (
    ConfigurationError,
    PortNotFoundError,
    ResourceNotFoundError,
    TransientClusterApiError,
    UnknownClusterError,
)
from .manifests import (
    create_headless_service_manifest,
    create_service_export_manifest,
    service_differs,
)
from .models import (
    ClusterMembership,
    ControllerPodInfo,
    NetworkingResource,
    NetworkingTarget,
    brokers_service_name,
)
from .registry import ClusterEndpointRegistry
from .service_export import API_VERSION, KIND, ExportResourceGateway

logger = logging.getLogger(__name__)

PROVIDER_IDENTIFIER = "mcs"
PER_POD_SERVICE_SUFFIX = "-mcs"


@lru_cache()
def _serializer() -> client.ApiClient:
    return client.ApiClient()


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


class McsNetworkingProvider(BaseNetworkingProvider):
    """
    Networking provider based on ServiceExport resources.

    Safe to share between concurrent invocations: the only mutable shared
    state is the deduplicator, everything else is read-only after
    initialize().
    """

    def __init__(
        self,
        deduplicator: Optional[ReconciliationDeduplicator] = None,
        port_resolver: PortResolver = resolve_standard_port
    ):
        settings = get_settings()

        self.deduplicator = deduplicator or ReconciliationDeduplicator()
        self.port_resolver = port_resolver
        self.clusterset_domain = settings.mcs_clusterset_domain
        self.require_namespace_sameness = settings.mcs_require_namespace_sameness
        self.strict_cluster_resolution = settings.mcs_strict_cluster_resolution
        self.dns = DnsNameFormatter(self.clusterset_domain, port_resolver)

        self.registry: Optional[ClusterEndpointRegistry] = None
        self.gateways: Dict[str, ExportResourceGateway] = {}
        self.core_v1: Dict[str, client.CoreV1Api] = {}

    def provider_identifier(self) -> str:
        return PROVIDER_IDENTIFIER

    def initialize(
        self,
        config: Optional[Mapping[str, str]],
        registry: ClusterEndpointRegistry
    ) -> None:
        # ServiceExport CRD presence is not checked here, export calls fail when attempted
        if registry is None or len(registry) == 0:
            raise ConfigurationError("No cluster endpoints configured")

        config = config or {}
        if "clustersetDomain" in config:
            self.clusterset_domain = config["clustersetDomain"]
        if "requireNamespaceSameness" in config:
            self.require_namespace_sameness = _parse_bool(config["requireNamespaceSameness"])
        if "strictClusterResolution" in config:
            self.strict_cluster_resolution = _parse_bool(config["strictClusterResolution"])
        self.dns = DnsNameFormatter(self.clusterset_domain, self.port_resolver)

        self.registry = registry
        self.gateways = {}
        self.core_v1 = {}
        for membership in registry:
            self.gateways[membership.cluster_id] = ExportResourceGateway(
                membership.api_client, membership.cluster_id
            )
            self.core_v1[membership.cluster_id] = client.CoreV1Api(membership.api_client)
            logger.debug(f"[MCS] Initialized gateway for cluster {membership.cluster_id}")

        logger.info(
            f"[MCS] Provider initialized with clustersetDomain={self.clusterset_domain}, "
            f"requireNamespaceSameness={self.require_namespace_sameness}, "
            f"clusters={registry.cluster_ids} (central: {registry.central.cluster_id})"
        )

    # =========================================================================
    # CLUSTER RESOLUTION
    # =========================================================================

    def _resolve_membership(self, cluster_id: str, context: str = "") -> ClusterMembership:
        if self.registry is None:
            raise ConfigurationError("MCS provider used before initialize()")

        membership = self.registry.get(cluster_id)
        if membership is not None:
            return membership

        if self.strict_cluster_resolution:
            raise UnknownClusterError(cluster_id)

        central = self.registry.central
        logger.warning(
            f"[MCS] {context}: No endpoint for cluster {cluster_id}, "
            f"falling back to central cluster {central.cluster_id}"
        )
        return central

    # =========================================================================
    # RESOURCE LIFECYCLE
    # =========================================================================

    async def ensure_networking_resources(
        self,
        target: NetworkingTarget
    ) -> List[NetworkingResource]:
        rid = target.reconciliation_id
        namespace = target.namespace
        service_name = target.service_name
        cluster_id = target.cluster_id

        logger.debug(f"[MCS] {rid}: Ensuring MCS resources for pod {target.pod_name} in cluster {cluster_id}")

        membership = self._resolve_membership(cluster_id, rid)
        gateway = self.gateways[membership.cluster_id]
        is_central = membership.is_central

        # Called for every pod, but the service and export are shared by all
        # pods of the stretched cluster in this physical cluster
        outcome = await asyncio.to_thread(
            self.deduplicator.claim_or_skip,
            rid,
            target.dedup_key,
            lambda: self._export_exists(gateway, namespace, service_name, rid)
        )
        if outcome == ClaimOutcome.ALREADY_CLAIMED:
            logger.debug(f"[MCS] {rid}: {target.dedup_key} already processed in this reconciliation, skipping")
            return []
        if outcome == ClaimOutcome.ALREADY_EXISTS:
            logger.debug(f"[MCS] {rid}: ServiceExport {service_name} already exists in cluster {cluster_id}, skipping")
            return []

        logger.info(f"[MCS] {rid}: ServiceExport {service_name} does not exist in cluster {cluster_id}, creating it")

        resources: List[NetworkingResource] = []

        if is_central:
            logger.debug(f"[MCS] {rid}: Skipping Service {service_name} in central cluster {cluster_id}")
        else:
            service = create_headless_service_manifest(
                namespace,
                service_name,
                target.stretched_cluster_name,
                cluster_id,
                target.port_map
            )
            changed = await self._reconcile_service(
                self.core_v1[membership.cluster_id], namespace, service, cluster_id
            )
            if changed:
                resources.append(NetworkingResource(
                    kind="Service",
                    api_version="v1",
                    name=service_name,
                    namespace=namespace,
                    cluster_id=cluster_id,
                    manifest=_serializer().sanitize_for_serialization(service)
                ))

        service_export = create_service_export_manifest(
            namespace,
            service_name,
            target.stretched_cluster_name,
            cluster_id
        )
        try:
            await asyncio.to_thread(gateway.create_or_replace, service_export)
            resources.append(NetworkingResource(
                kind=KIND,
                api_version=API_VERSION,
                name=service_name,
                namespace=namespace,
                cluster_id=cluster_id,
                manifest=service_export
            ))
        except Exception as e:
            logger.error(
                f"[MCS] {rid}: Failed to create ServiceExport {service_name} in cluster {cluster_id}: {e}",
                exc_info=True
            )

        return resources

    def _export_exists(
        self,
        gateway: ExportResourceGateway,
        namespace: str,
        service_name: str,
        rid: str
    ) -> bool:
        try:
            return gateway.get(namespace, service_name) is not None
        except TransientClusterApiError as e:
            logger.warning(f"[MCS] {rid}: Cannot check ServiceExport {service_name}, assuming absent: {e}")
            return False
        except Exception as e:
            logger.warning(
                f"[MCS] {rid}: Cannot reach cluster to check ServiceExport {service_name}, assuming absent: {e}"
            )
            return False

    async def _reconcile_service(
        self,
        core_v1: client.CoreV1Api,
        namespace: str,
        service: client.V1Service,
        cluster_id: str
    ) -> bool:
        """
        Create the Service if absent, patch it if it diverges.

        Returns:
            True if the Service was created or patched

        Raises:
            TransientClusterApiError: If any API call fails
        """
        service_name = service.metadata.name
        try:
            existing = await asyncio.to_thread(
                core_v1.read_namespaced_service,
                name=service_name,
                namespace=namespace
            )
        except ApiException as e:
            if e.status != 404:
                raise TransientClusterApiError.from_api_exception(
                    f"read Service {namespace}/{service_name} in cluster {cluster_id}", e
                ) from e
            existing = None
        except Exception as e:
            raise TransientClusterApiError(
                f"Failed to read Service {namespace}/{service_name} in cluster {cluster_id}: {e}"
            ) from e

        try:
            if existing is None:
                await asyncio.to_thread(
                    core_v1.create_namespaced_service,
                    namespace=namespace,
                    body=service
                )
                logger.info(f"[MCS] ✅ Created Service {namespace}/{service_name} in cluster {cluster_id}")
                return True

            if not service_differs(existing, service):
                logger.debug(f"[MCS] Service {namespace}/{service_name} in cluster {cluster_id} is up to date")
                return False

            await asyncio.to_thread(
                core_v1.patch_namespaced_service,
                name=service_name,
                namespace=namespace,
                body=service
            )
            logger.info(f"[MCS] ✅ Updated Service {namespace}/{service_name} in cluster {cluster_id}")
            return True
        except ApiException as e:
            raise TransientClusterApiError.from_api_exception(
                f"reconcile Service {namespace}/{service_name} in cluster {cluster_id}", e
            ) from e
        except Exception as e:
            raise TransientClusterApiError(
                f"Failed to reconcile Service {namespace}/{service_name} in cluster {cluster_id}: {e}"
            ) from e

    async def remove_networking_resources(
        self,
        namespace: str,
        pod_name: str,
        cluster_id: str
    ) -> None:
        if self.registry is None:
            raise ConfigurationError("MCS provider used before initialize()")

        service_name = f"{pod_name}{PER_POD_SERVICE_SUFFIX}"
        logger.debug(f"[MCS] Deleting MCS resources {service_name} in cluster {cluster_id}")

        try:
            membership = self._resolve_membership(cluster_id, f"delete {pod_name}")
            gateway = self.gateways[membership.cluster_id]
            deleted = await asyncio.to_thread(gateway.delete, namespace, service_name)
            if deleted:
                logger.debug(f"[MCS] Deleted ServiceExport {service_name} in cluster {cluster_id}")
        except Exception as e:
            logger.warning(f"[MCS] Failed to delete ServiceExport {service_name} in cluster {cluster_id}: {e}")

        central_id = self.registry.central.cluster_id
        try:
            await asyncio.to_thread(
                self.core_v1[central_id].delete_namespaced_service,
                name=service_name,
                namespace=namespace
            )
            logger.info(f"[MCS] Deleted Service {namespace}/{service_name} in cluster {central_id}")
        except ApiException as e:
            if e.status != 404:
                raise TransientClusterApiError.from_api_exception(
                    f"delete Service {namespace}/{service_name} in cluster {central_id}", e
                ) from e
        except Exception as e:
            raise TransientClusterApiError(
                f"Failed to delete Service {namespace}/{service_name} in cluster {central_id}: {e}"
            ) from e

    # =========================================================================
    # DNS DERIVATION
    # =========================================================================

    def derive_service_dns_name(self, namespace: str, service_name: str, cluster_id: str) -> str:
        return self.dns.service_dns_name(namespace, service_name, cluster_id)

    def derive_pod_dns_name(self, namespace: str, service_name: str, pod_name: str, cluster_id: str) -> str:
        dns_name = self.dns.pod_dns_name(namespace, service_name, pod_name, cluster_id)
        logger.debug(f"[MCS] Generated DNS for pod {pod_name}: {dns_name}")
        return dns_name

    def derive_advertised_listeners(
        self,
        namespace: str,
        pod_name: str,
        cluster_id: str,
        listeners: Dict[str, str],
        stretched_cluster_name: str
    ) -> str:
        advertised = self.dns.advertised_listeners(
            namespace,
            brokers_service_name(stretched_cluster_name),
            pod_name,
            cluster_id,
            listeners
        )
        logger.debug(f"[MCS] Generated advertised listeners for {pod_name}: {advertised}")
        return advertised

    def derive_quorum_voters(
        self,
        namespace: str,
        controllers: List[ControllerPodInfo],
        port_name: str
    ) -> str:
        voters = self.dns.quorum_voters(namespace, controllers, port_name)
        logger.debug(f"[MCS] Generated controller.quorum.voters: {voters}")
        return voters

    def derive_certificate_sans(self, namespace: str, pod_name: str, cluster_id: str) -> List[str]:
        return self.dns.certificate_sans(
            namespace, f"{pod_name}{PER_POD_SERVICE_SUFFIX}", pod_name, cluster_id
        )

    # =========================================================================
    # DISCOVERY
    # =========================================================================

    async def discover_pod_endpoint(
        self,
        namespace: str,
        pod_name: str,
        cluster_id: str,
        port_name: str
    ) -> str:
        if self.registry is None:
            raise ConfigurationError("MCS provider used before initialize()")

        service_name = f"{pod_name}{PER_POD_SERVICE_SUFFIX}"
        central_id = self.registry.central.cluster_id

        try:
            service = await asyncio.to_thread(
                self.core_v1[central_id].read_namespaced_service,
                name=service_name,
                namespace=namespace
            )
        except ApiException as e:
            if e.status == 404:
                raise ResourceNotFoundError("Service", namespace, service_name) from e
            raise TransientClusterApiError.from_api_exception(
                f"read Service {namespace}/{service_name} in cluster {central_id}", e
            ) from e
        except Exception as e:
            raise TransientClusterApiError(
                f"Failed to read Service {namespace}/{service_name} in cluster {central_id}: {e}"
            ) from e

        ports = (service.spec.ports if service.spec else None) or []
        port = next((p for p in ports if p.name == port_name), None)
        if port is None:
            raise PortNotFoundError(port_name, service_name)

        dns_name = self.dns.pod_dns_name(namespace, service_name, pod_name, cluster_id)
        return f"{dns_name}:{port.port}"

    async def check_fabric_installed(self) -> Dict[str, bool]:
        """
        Check whether the ServiceExport CRD is installed in every cluster.

        Diagnostics only; reconciliation never depends on it.
        """
        cluster_ids = list(self.gateways.keys())
        results = await asyncio.gather(*[
            asyncio.to_thread(self.gateways[cid].is_kind_registered)
            for cid in cluster_ids
        ])
        return dict(zip(cluster_ids, results))
