"""
MCS DNS names for stretch cluster pods.

Formats (clusterset domain defaults to clusterset.local):
- service:  <service>.<cluster-id>.<namespace>.svc.<domain>
- pod:      <pod>.<cluster-id>.<service>.<namespace>.svc.<domain>
- wildcard: *.<cluster-id>.<service>.<namespace>.svc.<domain>
"""

import logging
from typing import Callable, Dict, Iterable, List

from .models import ControllerPodInfo

logger = logging.getLogger(__name__)

DEFAULT_CLUSTERSET_DOMAIN = "clusterset.local"

PORT_CONTROL_PLANE = 9090
PORT_REPLICATION = 9091
PORT_PLAIN = 9092
PORT_TLS = 9093
PORT_EXTERNAL = 9094

# TODO: resolve ports from the stretched cluster's listener configuration
STANDARD_PORTS: Dict[str, int] = {
    "replication": PORT_REPLICATION,
    "plain": PORT_PLAIN,
    "tls": PORT_TLS,
    "external": PORT_EXTERNAL,
    "control-plane": PORT_CONTROL_PLANE,
    "controlplane-9090": PORT_CONTROL_PLANE,
}

PortResolver = Callable[[str], int]


def resolve_standard_port(port_name: str) -> int:
    """
    Map a port name to a port number.

    Known names come from STANDARD_PORTS. Otherwise the first purely numeric
    hyphen-delimited token is used (e.g. "custom-8443"), and failing that the
    plain port.
    """
    port = STANDARD_PORTS.get(port_name.lower())
    if port is not None:
        return port

    for part in port_name.split("-"):
        if part.isascii() and part.isdigit():
            return int(part)

    logger.warning(f"[MCS] Unknown port name: {port_name}, defaulting to {PORT_PLAIN}")
    return PORT_PLAIN


class DnsNameFormatter:
    """Derives MCS DNS names, listener and voter strings, and certificate SANs."""

    def __init__(
        self,
        domain: str = DEFAULT_CLUSTERSET_DOMAIN,
        port_resolver: PortResolver = resolve_standard_port
    ):
        self.domain = domain
        self.port_resolver = port_resolver

    def service_dns_name(self, namespace: str, service_name: str, cluster_id: str) -> str:
        return f"{service_name}.{cluster_id}.{namespace}.svc.{self.domain}"

    def pod_dns_name(self, namespace: str, service_name: str, pod_name: str, cluster_id: str) -> str:
        return f"{pod_name}.{cluster_id}.{service_name}.{namespace}.svc.{self.domain}"

    def wildcard_dns_name(self, namespace: str, service_name: str, cluster_id: str) -> str:
        return f"*.{cluster_id}.{service_name}.{namespace}.svc.{self.domain}"

    def advertised_listeners(
        self,
        namespace: str,
        service_name: str,
        pod_name: str,
        cluster_id: str,
        listeners: Dict[str, str]
    ) -> str:
        """
        Build the advertised listeners string.

        Args:
            namespace: Namespace of the stretched cluster
            service_name: Shared headless service name
            pod_name: Pod name
            cluster_id: Cluster the pod runs in
            listeners: Listener name -> port name

        Returns:
            Comma-separated "LISTENER://dns:port" entries
        """
        dns_name = self.pod_dns_name(namespace, service_name, pod_name, cluster_id)
        return ",".join(
            f"{listener_name}://{dns_name}:{self.port_resolver(port_name)}"
            for listener_name, port_name in listeners.items()
        )

    def quorum_voters(
        self,
        namespace: str,
        controllers: Iterable[ControllerPodInfo],
        port_name: str
    ) -> str:
        """Build "nodeId@dns:port" entries in the given controller order."""
        port = self.port_resolver(port_name)
        voters = []
        for controller in controllers:
            # Per-pod service: the service name is the pod name
            dns_name = self.pod_dns_name(
                namespace, controller.pod_name, controller.pod_name, controller.cluster_id
            )
            voters.append(f"{controller.node_id}@{dns_name}:{port}")
        return ",".join(voters)

    def certificate_sans(self, namespace: str, service_name: str, pod_name: str, cluster_id: str) -> List[str]:
        return [
            self.pod_dns_name(namespace, service_name, pod_name, cluster_id),
            self.wildcard_dns_name(namespace, service_name, cluster_id),
        ]
