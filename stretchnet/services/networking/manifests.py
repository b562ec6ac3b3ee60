"""
Manifest builders for MCS networking resources.
"""

from kubernetes import client
import logging
from typing import Dict, Optional

from .service_export import build_service_export

logger = logging.getLogger(__name__)

STRETCH_CLUSTER_ID_ANNOTATION = "strimzi.io/stretch-cluster-id"


def get_owner_labels(stretched_cluster_name: str) -> Dict[str, str]:
    """Labels identifying the owning stretched cluster."""
    return {
        "app": "strimzi",
        "strimzi.io/cluster": stretched_cluster_name,
    }


def get_pod_selector(stretched_cluster_name: str) -> Dict[str, str]:
    """Selector matching all broker pods of the stretched cluster in one cluster."""
    return {
        "strimzi.io/cluster": stretched_cluster_name,
        "strimzi.io/kind": "Kafka",
        "strimzi.io/name": f"{stretched_cluster_name}-kafka",
    }


def create_headless_service_manifest(
    namespace: str,
    service_name: str,
    stretched_cluster_name: str,
    cluster_id: str,
    port_map: Dict[str, int]
) -> client.V1Service:
    """
    Create the headless Service shared by all broker pods in a cluster.

    The service name is the same in every cluster so the MCS implementation
    can aggregate the exports into a single ServiceImport.

    Args:
        namespace: Kubernetes namespace
        service_name: Shared service name (<stretched-cluster>-brokers)
        stretched_cluster_name: Logical stretched cluster name
        cluster_id: Cluster the service is created in
        port_map: Port name -> port number

    Returns:
        V1Service manifest
    """
    labels = get_owner_labels(stretched_cluster_name)
    labels["strimzi.io/kind"] = "Kafka"
    labels["strimzi.io/name"] = f"{stretched_cluster_name}-kafka"

    return client.V1Service(
        api_version="v1",
        kind="Service",
        metadata=client.V1ObjectMeta(
            name=service_name,
            namespace=namespace,
            labels=labels,
            annotations={STRETCH_CLUSTER_ID_ANNOTATION: cluster_id}
        ),
        spec=client.V1ServiceSpec(
            type="ClusterIP",
            cluster_ip="None",
            selector=get_pod_selector(stretched_cluster_name),
            ports=[
                client.V1ServicePort(
                    name=port_name,
                    port=port,
                    protocol="TCP"
                )
                for port_name, port in port_map.items()
            ]
        )
    )


def create_service_export_manifest(
    namespace: str,
    service_name: str,
    stretched_cluster_name: str,
    cluster_id: str,
    owner_references: Optional[list] = None
) -> Dict:
    """Create the ServiceExport for the shared headless service."""
    return build_service_export(
        service_name,
        namespace,
        labels=get_owner_labels(stretched_cluster_name),
        annotations={STRETCH_CLUSTER_ID_ANNOTATION: cluster_id},
        owner_references=owner_references
    )


def service_differs(existing: client.V1Service, desired: client.V1Service) -> bool:
    """
    Check whether an existing Service diverges from the desired one.

    Compares ports, selector, type, and the labels/annotations this provider
    owns. Extra labels or annotations set by others are ignored.
    A non-headless Service only logs a warning; clusterIP is immutable.
    """
    existing_spec = existing.spec or client.V1ServiceSpec()
    desired_spec = desired.spec

    def port_tuples(ports):
        return sorted((p.name, p.port, p.protocol or "TCP") for p in (ports or []))

    if port_tuples(existing_spec.ports) != port_tuples(desired_spec.ports):
        return True
    if (existing_spec.selector or {}) != (desired_spec.selector or {}):
        return True
    if (existing_spec.type or "ClusterIP") != desired_spec.type:
        return True
    if existing_spec.cluster_ip and existing_spec.cluster_ip != desired_spec.cluster_ip:
        logger.warning(
            f"[MCS] Service {existing.metadata.namespace}/{existing.metadata.name} has clusterIP "
            f"{existing_spec.cluster_ip}, expected {desired_spec.cluster_ip}; recreate it to make it headless"
        )

    existing_labels = existing.metadata.labels or {}
    existing_annotations = existing.metadata.annotations or {}
    for key, value in (desired.metadata.labels or {}).items():
        if existing_labels.get(key) != value:
            return True
    for key, value in (desired.metadata.annotations or {}).items():
        if existing_annotations.get(key) != value:
            return True
    return False
