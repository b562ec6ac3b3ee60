"""
Export Resource Gateway

Typed access to ServiceExport resources from the Kubernetes Multi-Cluster
Services API (https://github.com/kubernetes-sigs/mcs-api) on one cluster.

The ServiceExport CRD is installed separately from this provider, so the
resource is handled as a plain custom object dict.

All methods are blocking; callers run them with asyncio.to_thread.
"""

from kubernetes import client
from kubernetes.client.rest import ApiException
import logging
from typing import Any, Dict, List, Optional

from .exceptions import TransientClusterApiError

logger = logging.getLogger(__name__)

GROUP = "multicluster.x-k8s.io"
VERSION = "v1alpha1"
API_VERSION = f"{GROUP}/{VERSION}"
KIND = "ServiceExport"
PLURAL = "serviceexports"
CRD_NAME = f"{PLURAL}.{GROUP}"


def build_service_export(
    service_name: str,
    namespace: str,
    labels: Optional[Dict[str, str]] = None,
    annotations: Optional[Dict[str, str]] = None,
    owner_references: Optional[List[Dict[str, Any]]] = None
) -> Dict[str, Any]:
    """
    Build a ServiceExport manifest.

    Args:
        service_name: Name of the service to export (the export has the same name)
        namespace: Namespace where the service exists
        labels: Labels to apply (optional)
        annotations: Annotations to apply (optional)
        owner_references: Owner references (omit for resources in remote clusters)

    Returns:
        ServiceExport manifest dict
    """
    metadata: Dict[str, Any] = {
        "name": service_name,
        "namespace": namespace,
    }
    if labels:
        metadata["labels"] = dict(labels)
    if annotations:
        metadata["annotations"] = dict(annotations)
    if owner_references:
        metadata["ownerReferences"] = list(owner_references)

    return {
        "apiVersion": API_VERSION,
        "kind": KIND,
        "metadata": metadata,
    }


class ExportResourceGateway:
    """ServiceExport operations against a single cluster."""

    def __init__(self, api_client: client.ApiClient, cluster_id: str = ""):
        self.api_client = api_client
        self.cluster_id = cluster_id
        self.custom_objects = client.CustomObjectsApi(api_client)
        self.api_extensions = client.ApiextensionsV1Api(api_client)

    def get(self, namespace: str, name: str) -> Optional[Dict[str, Any]]:
        """
        Get a ServiceExport.

        Returns:
            The ServiceExport, or None if it does not exist (or the CRD is not installed)

        Raises:
            TransientClusterApiError: For any error other than not-found
        """
        try:
            return self.custom_objects.get_namespaced_custom_object(
                group=GROUP,
                version=VERSION,
                namespace=namespace,
                plural=PLURAL,
                name=name
            )
        except ApiException as e:
            if e.status == 404:
                return None
            raise TransientClusterApiError.from_api_exception(
                f"get ServiceExport {namespace}/{name} in cluster {self.cluster_id}", e
            ) from e

    def create_or_replace(self, service_export: Dict[str, Any]) -> Dict[str, Any]:
        """
        Create a ServiceExport, replacing it if it already exists.

        Raises:
            TransientClusterApiError: If the API call fails
        """
        metadata = service_export["metadata"]
        name = metadata["name"]
        namespace = metadata["namespace"]

        try:
            created = self.custom_objects.create_namespaced_custom_object(
                group=GROUP,
                version=VERSION,
                namespace=namespace,
                plural=PLURAL,
                body=service_export
            )
            logger.info(f"[MCS:EXPORT] ✅ Created ServiceExport {namespace}/{name} in {self.cluster_id}")
            return created
        except ApiException as e:
            if e.status != 409:
                raise TransientClusterApiError.from_api_exception(
                    f"create ServiceExport {namespace}/{name} in cluster {self.cluster_id}", e
                ) from e

        logger.info(f"[MCS:EXPORT] ServiceExport {namespace}/{name} exists in {self.cluster_id}, replacing...")
        try:
            existing = self.custom_objects.get_namespaced_custom_object(
                group=GROUP,
                version=VERSION,
                namespace=namespace,
                plural=PLURAL,
                name=name
            )
            body = {**service_export, "metadata": {**metadata}}
            resource_version = existing.get("metadata", {}).get("resourceVersion")
            if resource_version:
                body["metadata"]["resourceVersion"] = resource_version

            replaced = self.custom_objects.replace_namespaced_custom_object(
                group=GROUP,
                version=VERSION,
                namespace=namespace,
                plural=PLURAL,
                name=name,
                body=body
            )
            logger.info(f"[MCS:EXPORT] ✅ Replaced ServiceExport {namespace}/{name} in {self.cluster_id}")
            return replaced
        except ApiException as e:
            raise TransientClusterApiError.from_api_exception(
                f"replace ServiceExport {namespace}/{name} in cluster {self.cluster_id}", e
            ) from e

    def delete(self, namespace: str, name: str) -> bool:
        """
        Delete a ServiceExport.

        Returns:
            True if a ServiceExport was removed, False if there was none

        Raises:
            TransientClusterApiError: For any error other than not-found
        """
        try:
            self.custom_objects.delete_namespaced_custom_object(
                group=GROUP,
                version=VERSION,
                namespace=namespace,
                plural=PLURAL,
                name=name
            )
            logger.info(f"[MCS:EXPORT] Deleted ServiceExport {namespace}/{name} in {self.cluster_id}")
            return True
        except ApiException as e:
            if e.status == 404:
                return False
            raise TransientClusterApiError.from_api_exception(
                f"delete ServiceExport {namespace}/{name} in cluster {self.cluster_id}", e
            ) from e

    def is_kind_registered(self) -> bool:
        """Check whether the ServiceExport CRD is installed in the cluster."""
        try:
            self.api_extensions.read_custom_resource_definition(name=CRD_NAME)
            return True
        except ApiException as e:
            if e.status != 404:
                logger.warning(f"[MCS:EXPORT] Cannot read CRD {CRD_NAME} in {self.cluster_id}: {e.status} {e.reason}")
            return False
        except Exception as e:
            logger.warning(f"[MCS:EXPORT] Cannot reach cluster {self.cluster_id} to check CRD {CRD_NAME}: {e}")
            return False
