"""
Data models for stretch cluster networking.
"""

from typing import Any, Dict
from pydantic import BaseModel, Field

BROKERS_SERVICE_SUFFIX = "-brokers"


def brokers_service_name(stretched_cluster_name: str) -> str:
    """Name of the headless service shared by all brokers in a cluster."""
    return f"{stretched_cluster_name}{BROKERS_SERVICE_SUFFIX}"


class ClusterMembership(BaseModel):
    """One physical cluster participating in the stretch topology."""
    cluster_id: str = Field(..., description="Unique cluster identifier")
    is_central: bool = Field(default=False, description="Whether this is the central cluster")
    api_client: Any = Field(None, description="kubernetes.client.ApiClient for this cluster")

    class Config:
        arbitrary_types_allowed = True


class NetworkingTarget(BaseModel):
    """The unit of work for one ensure call (one pod in one reconciliation pass)."""
    reconciliation_id: str = Field(..., description="Identifies one control-loop pass")
    namespace: str = Field(..., description="Namespace of the stretched cluster")
    stretched_cluster_name: str = Field(..., description="Logical stretched cluster name")
    pod_name: str = Field(..., description="Pod being reconciled")
    cluster_id: str = Field(..., description="Cluster the pod runs in")
    port_map: Dict[str, int] = Field(default_factory=dict, description="Port name -> port number")

    @property
    def service_name(self) -> str:
        return brokers_service_name(self.stretched_cluster_name)

    @property
    def dedup_key(self) -> str:
        return f"{self.cluster_id}/{self.namespace}/{self.service_name}"


class ControllerPodInfo(BaseModel):
    """A controller (quorum voter) pod."""
    node_id: int = Field(..., description="Node id of the controller")
    pod_name: str = Field(..., description="Controller pod name")
    cluster_id: str = Field(..., description="Cluster the controller runs in")


class NetworkingResource(BaseModel):
    """Descriptor of a resource created or updated by the provider."""
    kind: str = Field(..., description="Resource kind (Service, ServiceExport)")
    api_version: str = Field(..., description="Resource apiVersion")
    name: str = Field(..., description="Resource name")
    namespace: str = Field(..., description="Resource namespace")
    cluster_id: str = Field(..., description="Cluster the resource lives in")
    manifest: Dict[str, Any] = Field(default_factory=dict, description="Serialized manifest")
