"""
Networking provider exceptions.

Export-side failures are swallowed by the provider and only logged; everything
else propagates to the host controller.
"""

from typing import Optional

from kubernetes.client.rest import ApiException


class NetworkingError(Exception):
    """Base exception for stretch networking errors."""
    pass


class ConfigurationError(NetworkingError):
    """Cluster endpoints or provider configuration are missing or invalid."""
    pass


class UnknownClusterError(ConfigurationError):
    """A cluster id has no registered endpoint (strict resolution only)."""

    def __init__(self, cluster_id: str):
        self.cluster_id = cluster_id
        super().__init__(f"No endpoint registered for cluster '{cluster_id}'")


class ResourceNotFoundError(NetworkingError):
    """A resource required by the caller does not exist."""

    def __init__(self, kind: str, namespace: str, name: str):
        self.kind = kind
        self.namespace = namespace
        self.name = name
        super().__init__(f"{kind} not found: {namespace}/{name}")


class PortNotFoundError(NetworkingError):
    """The requested port name is not declared on the service."""

    def __init__(self, port_name: str, service_name: str):
        self.port_name = port_name
        self.service_name = service_name
        super().__init__(f"Port not found: {port_name} (service {service_name})")


class TransientClusterApiError(NetworkingError):
    """A call to a cluster API failed. The next reconciliation pass retries."""

    def __init__(self, message: str, status: Optional[int] = None, reason: Optional[str] = None):
        self.status = status
        self.reason = reason
        super().__init__(message)

    @classmethod
    def from_api_exception(cls, action: str, error: ApiException) -> "TransientClusterApiError":
        return cls(
            f"Failed to {action}: {error.status} {error.reason}",
            status=error.status,
            reason=error.reason,
        )
