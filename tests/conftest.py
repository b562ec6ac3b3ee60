"""
Test configuration and fixtures for pytest.

Fixtures include: cluster registries backed by mock API clients, and MCS
providers whose gateways and CoreV1 APIs are replaced with mocks.
"""

import sys
import os
from pathlib import Path
import pytest
from unittest.mock import Mock

# Add the project root to sys.path
project_dir = Path(__file__).parent.parent
sys.path.insert(0, str(project_dir))


def pytest_configure(config):
    """
    Pytest hook called before test collection.
    Sets up test environment variables and registers custom markers.
    """
    # Set test environment variables BEFORE any settings are loaded
    os.environ["MCS_CLUSTERSET_DOMAIN"] = "clusterset.local"
    os.environ["MCS_CENTRAL_CLUSTER_ID"] = "central"
    os.environ.pop("MCS_STRICT_CLUSTER_RESOLUTION", None)
    os.environ.pop("MCS_REMOTE_KUBE_CONTEXTS", None)

    from stretchnet.config import get_settings
    get_settings.cache_clear()

    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "kubernetes: mark test as requiring the kubernetes client")


@pytest.fixture
def registry():
    """Registry with a central cluster and two remote clusters."""
    from stretchnet.services.networking import ClusterEndpointRegistry, ClusterMembership

    return ClusterEndpointRegistry([
        ClusterMembership(cluster_id="central", is_central=True, api_client=Mock()),
        ClusterMembership(cluster_id="east", api_client=Mock()),
        ClusterMembership(cluster_id="west", api_client=Mock()),
    ])


def _not_found():
    from kubernetes.client.rest import ApiException
    return ApiException(status=404, reason="Not Found")


@pytest.fixture
def not_found():
    """Factory for 404 ApiExceptions."""
    return _not_found


@pytest.fixture
def provider(registry):
    """
    Initialized MCS provider with mocked cluster access.

    Every gateway reports no existing ServiceExport, every CoreV1 API reports
    no existing Service.
    """
    from stretchnet.services.networking import ExportResourceGateway, McsNetworkingProvider

    mcs = McsNetworkingProvider()
    mcs.initialize({}, registry)

    for cluster_id in registry.cluster_ids:
        gateway = Mock(spec=ExportResourceGateway)
        gateway.cluster_id = cluster_id
        gateway.get.return_value = None
        gateway.create_or_replace.side_effect = lambda body: body
        gateway.delete.return_value = True
        gateway.is_kind_registered.return_value = True
        mcs.gateways[cluster_id] = gateway

        core_v1 = Mock()
        core_v1.read_namespaced_service.side_effect = _not_found()
        mcs.core_v1[cluster_id] = core_v1

    return mcs
