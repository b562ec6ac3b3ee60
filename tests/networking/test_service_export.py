"""
Unit tests for ServiceExport access.

Tests:
- Manifest building (labels, annotations, owner references)
- get: not-found returns None, other errors raise
- create_or_replace: create, replace on conflict, errors
- delete: removed / nothing to remove / errors
- CRD registration check
"""

import pytest
from unittest.mock import Mock

pytest.importorskip("kubernetes")

from kubernetes.client.rest import ApiException
from stretchnet.services.networking.exceptions import TransientClusterApiError
from stretchnet.services.networking.service_export import (
    CRD_NAME,
    ExportResourceGateway,
    build_service_export,
)


@pytest.fixture
def gateway():
    """Gateway with mocked CustomObjects and ApiExtensions APIs."""
    gw = ExportResourceGateway(Mock(), "east")
    gw.custom_objects = Mock()
    gw.api_extensions = Mock()
    return gw


@pytest.mark.unit
class TestBuildServiceExport:
    """Test ServiceExport manifest building."""

    def test_minimal_manifest(self):
        export = build_service_export("my-cluster-brokers", "kafka")

        assert export == {
            "apiVersion": "multicluster.x-k8s.io/v1alpha1",
            "kind": "ServiceExport",
            "metadata": {"name": "my-cluster-brokers", "namespace": "kafka"},
        }

    def test_labels_annotations_owner_references(self):
        owner = {"apiVersion": "kafka.strimzi.io/v1beta2", "kind": "Kafka", "name": "my-cluster", "uid": "123"}

        export = build_service_export(
            "my-cluster-brokers",
            "kafka",
            labels={"app": "strimzi"},
            annotations={"strimzi.io/stretch-cluster-id": "east"},
            owner_references=[owner]
        )

        metadata = export["metadata"]
        assert metadata["labels"] == {"app": "strimzi"}
        assert metadata["annotations"] == {"strimzi.io/stretch-cluster-id": "east"}
        assert metadata["ownerReferences"] == [owner]

    def test_empty_owner_references_omitted(self):
        export = build_service_export("svc", "ns", owner_references=[])
        assert "ownerReferences" not in export["metadata"]


@pytest.mark.unit
@pytest.mark.kubernetes
class TestGet:
    """Test reading ServiceExports."""

    def test_get_existing(self, gateway):
        gateway.custom_objects.get_namespaced_custom_object.return_value = {"kind": "ServiceExport"}

        assert gateway.get("kafka", "svc") == {"kind": "ServiceExport"}
        call_kwargs = gateway.custom_objects.get_namespaced_custom_object.call_args.kwargs
        assert call_kwargs["group"] == "multicluster.x-k8s.io"
        assert call_kwargs["version"] == "v1alpha1"
        assert call_kwargs["plural"] == "serviceexports"
        assert call_kwargs["namespace"] == "kafka"
        assert call_kwargs["name"] == "svc"

    def test_get_not_found_returns_none(self, gateway):
        gateway.custom_objects.get_namespaced_custom_object.side_effect = ApiException(status=404)

        assert gateway.get("kafka", "svc") is None

    def test_get_other_error_raises(self, gateway):
        gateway.custom_objects.get_namespaced_custom_object.side_effect = ApiException(
            status=403, reason="Forbidden"
        )

        with pytest.raises(TransientClusterApiError) as exc_info:
            gateway.get("kafka", "svc")
        assert exc_info.value.status == 403


@pytest.mark.unit
@pytest.mark.kubernetes
class TestCreateOrReplace:
    """Test creating and replacing ServiceExports."""

    def test_create(self, gateway):
        export = build_service_export("svc", "kafka")
        gateway.custom_objects.create_namespaced_custom_object.return_value = export

        assert gateway.create_or_replace(export) == export
        gateway.custom_objects.replace_namespaced_custom_object.assert_not_called()

    def test_replace_on_conflict(self, gateway):
        export = build_service_export("svc", "kafka", labels={"app": "strimzi"})
        gateway.custom_objects.create_namespaced_custom_object.side_effect = ApiException(status=409)
        gateway.custom_objects.get_namespaced_custom_object.return_value = {
            "metadata": {"name": "svc", "namespace": "kafka", "resourceVersion": "42"}
        }
        gateway.custom_objects.replace_namespaced_custom_object.return_value = {"replaced": True}

        assert gateway.create_or_replace(export) == {"replaced": True}

        body = gateway.custom_objects.replace_namespaced_custom_object.call_args.kwargs["body"]
        assert body["metadata"]["resourceVersion"] == "42"
        assert body["metadata"]["labels"] == {"app": "strimzi"}
        # The caller's manifest is not mutated
        assert "resourceVersion" not in export["metadata"]

    def test_create_error_raises(self, gateway):
        gateway.custom_objects.create_namespaced_custom_object.side_effect = ApiException(
            status=404, reason="Not Found"
        )

        with pytest.raises(TransientClusterApiError) as exc_info:
            gateway.create_or_replace(build_service_export("svc", "kafka"))
        assert exc_info.value.status == 404

    def test_replace_error_raises(self, gateway):
        gateway.custom_objects.create_namespaced_custom_object.side_effect = ApiException(status=409)
        gateway.custom_objects.get_namespaced_custom_object.return_value = {"metadata": {}}
        gateway.custom_objects.replace_namespaced_custom_object.side_effect = ApiException(status=500)

        with pytest.raises(TransientClusterApiError):
            gateway.create_or_replace(build_service_export("svc", "kafka"))


@pytest.mark.unit
@pytest.mark.kubernetes
class TestDelete:
    """Test deleting ServiceExports."""

    def test_delete_existing(self, gateway):
        assert gateway.delete("kafka", "svc") is True

    def test_delete_missing(self, gateway):
        gateway.custom_objects.delete_namespaced_custom_object.side_effect = ApiException(status=404)

        assert gateway.delete("kafka", "svc") is False

    def test_delete_error_raises(self, gateway):
        gateway.custom_objects.delete_namespaced_custom_object.side_effect = ApiException(status=500)

        with pytest.raises(TransientClusterApiError):
            gateway.delete("kafka", "svc")


@pytest.mark.unit
@pytest.mark.kubernetes
class TestKindRegistration:
    """Test CRD registration check."""

    def test_registered(self, gateway):
        assert gateway.is_kind_registered() is True
        gateway.api_extensions.read_custom_resource_definition.assert_called_once_with(name=CRD_NAME)

    def test_not_registered(self, gateway):
        gateway.api_extensions.read_custom_resource_definition.side_effect = ApiException(status=404)

        assert gateway.is_kind_registered() is False

    def test_forbidden_reports_false(self, gateway):
        gateway.api_extensions.read_custom_resource_definition.side_effect = ApiException(status=403)

        assert gateway.is_kind_registered() is False

    def test_unreachable_reports_false(self, gateway):
        gateway.api_extensions.read_custom_resource_definition.side_effect = ConnectionError("refused")

        assert gateway.is_kind_registered() is False
