"""
Tests for settings parsing.
"""

import logging
import pytest
from unittest.mock import patch

from stretchnet.config import Settings, configure_logging, get_settings


@pytest.mark.unit
class TestSettings:
    """Test Settings defaults and parsing."""

    def test_defaults(self):
        settings = Settings()

        assert settings.mcs_clusterset_domain == "clusterset.local"
        assert settings.mcs_require_namespace_sameness is True
        assert settings.mcs_strict_cluster_resolution is False
        assert settings.mcs_central_cluster_id == "central"
        assert settings.remote_kube_contexts == {}

    def test_remote_contexts(self):
        settings = Settings(mcs_remote_kube_contexts=" east=kind-east,west=kind-west, ")

        assert settings.remote_kube_contexts == {"east": "kind-east", "west": "kind-west"}

    @pytest.mark.parametrize("value", ["east", "=ctx", "east="])
    def test_malformed_remote_contexts(self, value):
        settings = Settings(mcs_remote_kube_contexts=value)

        with pytest.raises(ValueError):
            settings.remote_kube_contexts

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("MCS_CLUSTERSET_DOMAIN", "mesh.example")
        monkeypatch.setenv("MCS_STRICT_CLUSTER_RESOLUTION", "true")

        settings = Settings()

        assert settings.mcs_clusterset_domain == "mesh.example"
        assert settings.mcs_strict_cluster_resolution is True

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()


@pytest.mark.unit
def test_configure_logging_uses_log_level():
    with patch("stretchnet.config.logging.basicConfig") as basic_config:
        configure_logging(Settings(log_level="debug"))

    assert basic_config.call_args.kwargs["level"] == logging.DEBUG
