from pydantic_settings import BaseSettings
from functools import lru_cache
from typing import Dict
import logging


class Settings(BaseSettings):
    # Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL
    log_level: str = "INFO"

    # ==========================================================================
    # MCS Networking Settings
    # ==========================================================================
    # Clusterset DNS domain used by the MCS implementation (Cilium, Submariner, ...)
    mcs_clusterset_domain: str = "clusterset.local"

    # Namespace sameness across clusters (advisory, not enforced)
    mcs_require_namespace_sameness: bool = True

    # When True, an unknown cluster id fails the reconcile instead of
    # falling back to the central cluster
    mcs_strict_cluster_resolution: bool = False

    # ==========================================================================
    # Cluster Endpoints
    # ==========================================================================
    mcs_central_cluster_id: str = "central"

    # Empty: in-cluster config first, then the current kubeconfig context
    mcs_central_kube_context: str = ""

    # Comma-separated clusterId=context pairs
    # Example: "east=kind-east,west=kind-west"
    mcs_remote_kube_contexts: str = ""

    @property
    def remote_kube_contexts(self) -> Dict[str, str]:
        """Parse the remote cluster contexts into a cluster id -> context mapping."""
        contexts: Dict[str, str] = {}
        for entry in self.mcs_remote_kube_contexts.split(","):
            entry = entry.strip()
            if not entry:
                continue
            cluster_id, sep, context = entry.partition("=")
            if not sep or not cluster_id.strip() or not context.strip():
                raise ValueError(
                    f"Invalid remote context entry: '{entry}'. Expected clusterId=context"
                )
            contexts[cluster_id.strip()] = context.strip()
        return contexts

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"
        case_sensitive = False


@lru_cache()
def get_settings():
    return Settings()


def configure_logging(settings: Settings = None) -> None:
    """Configure root logging from settings."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
