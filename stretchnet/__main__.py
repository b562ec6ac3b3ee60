#!/usr/bin/env python3
"""
Diagnostics for the MCS stretch networking provider.

Usage:
    python -m stretchnet check
    python -m stretchnet dns <namespace> <stretched-cluster> <pod> <cluster-id>
"""
import asyncio
import sys

from .config import configure_logging, get_settings
from .services.networking import (
    ClusterEndpointRegistry,
    ConfigurationError,
    McsNetworkingProvider,
)
from .services.networking.models import brokers_service_name


async def check_clusters():
    """Check ServiceExport CRD registration in every configured cluster."""
    print("=" * 60)
    print("MCS ServiceExport CRD Check")
    print("=" * 60)
    print()

    try:
        registry = ClusterEndpointRegistry.from_settings(get_settings())
    except ConfigurationError as e:
        print(f"❌ Error: {e}")
        sys.exit(1)

    provider = McsNetworkingProvider()
    try:
        provider.initialize(None, registry)
        results = await provider.check_fabric_installed()
    finally:
        registry.close()

    central_id = registry.central.cluster_id
    for cluster_id, installed in results.items():
        role = "central" if cluster_id == central_id else "remote"
        marker = "✅" if installed else "❌"
        print(f"  {marker} {cluster_id} ({role})")
    print()

    if not all(results.values()):
        print("ServiceExport CRD missing in some clusters; exports there will fail until it is installed.")
        sys.exit(2)


def show_dns(namespace: str, stretched_cluster_name: str, pod_name: str, cluster_id: str):
    """Print the DNS names derived for a pod."""
    provider = McsNetworkingProvider()
    service_name = brokers_service_name(stretched_cluster_name)

    print(f"Service DNS:  {provider.derive_service_dns_name(namespace, service_name, cluster_id)}")
    print(f"Pod DNS:      {provider.derive_pod_dns_name(namespace, service_name, pod_name, cluster_id)}")
    print("Certificate SANs:")
    for san in provider.derive_certificate_sans(namespace, pod_name, cluster_id):
        print(f"  - {san}")


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="MCS stretch networking diagnostics")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("check", help="Check ServiceExport CRD registration per cluster")

    dns_parser = subparsers.add_parser("dns", help="Show DNS names and SANs for a pod")
    dns_parser.add_argument("namespace")
    dns_parser.add_argument("stretched_cluster")
    dns_parser.add_argument("pod")
    dns_parser.add_argument("cluster_id")

    args = parser.parse_args()
    configure_logging()

    if args.command == "check":
        asyncio.run(check_clusters())
    else:
        show_dns(args.namespace, args.stretched_cluster, args.pod, args.cluster_id)


if __name__ == "__main__":
    main()
