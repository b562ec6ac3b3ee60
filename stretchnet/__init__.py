"""
Stretch cluster networking provider based on the Kubernetes Multi-Cluster
Services (MCS) API.
"""

__version__ = "0.1.0"
