"""
Cluster Module - Black Box Interface

Purpose: Connect to Kubernetes and snapshot the pods of a namespace
Interface: ClusterConnector.connect(), ClusterConnector.list_instances(), resolve_namespace()
Hidden: In-cluster vs. kubeconfig credential loading, V1Pod conversion

Can be replaced with any source of Instance snapshots.
"""

from .connector import ClusterConnector, resolve_namespace

__all__ = ["ClusterConnector", "resolve_namespace"]
