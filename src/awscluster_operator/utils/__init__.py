"""
Utils package - Utility modules for AWSCluster operator functionality.

Contains helper modules for:
- Kubernetes client configuration and resource storage
- Owner resolution and Cluster API annotations
- Status condition bookkeeping
- DNS readiness probing and per-resource locking
"""

from awscluster_operator.utils.kubernetes import (
    KubernetesResourceClient,
    ResourceClient,
    get_kubernetes_client,
)

__all__ = [
    "KubernetesResourceClient",
    "ResourceClient",
    "get_kubernetes_client",
]
