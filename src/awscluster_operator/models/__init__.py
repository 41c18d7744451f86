"""
Models package - Pydantic models for type-safe resource handling.

Defines data models for:
- AWSCluster specifications and status
- Cluster API Cluster resources (read-only)
- Shared metadata, references and conditions
- Reconcile requests, results and states
"""

from .awscluster import (
    APIEndpoint,
    AWSCluster,
    AWSClusterSpec,
    AWSClusterStatus,
    Bastion,
    FailureDomainSpec,
    LoadBalancer,
    NetworkSpec,
    NetworkStatus,
    SubnetSpec,
    VPCSpec,
)
from .cluster import Cluster, ClusterNetwork, ClusterSpec
from .common import Condition, ObjectMeta, ObjectReference, OwnerReference, ResourceKind
from .reconcile import ReconcileRequest, ReconcileResult, ReconcileState

__all__ = [
    "APIEndpoint",
    "AWSCluster",
    "AWSClusterSpec",
    "AWSClusterStatus",
    "Bastion",
    "Cluster",
    "ClusterNetwork",
    "ClusterSpec",
    "Condition",
    "FailureDomainSpec",
    "LoadBalancer",
    "NetworkSpec",
    "NetworkStatus",
    "ObjectMeta",
    "ObjectReference",
    "OwnerReference",
    "ReconcileRequest",
    "ReconcileResult",
    "ReconcileState",
    "ResourceKind",
    "SubnetSpec",
    "VPCSpec",
]
