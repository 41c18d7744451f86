"""
Service layer for the AWSCluster operator.

This module provides the reconciler and its collaborators, separated from
the kopf handler layer.
"""

from .awscluster_reconciler import AWSClusterReconciler
from .base_reconciler import BaseReconciler
from .cluster_scope import ClusterScope
from .interfaces import (
    EC2Service,
    ELBService,
    NetworkService,
    SecurityGroupService,
    ServiceFactories,
    load_service_factories,
)

__all__ = [
    "AWSClusterReconciler",
    "BaseReconciler",
    "ClusterScope",
    "EC2Service",
    "ELBService",
    "NetworkService",
    "SecurityGroupService",
    "ServiceFactories",
    "load_service_factories",
]
