"""
AWSCluster Operator - A Kopf-based Cluster API infrastructure controller for AWS.

This operator drives the networking and load-balancing infrastructure of
Cluster API workload clusters toward the state declared in AWSCluster
resources:
- Network, security group, bastion host and load balancer reconciliation
- Finalizer-guarded, retry-safe teardown
- Per-subsystem readiness conditions
- Pause and external-management aware watches
"""

__version__ = "0.1.0"
