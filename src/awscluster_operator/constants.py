"""
Constants used throughout the AWSCluster operator.

This module defines all constant values used by the operator including:
- API groups, versions and plurals of the watched resources
- Finalizer names for cleanup coordination
- Cluster API annotations honoured by the controller
- Condition types, reasons and severities
- Requeue delays and other defaults
"""

# API coordinates of the watched resources
INFRASTRUCTURE_GROUP = "infrastructure.cluster.x-k8s.io"
INFRASTRUCTURE_VERSION = "v1beta1"
AWSCLUSTER_KIND = "AWSCluster"
AWSCLUSTER_PLURAL = "awsclusters"

CLUSTER_API_GROUP = "cluster.x-k8s.io"
CLUSTER_API_VERSION = "v1beta1"
CLUSTER_KIND = "Cluster"
CLUSTER_PLURAL = "clusters"

# Finalizer constants for cleanup coordination
# Prevents Kubernetes from removing the AWSCluster until AWS resources are gone
CLUSTER_FINALIZER = "awscluster.infrastructure.cluster.x-k8s.io"

# Annotation constants (shared with the rest of Cluster API)
PAUSED_ANNOTATION = "cluster.x-k8s.io/paused"
MANAGED_BY_ANNOTATION = "cluster.x-k8s.io/managed-by"

# Condition type constants
CONDITION_READY = "Ready"
CONDITION_CLUSTER_SECURITY_GROUPS_READY = "ClusterSecurityGroupsReady"
CONDITION_BASTION_HOST_READY = "BastionHostReady"
CONDITION_LOAD_BALANCER_READY = "LoadBalancerReady"

# Conditions summarised into Ready when the scope is persisted
SUMMARY_CONDITIONS = (
    CONDITION_CLUSTER_SECURITY_GROUPS_READY,
    CONDITION_BASTION_HOST_READY,
    CONDITION_LOAD_BALANCER_READY,
)

# Condition reason constants
REASON_SECURITY_GROUP_RECONCILIATION_FAILED = "ClusterSecurityGroupReconciliationFailed"
REASON_BASTION_HOST_FAILED = "BastionHostFailed"
REASON_LOAD_BALANCER_FAILED = "LoadBalancerFailed"
REASON_WAIT_FOR_DNS_NAME = "WaitForDNSName"
REASON_WAIT_FOR_DNS_NAME_RESOLVE = "WaitForDNSNameResolve"

# Condition status constants
CONDITION_TRUE = "True"
CONDITION_FALSE = "False"
CONDITION_UNKNOWN = "Unknown"

# Condition severity constants (empty string means "none")
SEVERITY_NONE = ""
SEVERITY_INFO = "Info"
SEVERITY_WARNING = "Warning"
SEVERITY_ERROR = "Error"

# Default configuration values
DEFAULT_API_SERVER_PORT = 6443
DEFAULT_SYNC_PERIOD_SECONDS = 600
DNS_NAME_REQUEUE_SECONDS = 15.0
DNS_RESOLVE_REQUEUE_SECONDS = 5.0
DEFAULT_DNS_RESOLVE_TIMEOUT = 5.0

# Event reasons recorded on the AWSCluster
EVENT_FAILED_RECONCILE = "FailedReconcile"
EVENT_FAILED_DELETE = "FailedDelete"
EVENT_WAITING_FOR_DNS = "WaitingForDNS"
EVENT_SUCCESSFUL_DELETE = "SuccessfulDelete"
