"""
Error handling module for the AWSCluster operator.

This module provides a comprehensive error hierarchy that integrates with kopf
and provides clear categorization for different types of failures.
"""

from .operator_errors import (
    ConfigurationError,
    DeletionError,
    KubernetesAPIError,
    OperatorError,
    OwnerResolutionError,
    ReconciliationError,
    ResourceNotFoundError,
    SubsystemError,
    ValidationError,
    as_kopf_error,
)

__all__ = [
    "OperatorError",
    "ValidationError",
    "ConfigurationError",
    "KubernetesAPIError",
    "ResourceNotFoundError",
    "OwnerResolutionError",
    "ReconciliationError",
    "SubsystemError",
    "DeletionError",
    "as_kopf_error",
]
