"""
Operator error hierarchy with categorization and retry logic.

This module defines the error types used throughout the AWSCluster operator,
providing clear categorization and integration with kopf's retry mechanisms.
"""

import kopf


class OperatorError(Exception):
    """
    Base error class for all operator-related exceptions.

    Provides categorization, retry behavior, and user guidance for resolution.
    """

    def __init__(
        self,
        message: str,
        category: str,
        retryable: bool = True,
        delay: int = 30,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        """
        Initialize operator error.

        Args:
            message: Human-readable error description
            category: Error category (validation, api, configuration, subsystem)
            retryable: Whether kopf should retry this operation
            delay: Suggested retry delay in seconds
            user_action: What user should do to resolve the issue
            cause: Underlying exception that caused this error
        """
        super().__init__(message)
        self.category = category
        self.retryable = retryable
        self.delay = delay
        self.user_action = user_action
        self.cause = cause

    def as_kopf_error(self):
        """Convert to appropriate kopf exception type."""
        if self.retryable:
            return kopf.TemporaryError(str(self), delay=self.delay)
        else:
            return kopf.PermanentError(str(self))

    def __str__(self) -> str:
        """Enhanced string representation with user guidance."""
        base_msg = super().__str__()
        if self.user_action:
            return f"{base_msg}\nAction required: {self.user_action}"
        return base_msg


class ValidationError(OperatorError):
    """Error in resource specification validation."""

    def __init__(
        self, message: str, field: str | None = None, user_action: str | None = None
    ):
        action = user_action or "Check resource specification and fix validation errors"
        if field:
            message = f"Validation error in field '{field}': {message}"
        super().__init__(
            message=message, category="validation", retryable=False, user_action=action
        )


class ConfigurationError(OperatorError):
    """Error in operator or resource configuration."""

    def __init__(
        self, message: str, retryable: bool = False, user_action: str | None = None
    ):
        super().__init__(
            message=message,
            category="configuration",
            retryable=retryable,
            user_action=user_action or "Review and correct configuration",
        )


class KubernetesAPIError(OperatorError):
    """Error communicating with Kubernetes API."""

    def __init__(
        self,
        message: str,
        reason: str | None = None,
        status: int | None = None,
        retryable: bool = True,
    ):
        if reason:
            message = f"{message} (reason: {reason})"

        # Some K8s errors are not retryable
        non_retryable_reasons = {"Forbidden", "Unauthorized", "Invalid"}
        if reason in non_retryable_reasons:
            retryable = False

        super().__init__(
            message=f"Kubernetes API error: {message}",
            category="external",
            retryable=retryable,
            delay=30,
            user_action="Check RBAC permissions and cluster connectivity",
        )
        self.reason = reason
        self.status = status


class ResourceNotFoundError(KubernetesAPIError):
    """The requested resource does not exist in the API server."""

    def __init__(self, kind: str, namespace: str, name: str):
        super().__init__(
            message=f"{kind} {namespace}/{name} not found",
            reason="NotFound",
            status=404,
        )
        self.kind = kind
        self.namespace = namespace
        self.name = name


class OwnerResolutionError(OperatorError):
    """The owner reference is set but the owning Cluster cannot be fetched."""

    def __init__(self, namespace: str, name: str, cause: Exception | None = None):
        detail = f": {cause}" if cause else ""
        super().__init__(
            message=f"Failed to resolve owner Cluster {namespace}/{name}{detail}",
            category="ownership",
            retryable=True,
            delay=15,
            user_action="Check that the owning Cluster exists and is readable",
            cause=cause,
        )


class ReconciliationError(OperatorError):
    """Error raised when reconciliation cannot be completed."""

    def __init__(
        self,
        message: str,
        retryable: bool = True,
        delay: int = 60,
        user_action: str | None = None,
        cause: Exception | None = None,
    ):
        super().__init__(
            message=message,
            category="reconciliation",
            retryable=retryable,
            delay=delay,
            user_action=user_action
            or "Inspect operator logs and resource conditions for issues",
            cause=cause,
        )


class SubsystemError(ReconciliationError):
    """A network, security group, bastion or load balancer call failed."""

    def __init__(
        self,
        subsystem: str,
        operation: str,
        resource: str,
        cause: Exception,
    ):
        super().__init__(
            message=f"failed to {operation} {subsystem} for AWSCluster {resource}: {cause}",
            delay=30,
            cause=cause,
        )
        self.subsystem = subsystem
        self.operation = operation


class DeletionError(ReconciliationError):
    """One or more teardown steps failed; the finalizer stays in place."""

    def __init__(self, resource: str, errors: list[Exception]):
        details = "; ".join(str(e) for e in errors)
        super().__init__(
            message=(
                f"failed to delete {len(errors)} subsystem(s) for AWSCluster "
                f"{resource}: {details}"
            ),
            delay=30,
            user_action="Check the AWS resources blocking deletion; deletion is retried automatically",
            cause=errors[0] if errors else None,
        )
        self.errors = list(errors)


def as_kopf_error(error: BaseException) -> Exception:
    """
    Translate any reconciliation failure into a kopf exception.

    Operator errors carry their own retry policy; anything else is treated
    as a temporary failure so kopf retries with backoff.
    """
    if isinstance(error, kopf.TemporaryError | kopf.PermanentError):
        return error
    if isinstance(error, OperatorError):
        return error.as_kopf_error()
    return kopf.TemporaryError(
        f"Unexpected error during reconciliation: {error}", delay=30
    )
