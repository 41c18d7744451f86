"""
Base reconciler class providing common patterns for resource reconciliation.

This module defines the BaseReconciler class that wraps every reconciliation
with correlation-ID logging and metrics. Subclasses implement
``do_reconcile``; errors are logged and re-raised untouched so the watch
layer decides how they map onto kopf's retry semantics.
"""

import time
from abc import ABC, abstractmethod

from ..models.reconcile import ReconcileRequest, ReconcileResult
from ..observability.logging import OperatorLogger
from ..observability.metrics import metrics_collector


class BaseReconciler(ABC):
    """
    Base class for resource reconcilers.

    Provides common patterns for:
    - Correlation ID tracking per reconciliation
    - Success/error logging with durations
    - Reconciliation metrics and requeue accounting
    """

    #: Label used in logs and metrics
    resource_type: str = ""

    def __init__(self):
        self.logger = OperatorLogger(self.__class__.__name__)
        if not self.resource_type:
            self.resource_type = self.__class__.__name__.replace("Reconciler", "").lower()

    async def reconcile(self, request: ReconcileRequest) -> ReconcileResult:
        """
        Main reconciliation entry point with metrics tracking.

        Args:
            request: Identity of the resource to reconcile

        Returns:
            The result of the reconciliation; failures are raised
        """
        start_time = time.time()

        self.logger.log_reconciliation_start(
            resource_type=self.resource_type,
            resource_name=request.name,
            namespace=request.namespace,
        )

        async with metrics_collector.track_reconciliation(
            resource_type=self.resource_type,
            namespace=request.namespace,
        ):
            try:
                result = await self.do_reconcile(request)
            except BaseException as e:
                self.logger.log_reconciliation_error(
                    resource_type=self.resource_type,
                    resource_name=request.name,
                    namespace=request.namespace,
                    error=e,
                    duration=time.time() - start_time,
                )
                raise

        self.logger.log_reconciliation_success(
            resource_type=self.resource_type,
            resource_name=request.name,
            namespace=request.namespace,
            duration=time.time() - start_time,
            requeue_after=result.requeue_after,
        )
        return result

    @abstractmethod
    async def do_reconcile(self, request: ReconcileRequest) -> ReconcileResult:
        """
        Perform the actual reconciliation logic.

        This method must be implemented by subclasses to provide
        resource-specific reconciliation logic.
        """
        raise NotImplementedError("Subclasses must implement do_reconcile method")
