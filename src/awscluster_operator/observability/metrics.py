"""
Prometheus metrics for the AWSCluster operator.

This module provides metrics collection for monitoring reconciliation
outcomes, requeues, subsystem calls and the state of watched resources,
plus the HTTP server that exposes them.
"""

import logging
import time
from contextlib import asynccontextmanager

# aiohttp is provided transitively by kopf; the metrics server reuses it.
from aiohttp.web import (
    Application,
    AppRunner,
    Request,
    Response,
    TCPSite,
    json_response,
)
from prometheus_client import (
    CONTENT_TYPE_LATEST,
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)

logger = logging.getLogger(__name__)

# Dedicated registry so only operator metrics are exposed
METRICS_REGISTRY = CollectorRegistry()

RECONCILIATION_TOTAL = Counter(
    "awscluster_operator_reconciliation_total",
    "Total number of reconciliation attempts",
    ["resource_type", "namespace", "result"],
    registry=METRICS_REGISTRY,
)

RECONCILIATION_DURATION = Histogram(
    "awscluster_operator_reconciliation_duration_seconds",
    "Time spent on reconciliation operations",
    ["resource_type", "namespace", "operation"],
    buckets=[0.1, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=METRICS_REGISTRY,
)

RECONCILIATION_ERRORS = Counter(
    "awscluster_operator_reconciliation_errors_total",
    "Total number of reconciliation errors",
    ["resource_type", "namespace", "error_type", "retryable"],
    registry=METRICS_REGISTRY,
)

REQUEUES_TOTAL = Counter(
    "awscluster_operator_requeues_total",
    "Total number of successful reconciliations that asked to run again",
    ["namespace", "reason"],
    registry=METRICS_REGISTRY,
)

SUBSYSTEM_OPERATIONS = Counter(
    "awscluster_operator_subsystem_operations_total",
    "Subsystem service calls by outcome",
    ["subsystem", "operation", "result"],
    registry=METRICS_REGISTRY,
)

RESOURCES_BY_STATE = Gauge(
    "awscluster_operator_resources",
    "AWSClusters seen by the last reconciliation, by derived state",
    ["namespace", "state"],
    registry=METRICS_REGISTRY,
)

CLUSTER_UNPAUSE_REQUEUES = Counter(
    "awscluster_operator_cluster_unpause_requeues_total",
    "AWSCluster reconciliations triggered by a Cluster being unpaused",
    ["namespace"],
    registry=METRICS_REGISTRY,
)


def get_metrics_registry() -> CollectorRegistry:
    """Get the operator metrics registry."""
    return METRICS_REGISTRY


class MetricsCollector:
    """Collects and manages metrics for the AWSCluster operator."""

    def __init__(self):
        self.registry = get_metrics_registry()
        # Last known state per namespace/name, to keep RESOURCES_BY_STATE a count
        self._states: dict[tuple[str, str], str] = {}

    @asynccontextmanager
    async def track_reconciliation(
        self,
        resource_type: str,
        namespace: str,
        operation: str = "reconcile",
    ):
        """
        Context manager to track reconciliation operations.

        Args:
            resource_type: Type of resource being reconciled
            namespace: Namespace of the resource
            operation: Type of operation being performed
        """
        start_time = time.time()
        result = "unknown"

        try:
            yield
            result = "success"
        except BaseException as e:
            result = "error"

            error_type = type(e).__name__
            retryable = "true" if getattr(e, "retryable", False) else "false"

            RECONCILIATION_ERRORS.labels(
                resource_type=resource_type,
                namespace=namespace,
                error_type=error_type,
                retryable=retryable,
            ).inc()

            raise
        finally:
            duration = time.time() - start_time

            RECONCILIATION_TOTAL.labels(
                resource_type=resource_type,
                namespace=namespace,
                result=result,
            ).inc()

            RECONCILIATION_DURATION.labels(
                resource_type=resource_type, namespace=namespace, operation=operation
            ).observe(duration)

    def record_requeue(self, namespace: str, reason: str) -> None:
        REQUEUES_TOTAL.labels(namespace=namespace, reason=reason).inc()

    def record_subsystem_operation(
        self, subsystem: str, operation: str, success: bool
    ) -> None:
        """
        Record the outcome of one subsystem service call.

        Args:
            subsystem: network, security_groups, bastion or load_balancers
            operation: reconcile or delete
            success: Whether the call returned without raising
        """
        SUBSYSTEM_OPERATIONS.labels(
            subsystem=subsystem,
            operation=operation,
            result="success" if success else "failure",
        ).inc()

    def record_cluster_unpaused(self, namespace: str) -> None:
        CLUSTER_UNPAUSE_REQUEUES.labels(namespace=namespace).inc()

    def update_resource_state(self, namespace: str, name: str, state: str) -> None:
        """Move one AWSCluster into ``state`` in the per-state gauge."""
        key = (namespace, name)
        previous = self._states.get(key)
        if previous == state:
            return
        if previous is not None:
            RESOURCES_BY_STATE.labels(namespace=namespace, state=previous).dec()
        RESOURCES_BY_STATE.labels(namespace=namespace, state=state).inc()
        self._states[key] = state

    def forget_resource(self, namespace: str, name: str) -> None:
        """Drop a resource that no longer exists from the per-state gauge."""
        previous = self._states.pop((namespace, name), None)
        if previous is not None:
            RESOURCES_BY_STATE.labels(namespace=namespace, state=previous).dec()


class MetricsServer:
    """HTTP server for exposing Prometheus metrics and probes."""

    def __init__(self, port: int = 8081, host: str = "0.0.0.0"):
        """
        Initialize metrics server.

        Args:
            port: Port to serve metrics on
            host: Host interface to bind to
        """
        self.port = port
        self.host = host
        self.ready = False
        self.app = Application()
        self.runner: AppRunner | None = None
        self.site: TCPSite | None = None
        self._setup_routes()

    def _setup_routes(self) -> None:
        self.app.router.add_get("/metrics", self._metrics_handler)
        self.app.router.add_get("/healthz", self._healthz_handler)
        self.app.router.add_get("/ready", self._ready_handler)

    async def _metrics_handler(self, request: Request) -> Response:
        """Handle /metrics endpoint for Prometheus scraping."""
        try:
            metrics_data = generate_latest(get_metrics_registry())
            return Response(body=metrics_data, content_type=CONTENT_TYPE_LATEST)
        except Exception as e:
            logger.error(f"Failed to generate metrics: {e}")
            return Response(
                text=f"Error generating metrics: {type(e).__name__}. Check logs for details.",
                status=500,
            )

    async def _healthz_handler(self, request: Request) -> Response:
        """Liveness: the server answers as long as the event loop runs."""
        return Response(text="ok")

    async def _ready_handler(self, request: Request) -> Response:
        """Readiness: set once the operator finished its startup handler."""
        body = {"status": "ready" if self.ready else "not_ready", "timestamp": time.time()}
        return json_response(body, status=200 if self.ready else 503)

    async def start(self) -> None:
        """Start the metrics server."""
        try:
            self.runner = AppRunner(self.app)
            await self.runner.setup()

            self.site = TCPSite(self.runner, self.host, self.port)
            await self.site.start()

            logger.info(f"Metrics server started on {self.host}:{self.port}")
        except Exception as e:
            logger.error(f"Failed to start metrics server: {e}")
            raise

    async def stop(self) -> None:
        """Stop the metrics server."""
        self.ready = False
        try:
            if self.site:
                await self.site.stop()
                self.site = None

            if self.runner:
                await self.runner.cleanup()
                self.runner = None

            logger.info("Metrics server stopped")
        except Exception as e:
            logger.error(f"Error stopping metrics server: {e}")

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()


# Global metrics collector instance
metrics_collector = MetricsCollector()
