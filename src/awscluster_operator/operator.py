#!/usr/bin/env python3
"""
AWSCluster Operator - Main entry point for the Kopf-based AWSCluster controller.

The operator reconciles Cluster API AWSCluster resources: it brings up the
network, security groups, bastion host and load balancers of a cluster
through a pluggable cloud backend, reports progress as conditions and
tears everything down before releasing the AWSCluster on deletion.

Usage:
    python -m awscluster_operator.operator
    # Or with kopf directly:
    kopf run -m awscluster_operator.operator --all-namespaces

Environment Variables:
    SERVICE_FACTORIES: Import path of the cloud backend (package.module:attribute)
    AWSCLUSTER_OPERATOR_NAMESPACES: Comma-separated list of namespaces to watch
    LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR)
"""

import asyncio
import logging
import random
import sys

import kopf

# Import all handler modules to register them with kopf
from awscluster_operator.handlers import (  # noqa: F401
    awscluster,
    cluster,
)
from awscluster_operator.errors import ConfigurationError
from awscluster_operator.observability.logging import setup_structured_logging
from awscluster_operator.observability.metrics import MetricsServer
from awscluster_operator.services import AWSClusterReconciler, load_service_factories
from awscluster_operator.settings import settings as operator_settings
from awscluster_operator.utils.dns import make_dns_resolver
from awscluster_operator.utils.events import KopfEventRecorder
from awscluster_operator.utils.kubernetes import (
    KubernetesResourceClient,
    get_kubernetes_client,
)
from awscluster_operator.utils.locks import KeyedLocks

# Global reference to metrics server for cleanup
_global_metrics_server: MetricsServer | None = None


def configure_logging() -> None:
    """Configure structured logging for the operator based on operator_settings."""
    setup_structured_logging(
        log_level=operator_settings.log_level.upper(),
        enable_json_formatting=operator_settings.json_logs,
        correlation_id_enabled=operator_settings.correlation_ids,
        log_health_probes=operator_settings.log_health_probes,
    )


def build_reconciler() -> AWSClusterReconciler:
    """
    Wire the reconciler with its production collaborators.

    Raises:
        ConfigurationError: If the cloud backend cannot be loaded
    """
    service_factories = load_service_factories(operator_settings.service_factories)
    return AWSClusterReconciler(
        resource_client=KubernetesResourceClient(get_kubernetes_client()),
        service_factories=service_factories,
        recorder=KopfEventRecorder(),
        dns_resolver=make_dns_resolver(operator_settings.dns_resolve_timeout_seconds),
        dns_name_requeue_seconds=operator_settings.dns_name_requeue_seconds,
        dns_resolve_requeue_seconds=operator_settings.dns_resolve_requeue_seconds,
    )


@kopf.on.startup()
async def startup_handler(
    settings: kopf.OperatorSettings, memo: kopf.Memo, **_
) -> None:
    """
    Operator startup configuration.

    Configures peering for leader election, builds the reconciler and the
    shared per-resource state handlers rely on, and starts the metrics server.
    """
    global _global_metrics_server
    logging.info("Starting AWSCluster Operator...")
    settings.watching.reconnect_backoff = 1.0

    # Each pod gets a unique priority to enable leader election
    settings.peering.name = operator_settings.operator_name
    settings.peering.priority = random.randint(0, 32767)
    logging.info(
        f"Peering priority set to {settings.peering.priority} for leader election"
    )

    watched_namespaces = operator_settings.watched_namespaces
    if watched_namespaces:
        logging.info(f"Watching namespaces: {', '.join(watched_namespaces)}")
    else:
        logging.info("Watching all namespaces (cluster-wide mode)")

    try:
        memo.reconciler = build_reconciler()
    except ConfigurationError as e:
        logging.error(f"Cannot start without a cloud backend: {e}")
        raise e.as_kopf_error() from e

    memo.reconcile_locks = KeyedLocks()
    memo.paused_clusters = set()
    memo.background_tasks = set()

    try:
        metrics_server = MetricsServer(
            port=operator_settings.metrics_port, host=operator_settings.metrics_host
        )
        await metrics_server.start()
        metrics_server.ready = True
        _global_metrics_server = metrics_server
    except Exception as e:
        logging.error(f"Failed to start metrics server: {e}")
        # Don't fail operator startup if metrics server fails
        logging.warning("Continuing without metrics server")


@kopf.on.cleanup()
async def cleanup_handler(memo: kopf.Memo, **_) -> None:
    """
    Operator cleanup handler.

    Cancels reconciliations started from the Cluster watch and stops the
    metrics server.
    """
    logging.info("Shutting down AWSCluster Operator...")

    tasks = list(getattr(memo, "background_tasks", ()))
    for task in tasks:
        task.cancel()
    if tasks:
        await asyncio.gather(*tasks, return_exceptions=True)

    global _global_metrics_server
    if _global_metrics_server:
        await _global_metrics_server.stop()
        _global_metrics_server = None


@kopf.on.probe(id="reconciler")
async def reconciler_probe(memo: kopf.Memo, **_) -> dict[str, str]:
    """Liveness probe: reports whether the reconciler has been built."""
    ready = getattr(memo, "reconciler", None) is not None
    return {
        "status": "ready" if ready else "not_ready",
        "operator": operator_settings.operator_name,
    }


def main() -> None:
    """
    Main entry point for the operator.

    This function:
    1. Configures logging
    2. Determines namespace scope
    3. Runs the kopf operator
    """
    configure_logging()

    watched_namespaces = operator_settings.watched_namespaces

    try:
        if watched_namespaces:
            kopf.run(
                namespaces=watched_namespaces,
                liveness_endpoint="http://0.0.0.0:8080/healthz",
            )
        else:
            kopf.run(
                clusterwide=True,
                liveness_endpoint="http://0.0.0.0:8080/healthz",
            )
    except KeyboardInterrupt:
        logging.info("Received shutdown signal")
        sys.exit(0)
    except Exception as e:
        logging.error(f"Operator failed with error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
