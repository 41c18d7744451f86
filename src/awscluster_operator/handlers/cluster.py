"""
Cluster handlers - re-trigger AWSCluster reconciliation when a Cluster is unpaused.

Watches do not cascade across kinds: an AWSCluster whose owner was paused
was left alone, and nothing on the AWSCluster changes when the pause is
lifted. This watch keeps the last seen paused state of every Cluster in
memory and, on a paused to unpaused transition, maps the Cluster to its
AWSCluster and reconciles it. Clusters are only read, never patched.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import kopf

from awscluster_operator.constants import (
    CLUSTER_API_GROUP,
    CLUSTER_API_VERSION,
    CLUSTER_PLURAL,
)
from awscluster_operator.models.reconcile import ReconcileRequest
from awscluster_operator.observability.metrics import metrics_collector
from awscluster_operator.utils.annotations import body_is_paused

logger = logging.getLogger(__name__)


@kopf.on.event(CLUSTER_PLURAL, group=CLUSTER_API_GROUP, version=CLUSTER_API_VERSION)
async def watch_cluster_pause(
    event: dict[str, Any],
    body: kopf.Body,
    name: str,
    namespace: str,
    memo: kopf.Memo,
    **_: Any,
) -> None:
    """Reconcile the referenced AWSCluster when a Cluster stops being paused."""
    key = f"{namespace}/{name}"
    paused_clusters: set[str] = memo.paused_clusters

    if event.get("type") == "DELETED":
        paused_clusters.discard(key)
        return

    if body_is_paused(body):
        if key not in paused_clusters:
            logger.debug(f"Cluster {key} is paused")
        paused_clusters.add(key)
        return

    if key not in paused_clusters:
        return
    paused_clusters.discard(key)

    logger.info(f"Cluster {key} was unpaused, looking up its AWSCluster")
    requests = await memo.reconciler.requeue_awscluster_for_unpaused_cluster(
        dict(body)
    )

    for request in requests:
        metrics_collector.record_cluster_unpaused(request.namespace)
        task = asyncio.create_task(reconcile_until_settled(memo, request, key))
        memo.background_tasks.add(task)
        task.add_done_callback(memo.background_tasks.discard)


async def reconcile_until_settled(
    memo: Any, request: ReconcileRequest, cluster_key: str
) -> None:
    """
    Reconcile an AWSCluster outside the AWSCluster watch.

    Event handlers are not retried by kopf, so requeues are honoured here.
    Failures are logged and left to the periodic resync.
    """
    while True:
        async with memo.reconcile_locks.hold(str(request)):
            try:
                result = await memo.reconciler.reconcile(request)
            except Exception as e:
                logger.error(
                    f"Reconciliation of AWSCluster {request} after Cluster "
                    f"{cluster_key} was unpaused failed: {e}"
                )
                return
        if not result.requeue:
            return
        await asyncio.sleep(result.requeue_after)
