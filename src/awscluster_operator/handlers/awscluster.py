"""
AWSCluster handlers - drive reconciliation of AWSCluster resources.

Every entry point (create, resume, update, delete and the periodic resync)
funnels into the same reconciler call, serialized per resource identity.
Externally managed AWSClusters are filtered out before any handler runs.

kopf owns retries: a requeue from the reconciler is expressed as a
``kopf.TemporaryError`` with the requested delay, and errors are translated
by ``as_kopf_error``.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any

import kopf

from awscluster_operator.constants import (
    AWSCLUSTER_PLURAL,
    INFRASTRUCTURE_GROUP,
    INFRASTRUCTURE_VERSION,
)
from awscluster_operator.errors import as_kopf_error
from awscluster_operator.models.reconcile import ReconcileRequest, ReconcileResult
from awscluster_operator.settings import settings as operator_settings
from awscluster_operator.utils.annotations import not_externally_managed

logger = logging.getLogger(__name__)


async def run_reconcile(memo: Any, namespace: str, name: str) -> ReconcileResult:
    """
    Reconcile one AWSCluster while holding its identity lock.

    Raises:
        kopf.TemporaryError: For retryable failures
        kopf.PermanentError: For failures that retrying will not fix
    """
    request = ReconcileRequest(namespace=namespace, name=name)
    async with memo.reconcile_locks.hold(str(request)):
        try:
            return await memo.reconciler.reconcile(request)
        except asyncio.CancelledError:
            raise
        except Exception as e:
            raise as_kopf_error(e) from e


def raise_for_requeue(result: ReconcileResult) -> None:
    """Turn a requeue request into a kopf retry after the requested delay."""
    if result.requeue:
        raise kopf.TemporaryError(
            f"Requeue requested in {result.requeue_after}s", delay=result.requeue_after
        )


@kopf.on.create(
    AWSCLUSTER_PLURAL,
    group=INFRASTRUCTURE_GROUP,
    version=INFRASTRUCTURE_VERSION,
    when=not_externally_managed,
)
@kopf.on.resume(
    AWSCLUSTER_PLURAL,
    group=INFRASTRUCTURE_GROUP,
    version=INFRASTRUCTURE_VERSION,
    when=not_externally_managed,
)
@kopf.on.update(
    AWSCLUSTER_PLURAL,
    group=INFRASTRUCTURE_GROUP,
    version=INFRASTRUCTURE_VERSION,
    when=not_externally_managed,
)
async def reconcile_awscluster(
    name: str, namespace: str, memo: kopf.Memo, **_: Any
) -> None:
    """Create/update entry point."""
    result = await run_reconcile(memo, namespace, name)
    raise_for_requeue(result)


@kopf.on.delete(
    AWSCLUSTER_PLURAL,
    group=INFRASTRUCTURE_GROUP,
    version=INFRASTRUCTURE_VERSION,
    when=not_externally_managed,
    optional=True,
)
async def delete_awscluster(
    name: str, namespace: str, memo: kopf.Memo, **_: Any
) -> None:
    """
    Delete entry point.

    Registered as optional so kopf does not add a finalizer of its own; the
    reconciler's finalizer keeps the object alive until teardown finished.
    """
    result = await run_reconcile(memo, namespace, name)
    raise_for_requeue(result)


@kopf.timer(
    AWSCLUSTER_PLURAL,
    group=INFRASTRUCTURE_GROUP,
    version=INFRASTRUCTURE_VERSION,
    interval=float(operator_settings.sync_period_seconds),
    initial_delay=float(operator_settings.sync_period_seconds),
    when=not_externally_managed,
)
async def resync_awscluster(
    name: str, namespace: str, memo: kopf.Memo, **_: Any
) -> None:
    """Periodic resync so drift in the cloud is picked up without an event."""
    logger.debug(f"Periodic resync of AWSCluster {namespace}/{name}")
    result = await run_reconcile(memo, namespace, name)
    raise_for_requeue(result)
