"""
Kubernetes event recording for AWSCluster resources.

The reconciler records events through an ``EventRecorder`` so it stays
independent of kopf; production wiring posts them with ``kopf.event``.
"""

import logging
from typing import Any, Protocol

import kopf

from ..models.awscluster import AWSCluster
from ..models.common import ResourceKind

logger = logging.getLogger(__name__)

EVENT_TYPE_NORMAL = "Normal"
EVENT_TYPE_WARNING = "Warning"


class EventRecorder(Protocol):
    def event(
        self, aws_cluster: AWSCluster, event_type: str, reason: str, message: str
    ) -> None: ...


def object_reference(aws_cluster: AWSCluster) -> dict[str, Any]:
    """Minimal body kopf needs to attach an event to the AWSCluster."""
    kind = ResourceKind.AWS_CLUSTER
    return {
        "apiVersion": aws_cluster.api_version or kind.api_version,
        "kind": aws_cluster.kind or kind.kind,
        "metadata": {
            "name": aws_cluster.name,
            "namespace": aws_cluster.namespace,
            "uid": aws_cluster.metadata.uid,
        },
    }


class KopfEventRecorder:
    """Posts events through kopf's event queue."""

    def event(
        self, aws_cluster: AWSCluster, event_type: str, reason: str, message: str
    ) -> None:
        kopf.event(
            object_reference(aws_cluster),
            type=event_type,
            reason=reason,
            message=message,
        )
        logger.debug(
            f"Recorded {event_type} event {reason} on AWSCluster "
            f"{aws_cluster.namespace}/{aws_cluster.name}"
        )
