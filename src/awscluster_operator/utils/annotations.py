"""
Cluster API annotation checks.

The paused and managed-by annotations are honoured by presence alone; their
values are ignored.
"""

from collections.abc import Mapping
from typing import Any

from ..constants import MANAGED_BY_ANNOTATION, PAUSED_ANNOTATION
from ..models.cluster import Cluster


def has_paused_annotation(annotations: Mapping[str, str] | None) -> bool:
    return PAUSED_ANNOTATION in (annotations or {})


def has_managed_by_annotation(annotations: Mapping[str, str] | None) -> bool:
    return MANAGED_BY_ANNOTATION in (annotations or {})


def is_cluster_paused(cluster: Cluster) -> bool:
    """A Cluster is paused through ``spec.paused`` or the paused annotation."""
    return cluster.spec.paused or has_paused_annotation(cluster.metadata.annotations)


def not_externally_managed(annotations: Mapping[str, str], **_: Any) -> bool:
    """kopf ``when=`` filter excluding externally managed AWSClusters."""
    return not has_managed_by_annotation(annotations)


def body_is_paused(body: Mapping[str, Any]) -> bool:
    """Paused check on a raw Cluster body, as delivered by a watch event."""
    spec = body.get("spec") or {}
    annotations = (body.get("metadata") or {}).get("annotations")
    return bool(spec.get("paused")) or has_paused_annotation(annotations)
