"""
Status condition helpers for AWSCluster resources.

Conditions follow the Cluster API conventions: one entry per type, a
tri-state status, a severity that is only set while the condition is False,
and a ``lastTransitionTime`` that only moves when the status changes. The
Ready condition is kept first, the rest sorted by type.
"""

from collections.abc import Iterable
from datetime import UTC, datetime

from ..constants import (
    CONDITION_FALSE,
    CONDITION_READY,
    CONDITION_TRUE,
    CONDITION_UNKNOWN,
    SEVERITY_ERROR,
    SEVERITY_INFO,
    SEVERITY_NONE,
    SEVERITY_WARNING,
)
from ..models.awscluster import AWSCluster
from ..models.common import Condition

_SEVERITY_RANK = {
    SEVERITY_ERROR: 3,
    SEVERITY_WARNING: 2,
    SEVERITY_INFO: 1,
    SEVERITY_NONE: 0,
}


def _now() -> str:
    return datetime.now(UTC).isoformat()


def get_condition(resource: AWSCluster, condition_type: str) -> Condition | None:
    """Get a specific status condition."""
    for condition in resource.status.conditions:
        if condition.type == condition_type:
            return condition
    return None


def is_true(resource: AWSCluster, condition_type: str) -> bool:
    condition = get_condition(resource, condition_type)
    return condition is not None and condition.status == CONDITION_TRUE


def is_false(resource: AWSCluster, condition_type: str) -> bool:
    condition = get_condition(resource, condition_type)
    return condition is not None and condition.status == CONDITION_FALSE


def set_condition(resource: AWSCluster, condition: Condition) -> None:
    """Add or replace a condition, keeping the transition time when status is unchanged."""
    existing = get_condition(resource, condition.type)
    if existing is not None and existing.status == condition.status:
        condition.last_transition_time = existing.last_transition_time
    if condition.last_transition_time is None:
        condition.last_transition_time = _now()

    conditions = [c for c in resource.status.conditions if c.type != condition.type]
    conditions.append(condition)
    conditions.sort(key=lambda c: (c.type != CONDITION_READY, c.type))
    resource.status.conditions = conditions


def mark_true(resource: AWSCluster, condition_type: str) -> None:
    set_condition(resource, Condition(type=condition_type, status=CONDITION_TRUE))


def mark_false(
    resource: AWSCluster,
    condition_type: str,
    reason: str,
    severity: str,
    message: str = "",
) -> None:
    set_condition(
        resource,
        Condition(
            type=condition_type,
            status=CONDITION_FALSE,
            reason=reason,
            severity=severity,
            message=message,
        ),
    )


def mark_unknown(
    resource: AWSCluster, condition_type: str, reason: str, message: str = ""
) -> None:
    set_condition(
        resource,
        Condition(
            type=condition_type,
            status=CONDITION_UNKNOWN,
            reason=reason,
            message=message,
        ),
    )


def set_summary(
    resource: AWSCluster,
    condition_types: Iterable[str],
    target_type: str = CONDITION_READY,
) -> None:
    """
    Summarise a group of conditions into ``target_type``.

    The summary is False when any member is False, taking reason, severity
    and message from the most severe one (first listed wins ties). Otherwise
    it is Unknown when any member is Unknown, and True when all are True.
    Nothing is written when none of the members has been set yet.
    """
    members = [
        condition
        for condition_type in condition_types
        if (condition := get_condition(resource, condition_type)) is not None
    ]
    if not members:
        return

    failed = [c for c in members if c.status == CONDITION_FALSE]
    if failed:
        worst = max(failed, key=lambda c: _SEVERITY_RANK.get(c.severity, 0))
        mark_false(resource, target_type, worst.reason, worst.severity, worst.message)
        return

    unknown = [c for c in members if c.status == CONDITION_UNKNOWN]
    if unknown:
        mark_unknown(resource, target_type, unknown[0].reason, unknown[0].message)
        return

    mark_true(resource, target_type)
