"""
Unit tests for status condition helpers.
"""

from awscluster_operator.constants import (
    CONDITION_BASTION_HOST_READY,
    CONDITION_CLUSTER_SECURITY_GROUPS_READY,
    CONDITION_LOAD_BALANCER_READY,
    CONDITION_READY,
    SUMMARY_CONDITIONS,
)
from awscluster_operator.models import AWSCluster
from awscluster_operator.utils import conditions


def new_cluster() -> AWSCluster:
    return AWSCluster.model_validate({"metadata": {"name": "a", "namespace": "ns"}})


class TestSetCondition:
    """Test adding and replacing conditions."""

    def test_mark_true(self):
        resource = new_cluster()
        conditions.mark_true(resource, CONDITION_BASTION_HOST_READY)

        assert conditions.is_true(resource, CONDITION_BASTION_HOST_READY)
        condition = conditions.get_condition(resource, CONDITION_BASTION_HOST_READY)
        assert condition.severity == ""
        assert condition.last_transition_time is not None

    def test_mark_false_records_reason_and_severity(self):
        resource = new_cluster()
        conditions.mark_false(
            resource, CONDITION_LOAD_BALANCER_READY, "LoadBalancerFailed", "Warning", "x"
        )

        condition = conditions.get_condition(resource, CONDITION_LOAD_BALANCER_READY)
        assert conditions.is_false(resource, CONDITION_LOAD_BALANCER_READY)
        assert condition.reason == "LoadBalancerFailed"
        assert condition.severity == "Warning"
        assert condition.message == "x"

    def test_one_entry_per_type(self):
        resource = new_cluster()
        conditions.mark_true(resource, CONDITION_BASTION_HOST_READY)
        conditions.mark_false(
            resource, CONDITION_BASTION_HOST_READY, "BastionHostFailed", "Warning"
        )

        assert len(resource.status.conditions) == 1
        assert conditions.is_false(resource, CONDITION_BASTION_HOST_READY)

    def test_transition_time_kept_when_status_unchanged(self):
        resource = new_cluster()
        conditions.mark_false(
            resource, CONDITION_LOAD_BALANCER_READY, "WaitForDNSName", "Info"
        )
        first = conditions.get_condition(resource, CONDITION_LOAD_BALANCER_READY)
        first.last_transition_time = "2020-01-01T00:00:00+00:00"

        conditions.mark_false(
            resource, CONDITION_LOAD_BALANCER_READY, "WaitForDNSNameResolve", "Info"
        )

        second = conditions.get_condition(resource, CONDITION_LOAD_BALANCER_READY)
        assert second.reason == "WaitForDNSNameResolve"
        assert second.last_transition_time == "2020-01-01T00:00:00+00:00"

    def test_transition_time_moves_when_status_changes(self):
        resource = new_cluster()
        conditions.mark_false(
            resource, CONDITION_LOAD_BALANCER_READY, "WaitForDNSName", "Info"
        )
        conditions.get_condition(
            resource, CONDITION_LOAD_BALANCER_READY
        ).last_transition_time = "2020-01-01T00:00:00+00:00"

        conditions.mark_true(resource, CONDITION_LOAD_BALANCER_READY)

        condition = conditions.get_condition(resource, CONDITION_LOAD_BALANCER_READY)
        assert condition.last_transition_time != "2020-01-01T00:00:00+00:00"

    def test_ready_sorted_first(self):
        resource = new_cluster()
        conditions.mark_true(resource, CONDITION_LOAD_BALANCER_READY)
        conditions.mark_true(resource, CONDITION_READY)
        conditions.mark_true(resource, CONDITION_BASTION_HOST_READY)

        assert [c.type for c in resource.status.conditions] == [
            CONDITION_READY,
            CONDITION_BASTION_HOST_READY,
            CONDITION_LOAD_BALANCER_READY,
        ]


class TestSetSummary:
    """Test the Ready summary."""

    def test_nothing_set_writes_nothing(self):
        resource = new_cluster()
        conditions.set_summary(resource, SUMMARY_CONDITIONS)

        assert resource.status.conditions == []

    def test_all_true(self):
        resource = new_cluster()
        for condition_type in SUMMARY_CONDITIONS:
            conditions.mark_true(resource, condition_type)

        conditions.set_summary(resource, SUMMARY_CONDITIONS)

        assert conditions.is_true(resource, CONDITION_READY)

    def test_worst_severity_wins(self):
        resource = new_cluster()
        conditions.mark_false(
            resource, CONDITION_LOAD_BALANCER_READY, "WaitForDNSName", "Info"
        )
        conditions.mark_false(
            resource,
            CONDITION_CLUSTER_SECURITY_GROUPS_READY,
            "ClusterSecurityGroupReconciliationFailed",
            "Warning",
            "sg quota",
        )

        conditions.set_summary(resource, SUMMARY_CONDITIONS)

        ready = conditions.get_condition(resource, CONDITION_READY)
        assert ready.status == "False"
        assert ready.reason == "ClusterSecurityGroupReconciliationFailed"
        assert ready.severity == "Warning"
        assert ready.message == "sg quota"

    def test_unknown_when_nothing_false(self):
        resource = new_cluster()
        conditions.mark_true(resource, CONDITION_BASTION_HOST_READY)
        conditions.mark_unknown(resource, CONDITION_LOAD_BALANCER_READY, "Pending")

        conditions.set_summary(resource, SUMMARY_CONDITIONS)

        ready = conditions.get_condition(resource, CONDITION_READY)
        assert ready.status == "Unknown"
        assert ready.reason == "Pending"
