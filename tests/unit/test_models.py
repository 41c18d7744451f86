"""
Unit tests for the AWSCluster and Cluster pydantic models.
"""

import pytest

from awscluster_operator.models import AWSCluster, Cluster, ReconcileResult
from awscluster_operator.models.common import ObjectMeta, ResourceKind, split_api_version
from tests.fixtures.awscluster_resources import (
    DNS_NAME,
    make_awscluster,
    make_cluster,
)


class TestResourceKind:
    """Test resolving references to known kinds."""

    def test_split_api_version(self):
        assert split_api_version("cluster.x-k8s.io/v1beta1") == (
            "cluster.x-k8s.io",
            "v1beta1",
        )
        assert split_api_version("v1") == ("", "v1")

    @pytest.mark.parametrize(
        "api_version,kind,expected",
        [
            ("cluster.x-k8s.io/v1beta1", "Cluster", ResourceKind.CLUSTER),
            ("cluster.x-k8s.io/v1alpha3", "Cluster", ResourceKind.CLUSTER),
            (
                "infrastructure.cluster.x-k8s.io/v1beta2",
                "AWSCluster",
                ResourceKind.AWS_CLUSTER,
            ),
            ("example.com/v1", "Cluster", None),
            ("cluster.x-k8s.io/v1beta1", "MachineDeployment", None),
            ("", "Cluster", None),
        ],
    )
    def test_from_reference(self, api_version, kind, expected):
        assert ResourceKind.from_reference(api_version, kind) is expected

    def test_api_version(self):
        assert ResourceKind.CLUSTER.api_version == "cluster.x-k8s.io/v1beta1"


class TestObjectMeta:
    """Test owner lookup on object metadata."""

    def test_find_owner_skips_foreign_kinds(self):
        metadata = ObjectMeta.model_validate(
            {
                "name": "a",
                "ownerReferences": [
                    {"apiVersion": "example.com/v1", "kind": "Cluster", "name": "x"},
                    {"apiVersion": "cluster.x-k8s.io/v1beta1", "kind": "Cluster", "name": "y"},
                ],
            }
        )

        owner = metadata.find_owner(ResourceKind.CLUSTER)

        assert owner.name == "y"

    def test_find_owner_none(self):
        assert ObjectMeta(name="a").find_owner(ResourceKind.CLUSTER) is None


class TestAWSClusterModel:
    """Test parsing of AWSCluster bodies."""

    def test_parses_fixture(self):
        aws_cluster = AWSCluster.model_validate(make_awscluster(dns_name=DNS_NAME))

        assert aws_cluster.name == "test-awscluster"
        assert aws_cluster.spec.region == "us-east-1"
        assert aws_cluster.status.network.api_server_elb.dns_name == DNS_NAME
        assert len(aws_cluster.spec.network.private_subnets()) == 5
        assert not aws_cluster.is_deleting

    def test_deleting(self):
        aws_cluster = AWSCluster.model_validate(make_awscluster(deleting=True))
        assert aws_cluster.is_deleting

    def test_null_sections_use_defaults(self):
        aws_cluster = AWSCluster.model_validate(
            {"metadata": {"name": "a"}, "spec": None, "status": None}
        )

        assert aws_cluster.spec.network.subnets == []
        assert aws_cluster.status.conditions == []
        assert aws_cluster.status.failure_domains == {}

    def test_null_lists_in_status(self):
        aws_cluster = AWSCluster.model_validate(
            {
                "metadata": {"name": "a"},
                "status": {"conditions": None, "failureDomains": None},
            }
        )

        assert aws_cluster.status.conditions == []
        assert aws_cluster.status.failure_domains == {}

    def test_dump_uses_wire_names(self):
        aws_cluster = AWSCluster.model_validate(make_awscluster())
        aws_cluster.spec.control_plane_endpoint.host = "h"

        dumped = aws_cluster.model_dump(by_alias=True, mode="json")

        assert dumped["spec"]["controlPlaneEndpoint"]["host"] == "h"
        assert "networkStatus" in dumped["status"]
        assert "failureDomains" in dumped["status"]

    def test_endpoint_is_set(self):
        aws_cluster = AWSCluster.model_validate({"metadata": {"name": "a"}})
        endpoint = aws_cluster.spec.control_plane_endpoint
        assert not endpoint.is_set

        endpoint.host = "h"
        assert not endpoint.is_set

        endpoint.port = 6443
        assert endpoint.is_set

    def test_undeclared_fields_kept_in_dump(self):
        body = make_awscluster()
        body["spec"]["network"]["subnets"][0]["routeTableId"] = "rtb-1"
        body["spec"]["network"]["vpc"]["internetGatewayId"] = "igw-1"
        body["spec"]["imageLookupOrg"] = "258751437250"
        body["status"]["conditions"] = [
            {"type": "Ready", "status": "True", "observedGeneration": 3}
        ]

        dumped = AWSCluster.model_validate(body).model_dump(
            by_alias=True, mode="json", exclude_none=True
        )

        assert dumped["spec"]["network"]["subnets"][0]["routeTableId"] == "rtb-1"
        assert dumped["spec"]["network"]["vpc"]["internetGatewayId"] == "igw-1"
        assert dumped["spec"]["imageLookupOrg"] == "258751437250"
        assert dumped["status"]["conditions"][0]["observedGeneration"] == 3


class TestReconcileResult:
    """Test requeue semantics of a reconciliation outcome."""

    def test_converged(self):
        assert not ReconcileResult().requeue

    def test_after(self):
        result = ReconcileResult.after(20)
        assert result.requeue
        assert result.requeue_after == 20


class TestClusterModel:
    """Test parsing of Cluster bodies."""

    def test_parses_fixture(self):
        cluster = Cluster.model_validate(make_cluster(api_server_port=443))

        assert cluster.name == "test-cluster"
        assert cluster.spec.cluster_network.api_server_port == 443
        assert cluster.spec.infrastructure_ref.resource_kind is ResourceKind.AWS_CLUSTER
        assert not cluster.spec.paused

    def test_paused_and_deleting(self):
        cluster = Cluster.model_validate(make_cluster(paused=True, deleting=True))

        assert cluster.spec.paused
        assert cluster.is_deleting

    def test_missing_spec(self):
        cluster = Cluster.model_validate({"metadata": {"name": "c"}, "spec": None})

        assert cluster.spec.infrastructure_ref is None
        assert cluster.spec.cluster_network is None
