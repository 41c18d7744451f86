"""
Test fixtures for AWSCluster and Cluster resources.

This module provides builders for sample custom resources plus in-memory
stand-ins for the API server, the subsystem services and the event
recorder, so the reconciler can be exercised without a cluster.
"""

import copy
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock

from awscluster_operator.constants import CLUSTER_FINALIZER, PAUSED_ANNOTATION
from awscluster_operator.errors import ResourceNotFoundError
from awscluster_operator.services.interfaces import ServiceFactories

NAMESPACE = "default"
CLUSTER_NAME = "test-cluster"
AWSCLUSTER_NAME = "test-awscluster"
DNS_NAME = "www.example.com"

AVAILABILITY_ZONES = ["us-east-1a", "us-east-1b", "us-east-1c", "us-east-1d", "us-east-1e"]


def make_subnets(zones: list[str] | None = None) -> list[dict[str, Any]]:
    """One private and one public subnet per availability zone."""
    subnets = []
    for index, zone in enumerate(zones or AVAILABILITY_ZONES):
        subnets.append(
            {
                "id": f"subnet-private-{index}",
                "availabilityZone": zone,
                "cidrBlock": f"10.0.{index * 2}.0/24",
                "isPublic": False,
            }
        )
        subnets.append(
            {
                "id": f"subnet-public-{index}",
                "availabilityZone": zone,
                "cidrBlock": f"10.0.{index * 2 + 1}.0/24",
                "isPublic": True,
            }
        )
    return subnets


def make_awscluster(
    name: str = AWSCLUSTER_NAME,
    namespace: str = NAMESPACE,
    *,
    owner: str | None = CLUSTER_NAME,
    owner_api_version: str = "cluster.x-k8s.io/v1beta1",
    finalizers: list[str] | None = None,
    annotations: dict[str, str] | None = None,
    deleting: bool = False,
    dns_name: str = "",
    elb_zones: list[str] | None = None,
    subnets: list[dict[str, Any]] | None = None,
    bastion_enabled: bool = False,
    conditions: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build an AWSCluster body as the API server would return it."""
    metadata: dict[str, Any] = {
        "name": name,
        "namespace": namespace,
        "uid": f"uid-{name}",
        "generation": 1,
        "finalizers": list(finalizers or []),
        "annotations": dict(annotations or {}),
    }
    if owner:
        metadata["ownerReferences"] = [
            {
                "apiVersion": owner_api_version,
                "kind": "Cluster",
                "name": owner,
                "uid": f"uid-{owner}",
                "controller": True,
                "blockOwnerDeletion": True,
            }
        ]
    if deleting:
        metadata["deletionTimestamp"] = "2024-01-01T00:00:00Z"

    return {
        "apiVersion": "infrastructure.cluster.x-k8s.io/v1beta1",
        "kind": "AWSCluster",
        "metadata": metadata,
        "spec": {
            "region": "us-east-1",
            "sshKeyName": "default",
            "network": {
                "vpc": {"id": "vpc-exists", "cidrBlock": "10.0.0.0/16"},
                "subnets": subnets if subnets is not None else make_subnets(),
            },
            "bastion": {"enabled": bastion_enabled},
        },
        "status": {
            "ready": False,
            "networkStatus": {
                "apiServerElb": {
                    "name": f"{name}-apiserver",
                    "dnsName": dns_name,
                    "availabilityZones": list(
                        AVAILABILITY_ZONES if elb_zones is None else elb_zones
                    ),
                }
            },
            "conditions": list(conditions or []),
        },
    }


def make_cluster(
    name: str = CLUSTER_NAME,
    namespace: str = NAMESPACE,
    *,
    paused: bool = False,
    paused_annotation: bool = False,
    deleting: bool = False,
    infrastructure_ref: dict[str, Any] | None | bool = True,
    api_server_port: int | None = None,
) -> dict[str, Any]:
    """
    Build a Cluster API Cluster body.

    ``infrastructure_ref=True`` references the default AWSCluster, a dict
    is used as-is and None leaves the reference unset.
    """
    metadata: dict[str, Any] = {
        "name": name,
        "namespace": namespace,
        "uid": f"uid-{name}",
        "annotations": {PAUSED_ANNOTATION: ""} if paused_annotation else {},
    }
    if deleting:
        metadata["deletionTimestamp"] = "2024-01-01T00:00:00Z"

    spec: dict[str, Any] = {"paused": paused}
    if infrastructure_ref is True:
        spec["infrastructureRef"] = {
            "apiVersion": "infrastructure.cluster.x-k8s.io/v1beta1",
            "kind": "AWSCluster",
            "name": AWSCLUSTER_NAME,
            "namespace": namespace,
        }
    elif isinstance(infrastructure_ref, dict):
        spec["infrastructureRef"] = infrastructure_ref
    if api_server_port is not None:
        spec["clusterNetwork"] = {"apiServerPort": api_server_port}

    return {
        "apiVersion": "cluster.x-k8s.io/v1beta1",
        "kind": "Cluster",
        "metadata": metadata,
        "spec": spec,
    }


class FakeResourceClient:
    """
    In-memory ResourceClient.

    Stores bodies keyed by namespace/name, applies merge patches the way the
    API server does for the fields the reconciler writes, and keeps a log of
    every patch for assertions.
    """

    def __init__(self):
        self.awsclusters: dict[tuple[str, str], dict[str, Any]] = {}
        self.clusters: dict[tuple[str, str], dict[str, Any]] = {}
        self.patches: list[dict[str, Any]] = []
        self.status_patches: list[dict[str, Any]] = []
        self.cluster_error: Exception | None = None
        self.patch_error: Exception | None = None

    def add_awscluster(self, body: dict[str, Any]) -> None:
        meta = body["metadata"]
        self.awsclusters[(meta["namespace"], meta["name"])] = copy.deepcopy(body)

    def add_cluster(self, body: dict[str, Any]) -> None:
        meta = body["metadata"]
        self.clusters[(meta["namespace"], meta["name"])] = copy.deepcopy(body)

    def stored_awscluster(
        self, namespace: str = NAMESPACE, name: str = AWSCLUSTER_NAME
    ) -> dict[str, Any]:
        return self.awsclusters[(namespace, name)]

    async def get_awscluster(self, namespace: str, name: str) -> dict[str, Any]:
        try:
            return copy.deepcopy(self.awsclusters[(namespace, name)])
        except KeyError:
            raise ResourceNotFoundError("AWSCluster", namespace, name) from None

    async def get_cluster(self, namespace: str, name: str) -> dict[str, Any]:
        if self.cluster_error is not None:
            raise self.cluster_error
        try:
            return copy.deepcopy(self.clusters[(namespace, name)])
        except KeyError:
            raise ResourceNotFoundError("Cluster", namespace, name) from None

    async def patch_awscluster(
        self, namespace: str, name: str, patch: dict[str, Any]
    ) -> dict[str, Any]:
        if self.patch_error is not None:
            raise self.patch_error
        body = self.awsclusters.get((namespace, name))
        if body is None:
            raise ResourceNotFoundError("AWSCluster", namespace, name)
        self.patches.append(copy.deepcopy(patch))
        if "metadata" in patch:
            body["metadata"].update(copy.deepcopy(patch["metadata"]))
        if "spec" in patch:
            body.setdefault("spec", {}).update(copy.deepcopy(patch["spec"]))
        return copy.deepcopy(body)

    async def patch_awscluster_status(
        self, namespace: str, name: str, status: dict[str, Any]
    ) -> dict[str, Any]:
        if self.patch_error is not None:
            raise self.patch_error
        body = self.awsclusters.get((namespace, name))
        if body is None:
            raise ResourceNotFoundError("AWSCluster", namespace, name)
        self.status_patches.append(copy.deepcopy(status))
        body.setdefault("status", {}).update(copy.deepcopy(status))
        return copy.deepcopy(body)


class FakeRecorder:
    """EventRecorder that keeps events in memory."""

    def __init__(self):
        self.events: list[tuple[str, str, str]] = []

    def event(self, aws_cluster, event_type: str, reason: str, message: str) -> None:
        self.events.append((event_type, reason, message))

    def reasons(self) -> list[str]:
        return [reason for _, reason, _ in self.events]


class FakeServices:
    """
    Scripted subsystem services.

    Every method is an AsyncMock that appends its name to ``calls`` and
    raises the exception registered for it in ``errors``, if any.
    """

    def __init__(self):
        self.calls: list[str] = []
        self.errors: dict[str, BaseException] = {}
        self.scopes: list[Any] = []
        self.network = SimpleNamespace(
            reconcile_network=self._method("reconcile_network"),
            delete_network=self._method("delete_network"),
        )
        self.security_groups = SimpleNamespace(
            reconcile_security_groups=self._method("reconcile_security_groups"),
            delete_security_groups=self._method("delete_security_groups"),
        )
        self.ec2 = SimpleNamespace(
            reconcile_bastion=self._method("reconcile_bastion"),
            delete_bastion=self._method("delete_bastion"),
        )
        self.elb = SimpleNamespace(
            reconcile_load_balancers=self._method("reconcile_load_balancers"),
            delete_load_balancers=self._method("delete_load_balancers"),
        )

    def _method(self, name: str) -> AsyncMock:
        async def call():
            self.calls.append(name)
            if name in self.errors:
                raise self.errors[name]

        return AsyncMock(side_effect=call)

    def _bind(self, service):
        def factory(scope):
            self.scopes.append(scope)
            return service

        return factory

    def factories(self) -> ServiceFactories:
        return ServiceFactories(
            network=self._bind(self.network),
            security_groups=self._bind(self.security_groups),
            ec2=self._bind(self.ec2),
            elb=self._bind(self.elb),
        )


def finalizers_of(body: dict[str, Any]) -> list[str]:
    return body["metadata"].get("finalizers") or []


def has_cluster_finalizer(body: dict[str, Any]) -> bool:
    return CLUSTER_FINALIZER in finalizers_of(body)


def condition_of(body: dict[str, Any], condition_type: str) -> dict[str, Any] | None:
    for condition in (body.get("status") or {}).get("conditions") or []:
        if condition["type"] == condition_type:
            return condition
    return None
