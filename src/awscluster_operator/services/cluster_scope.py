"""
Per-reconciliation view of an AWSCluster and its owning Cluster.

The scope wraps the parsed AWSCluster, stages every mutation made during a
reconciliation on it and persists the result through the ResourceClient.
Persistence compares against a snapshot taken when the scope was built, so
only fields that actually changed are patched.
"""

from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..constants import (
    CLUSTER_FINALIZER,
    CONDITION_READY,
    DEFAULT_API_SERVER_PORT,
    SUMMARY_CONDITIONS,
)
from ..errors import ValidationError
from ..models.awscluster import AWSCluster, FailureDomainSpec, SubnetSpec
from ..models.cluster import Cluster
from ..observability.logging import OperatorLogger
from ..utils import conditions
from ..utils.kubernetes import ResourceClient


class ClusterScope:
    """
    Holds the resources of one reconciliation and writes them back.

    Subsystem services receive the scope and read or update the AWSCluster
    through it; nothing is written to the API server until ``patch_object``
    or ``close`` is called.
    """

    def __init__(
        self,
        resource_client: ResourceClient,
        cluster: Cluster,
        aws_cluster: AWSCluster,
    ):
        self.resource_client = resource_client
        self.cluster = cluster
        self.aws_cluster = aws_cluster
        self._original = aws_cluster.model_copy(deep=True)
        self.logger = OperatorLogger(__name__)

    @classmethod
    def create(
        cls,
        resource_client: ResourceClient,
        cluster: Cluster,
        aws_cluster_body: dict[str, Any],
    ) -> "ClusterScope":
        """
        Build a scope from a raw AWSCluster body.

        Raises:
            ValidationError: If the AWSCluster cannot be parsed
        """
        try:
            aws_cluster = AWSCluster.model_validate(aws_cluster_body)
        except PydanticValidationError as e:
            metadata = aws_cluster_body.get("metadata") or {}
            raise ValidationError(
                f"AWSCluster {metadata.get('namespace')}/{metadata.get('name')} "
                f"is malformed: {e}"
            ) from e
        return cls(resource_client, cluster, aws_cluster)

    @property
    def name(self) -> str:
        return self.aws_cluster.name

    @property
    def namespace(self) -> str:
        return self.aws_cluster.namespace

    @property
    def key(self) -> str:
        return f"{self.namespace}/{self.name}"

    @property
    def cluster_name(self) -> str:
        return self.cluster.name

    @property
    def region(self) -> str:
        return self.aws_cluster.spec.region

    def api_server_port(self) -> int:
        """API server port from the Cluster network settings, 6443 by default."""
        network = self.cluster.spec.cluster_network
        if network is not None and network.api_server_port:
            return network.api_server_port
        return DEFAULT_API_SERVER_PORT

    # Network accessors used by the subsystem services

    def subnets(self) -> list[SubnetSpec]:
        return self.aws_cluster.spec.network.subnets

    def set_subnets(self, subnets: list[SubnetSpec]) -> None:
        self.aws_cluster.spec.network.subnets = list(subnets)

    def private_subnets(self) -> list[SubnetSpec]:
        return self.aws_cluster.spec.network.private_subnets()

    def set_failure_domain(self, zone: str, spec: FailureDomainSpec) -> None:
        self.aws_cluster.status.failure_domains[zone] = spec

    # Finalizer bookkeeping

    def has_finalizer(self) -> bool:
        return CLUSTER_FINALIZER in self.aws_cluster.metadata.finalizers

    def add_finalizer(self) -> bool:
        """Add the cluster finalizer; returns True if it was missing."""
        if self.has_finalizer():
            return False
        self.aws_cluster.metadata.finalizers.append(CLUSTER_FINALIZER)
        return True

    def remove_finalizer(self) -> bool:
        """Remove the cluster finalizer; returns True if it was present."""
        if not self.has_finalizer():
            return False
        self.aws_cluster.metadata.finalizers = [
            f for f in self.aws_cluster.metadata.finalizers if f != CLUSTER_FINALIZER
        ]
        return True

    # Persistence

    def _object_patch(self) -> dict[str, Any]:
        patch: dict[str, Any] = {}
        current, original = self.aws_cluster, self._original

        if current.metadata.finalizers != original.metadata.finalizers:
            patch["metadata"] = {"finalizers": list(current.metadata.finalizers)}

        # Only top-level spec fields that changed are sent
        changed = {
            field
            for field in type(current.spec).model_fields
            if getattr(current.spec, field) != getattr(original.spec, field)
        }
        if changed:
            patch["spec"] = current.spec.model_dump(
                by_alias=True, mode="json", exclude_none=True, include=changed
            )
        return patch

    def _status_patch(self) -> dict[str, Any] | None:
        if self.aws_cluster.status == self._original.status:
            return None
        return self.aws_cluster.status.model_dump(
            by_alias=True, mode="json", exclude_none=True
        )

    async def patch_object(self) -> None:
        """
        Persist staged changes of the AWSCluster.

        Status goes first: once a finalizer removal is written the object may
        disappear from the API server.
        """
        status = self._status_patch()
        if status is not None:
            await self.resource_client.patch_awscluster_status(
                self.namespace, self.name, status
            )

        patch = self._object_patch()
        if patch:
            await self.resource_client.patch_awscluster(
                self.namespace, self.name, patch
            )

        if status is not None or patch:
            self.logger.debug(
                f"Persisted AWSCluster {self.key}",
                resource_type="awscluster",
                resource_name=self.name,
                namespace=self.namespace,
                operation="patch",
            )
        self._original = self.aws_cluster.model_copy(deep=True)

    async def close(self) -> None:
        """Summarise conditions into Ready and persist everything staged."""
        conditions.set_summary(self.aws_cluster, SUMMARY_CONDITIONS, CONDITION_READY)
        await self.patch_object()
