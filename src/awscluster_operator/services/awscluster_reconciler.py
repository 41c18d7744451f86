"""
AWSCluster reconciler - the control loop for AWS cluster infrastructure.

Each reconciliation fetches the AWSCluster, resolves its owning Cluster,
derives a ReconcileState once and runs one of two pipelines:

- the normal pipeline brings up network, security groups, bastion and load
  balancers in dependency order and stops at the first failure;
- the delete pipeline tears them down in reverse, attempting every step and
  only releasing the finalizer once all of them succeeded.

Staged changes are persisted through the ClusterScope when the pipeline
returns, whether it succeeded or not.
"""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from pydantic import ValidationError as PydanticValidationError

from ..constants import (
    CONDITION_BASTION_HOST_READY,
    CONDITION_CLUSTER_SECURITY_GROUPS_READY,
    CONDITION_LOAD_BALANCER_READY,
    DNS_NAME_REQUEUE_SECONDS,
    DNS_RESOLVE_REQUEUE_SECONDS,
    EVENT_FAILED_DELETE,
    EVENT_FAILED_RECONCILE,
    EVENT_SUCCESSFUL_DELETE,
    EVENT_WAITING_FOR_DNS,
    REASON_BASTION_HOST_FAILED,
    REASON_LOAD_BALANCER_FAILED,
    REASON_SECURITY_GROUP_RECONCILIATION_FAILED,
    REASON_WAIT_FOR_DNS_NAME,
    REASON_WAIT_FOR_DNS_NAME_RESOLVE,
    SEVERITY_INFO,
    SEVERITY_WARNING,
)
from ..errors import (
    DeletionError,
    ResourceNotFoundError,
    SubsystemError,
    ValidationError,
)
from ..models.awscluster import FailureDomainSpec
from ..models.cluster import Cluster
from ..models.common import ObjectMeta, ResourceKind
from ..models.reconcile import ReconcileRequest, ReconcileResult, ReconcileState
from ..observability.metrics import metrics_collector
from ..utils import conditions
from ..utils.annotations import (
    has_managed_by_annotation,
    has_paused_annotation,
    is_cluster_paused,
)
from ..utils.dns import DNSResolver, resolve_dns_name
from ..utils.events import EVENT_TYPE_NORMAL, EVENT_TYPE_WARNING, EventRecorder
from ..utils.kubernetes import ResourceClient
from ..utils.ownership import get_owner_cluster
from .base_reconciler import BaseReconciler
from .cluster_scope import ClusterScope
from .interfaces import ServiceFactories


class AWSClusterReconciler(BaseReconciler):
    """
    Reconciler for AWSCluster resources.

    Collaborators are injected: the resource client the AWSCluster and
    Cluster are read through, the subsystem service factories, the DNS
    resolver used to gate readiness and the event recorder.
    """

    resource_type = "awscluster"

    def __init__(
        self,
        resource_client: ResourceClient,
        service_factories: ServiceFactories,
        recorder: EventRecorder,
        dns_resolver: DNSResolver = resolve_dns_name,
        dns_name_requeue_seconds: float = DNS_NAME_REQUEUE_SECONDS,
        dns_resolve_requeue_seconds: float = DNS_RESOLVE_REQUEUE_SECONDS,
    ):
        super().__init__()
        self.resource_client = resource_client
        self.service_factories = service_factories
        self.recorder = recorder
        self.dns_resolver = dns_resolver
        self.dns_name_requeue_seconds = dns_name_requeue_seconds
        self.dns_resolve_requeue_seconds = dns_resolve_requeue_seconds

    @staticmethod
    def classify_state(cluster: Cluster | None, metadata: ObjectMeta) -> ReconcileState:
        """
        Derive the mode of an AWSCluster from its owner and metadata.

        Precedence is unowned, paused, deleting, active: a paused AWSCluster
        is left alone even while it is being deleted.
        """
        if cluster is None:
            return ReconcileState.UNOWNED
        if is_cluster_paused(cluster) or has_paused_annotation(metadata.annotations):
            return ReconcileState.PAUSED
        if metadata.deletion_timestamp is not None:
            return ReconcileState.DELETING
        return ReconcileState.ACTIVE

    async def do_reconcile(self, request: ReconcileRequest) -> ReconcileResult:
        try:
            body = await self.resource_client.get_awscluster(
                request.namespace, request.name
            )
        except ResourceNotFoundError:
            self.logger.info(
                f"AWSCluster {request} not found, nothing to reconcile",
                resource_type=self.resource_type,
                resource_name=request.name,
                namespace=request.namespace,
            )
            metrics_collector.forget_resource(request.namespace, request.name)
            return ReconcileResult()

        try:
            metadata = ObjectMeta.model_validate(body.get("metadata") or {})
        except PydanticValidationError as e:
            raise ValidationError(
                f"AWSCluster {request} has malformed metadata: {e}"
            ) from e

        cluster = await get_owner_cluster(self.resource_client, metadata)
        state = self.classify_state(cluster, metadata)
        metrics_collector.update_resource_state(
            request.namespace, request.name, state.value
        )

        if state is ReconcileState.UNOWNED:
            self.logger.info(
                f"Cluster controller has not yet set OwnerRef on AWSCluster {request}",
                state=state.value,
                namespace=request.namespace,
                resource_name=request.name,
            )
            return ReconcileResult()

        if state is ReconcileState.PAUSED:
            self.logger.info(
                f"AWSCluster {request} or linked Cluster is marked as paused, "
                "won't reconcile",
                state=state.value,
                namespace=request.namespace,
                resource_name=request.name,
                cluster_name=cluster.name if cluster else None,
            )
            return ReconcileResult()

        scope = ClusterScope.create(self.resource_client, cluster, body)

        try:
            if state is ReconcileState.DELETING:
                result = await self.reconcile_delete(scope)
            else:
                result = await self.reconcile_normal(scope)
        except BaseException:
            # The pipeline error wins over a failure to persist
            try:
                await scope.close()
            except Exception as close_error:
                self.logger.warning(
                    f"Failed to persist AWSCluster {scope.key} after a failed "
                    f"reconciliation: {close_error}",
                    namespace=scope.namespace,
                    resource_name=scope.name,
                    error_type=type(close_error).__name__,
                )
            raise

        await scope.close()
        return result

    # Normal path

    async def _run_step(
        self,
        scope: ClusterScope,
        subsystem: str,
        operation: str,
        call: Callable[[], Awaitable[None]],
    ) -> None:
        """Invoke one subsystem call and record its outcome in metrics."""
        try:
            await call()
        except BaseException:
            metrics_collector.record_subsystem_operation(subsystem, operation, False)
            raise
        metrics_collector.record_subsystem_operation(subsystem, operation, True)
        self.logger.debug(
            f"{operation} {subsystem} succeeded for AWSCluster {scope.key}",
            subsystem=subsystem,
            operation=operation,
            namespace=scope.namespace,
            resource_name=scope.name,
        )

    async def _reconcile_with_condition(
        self,
        scope: ClusterScope,
        subsystem: str,
        call: Callable[[], Awaitable[None]],
        condition_type: str,
        reason: str,
    ) -> None:
        """
        Run a normal-path step whose outcome is tracked in a condition.

        A failure (including cancellation) marks the condition False with
        Warning severity before the error leaves the pipeline.
        """
        try:
            await self._run_step(scope, subsystem, "reconcile", call)
        except asyncio.CancelledError:
            conditions.mark_false(
                scope.aws_cluster,
                condition_type,
                reason,
                SEVERITY_WARNING,
                f"{subsystem} reconciliation was cancelled",
            )
            raise
        except Exception as e:
            conditions.mark_false(
                scope.aws_cluster, condition_type, reason, SEVERITY_WARNING, str(e)
            )
            self.recorder.event(
                scope.aws_cluster,
                EVENT_TYPE_WARNING,
                EVENT_FAILED_RECONCILE,
                f"Failed to reconcile {subsystem}: {e}",
            )
            raise SubsystemError(subsystem, "reconcile", scope.key, e) from e

    async def reconcile_normal(self, scope: ClusterScope) -> ReconcileResult:
        """
        Bring the cluster infrastructure up, in dependency order.

        Returns a requeue while the API server load balancer has no DNS name
        or the name does not resolve yet.

        Raises:
            SubsystemError: When security groups, bastion or load balancers
                fail; the matching condition is marked False first
            Exception: Network failures propagate unchanged
        """
        self.logger.info(
            f"Reconciling AWSCluster {scope.key}",
            namespace=scope.namespace,
            resource_name=scope.name,
            cluster_name=scope.cluster_name,
            operation="reconcile_normal",
        )
        aws_cluster = scope.aws_cluster

        # The finalizer must be stored before any cloud resource exists
        scope.add_finalizer()
        await scope.patch_object()

        network = self.service_factories.network(scope)
        security_groups = self.service_factories.security_groups(scope)
        ec2 = self.service_factories.ec2(scope)
        elb = self.service_factories.elb(scope)

        await self._run_step(scope, "network", "reconcile", network.reconcile_network)

        await self._reconcile_with_condition(
            scope,
            "security_groups",
            security_groups.reconcile_security_groups,
            CONDITION_CLUSTER_SECURITY_GROUPS_READY,
            REASON_SECURITY_GROUP_RECONCILIATION_FAILED,
        )
        conditions.mark_true(aws_cluster, CONDITION_CLUSTER_SECURITY_GROUPS_READY)

        await self._reconcile_with_condition(
            scope,
            "bastion",
            ec2.reconcile_bastion,
            CONDITION_BASTION_HOST_READY,
            REASON_BASTION_HOST_FAILED,
        )
        conditions.mark_true(aws_cluster, CONDITION_BASTION_HOST_READY)

        await self._reconcile_with_condition(
            scope,
            "load_balancers",
            elb.reconcile_load_balancers,
            CONDITION_LOAD_BALANCER_READY,
            REASON_LOAD_BALANCER_FAILED,
        )

        api_server_elb = aws_cluster.status.network.api_server_elb
        if not api_server_elb.dns_name:
            conditions.mark_false(
                aws_cluster,
                CONDITION_LOAD_BALANCER_READY,
                REASON_WAIT_FOR_DNS_NAME,
                SEVERITY_INFO,
            )
            self.logger.info(
                f"Waiting on API server ELB DNS name for AWSCluster {scope.key}",
                namespace=scope.namespace,
                resource_name=scope.name,
                requeue_after=self.dns_name_requeue_seconds,
            )
            metrics_collector.record_requeue(scope.namespace, REASON_WAIT_FOR_DNS_NAME)
            return ReconcileResult.after(self.dns_name_requeue_seconds)

        if not await self._dns_name_resolves(scope, api_server_elb.dns_name):
            conditions.mark_false(
                aws_cluster,
                CONDITION_LOAD_BALANCER_READY,
                REASON_WAIT_FOR_DNS_NAME_RESOLVE,
                SEVERITY_INFO,
            )
            self.recorder.event(
                aws_cluster,
                EVENT_TYPE_NORMAL,
                EVENT_WAITING_FOR_DNS,
                f"Waiting for DNS name {api_server_elb.dns_name} to resolve",
            )
            self.logger.info(
                f"Waiting on API server ELB DNS name to resolve for AWSCluster "
                f"{scope.key}",
                namespace=scope.namespace,
                resource_name=scope.name,
                dns_name=api_server_elb.dns_name,
                requeue_after=self.dns_resolve_requeue_seconds,
            )
            metrics_collector.record_requeue(
                scope.namespace, REASON_WAIT_FOR_DNS_NAME_RESOLVE
            )
            return ReconcileResult.after(self.dns_resolve_requeue_seconds)

        conditions.mark_true(aws_cluster, CONDITION_LOAD_BALANCER_READY)

        endpoint = aws_cluster.spec.control_plane_endpoint
        if not endpoint.is_set:
            endpoint.host = api_server_elb.dns_name
            endpoint.port = scope.api_server_port()

        control_plane_zones = set(api_server_elb.availability_zones)
        for subnet in scope.private_subnets():
            zone = subnet.availability_zone
            scope.set_failure_domain(
                zone, FailureDomainSpec(control_plane=zone in control_plane_zones)
            )

        aws_cluster.status.ready = True
        return ReconcileResult()

    async def _dns_name_resolves(self, scope: ClusterScope, dns_name: str) -> bool:
        """A resolver failure counts as not resolved yet."""
        try:
            return await self.dns_resolver(dns_name)
        except Exception as e:
            self.logger.debug(
                f"DNS check for {dns_name} failed for AWSCluster {scope.key}: {e}",
                namespace=scope.namespace,
                resource_name=scope.name,
                dns_name=dns_name,
                error_type=type(e).__name__,
            )
            return False

    # Delete path

    async def reconcile_delete(self, scope: ClusterScope) -> ReconcileResult:
        """
        Tear the cluster infrastructure down in reverse dependency order.

        Every step runs even if an earlier one failed. The finalizer is only
        removed when all of them succeeded.

        Raises:
            DeletionError: Listing every step that failed in this pass
            asyncio.CancelledError: Immediately, leaving the finalizer in place
        """
        self.logger.info(
            f"Reconciling AWSCluster {scope.key} delete",
            namespace=scope.namespace,
            resource_name=scope.name,
            cluster_name=scope.cluster_name,
            operation="reconcile_delete",
        )

        ec2 = self.service_factories.ec2(scope)
        elb = self.service_factories.elb(scope)
        security_groups = self.service_factories.security_groups(scope)
        network = self.service_factories.network(scope)

        steps: list[tuple[str, Callable[[], Awaitable[None]]]] = [
            ("bastion", ec2.delete_bastion),
            ("load_balancers", elb.delete_load_balancers),
            ("security_groups", security_groups.delete_security_groups),
            ("network", network.delete_network),
        ]

        errors: list[Exception] = []
        for subsystem, call in steps:
            try:
                await self._run_step(scope, subsystem, "delete", call)
            except Exception as e:
                self.logger.error(
                    f"Error deleting {subsystem} for AWSCluster {scope.key}: {e}",
                    subsystem=subsystem,
                    operation="delete",
                    namespace=scope.namespace,
                    resource_name=scope.name,
                    error_type=type(e).__name__,
                )
                errors.append(SubsystemError(subsystem, "delete", scope.key, e))

        if errors:
            error = DeletionError(scope.key, errors)
            self.recorder.event(
                scope.aws_cluster, EVENT_TYPE_WARNING, EVENT_FAILED_DELETE, str(error)
            )
            raise error from errors[0]

        scope.remove_finalizer()
        self.recorder.event(
            scope.aws_cluster,
            EVENT_TYPE_NORMAL,
            EVENT_SUCCESSFUL_DELETE,
            "Deleted cluster infrastructure",
        )
        metrics_collector.forget_resource(scope.namespace, scope.name)
        return ReconcileResult()

    # Cluster watch mapping

    async def requeue_awscluster_for_unpaused_cluster(
        self, cluster_body: dict[str, Any]
    ) -> list[ReconcileRequest]:
        """
        Map a Cluster to the AWSCluster it references, if it should reconcile.

        Returns:
            One request for the referenced AWSCluster, or an empty list when
            the Cluster is being deleted or paused, references something else,
            the AWSCluster is gone, or the AWSCluster is externally managed
        """
        try:
            cluster = Cluster.model_validate(cluster_body)
        except PydanticValidationError as e:
            self.logger.warning(f"Ignoring malformed Cluster: {e}")
            return []

        key = f"{cluster.namespace}/{cluster.name}"
        if cluster.is_deleting:
            self.logger.debug(
                f"Cluster {key} has a deletion timestamp, skipping mapping"
            )
            return []

        if is_cluster_paused(cluster):
            self.logger.debug(f"Cluster {key} is still paused, skipping mapping")
            return []

        ref = cluster.spec.infrastructure_ref
        if ref is None or not ref.name:
            self.logger.debug(
                f"Cluster {key} has no infrastructureRef, skipping mapping"
            )
            return []

        if ref.resource_kind is not ResourceKind.AWS_CLUSTER:
            self.logger.debug(
                f"Cluster {key} references {ref.kind}, not AWSCluster, skipping mapping"
            )
            return []

        request = ReconcileRequest(
            namespace=ref.namespace or cluster.namespace, name=ref.name
        )
        try:
            body = await self.resource_client.get_awscluster(
                request.namespace, request.name
            )
        except ResourceNotFoundError:
            self.logger.debug(
                f"AWSCluster {request} referenced by Cluster {key} not found, "
                "skipping mapping"
            )
            return []

        annotations = (body.get("metadata") or {}).get("annotations")
        if has_managed_by_annotation(annotations):
            self.logger.debug(
                f"AWSCluster {request} is externally managed, skipping mapping"
            )
            return []

        self.logger.debug(
            f"Adding request for AWSCluster {request}", cluster_name=cluster.name
        )
        return [request]
