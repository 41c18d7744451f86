"""
Unit tests for the AWSCluster delete pipeline.

Deletion attempts every subsystem teardown in reverse dependency order and
only releases the finalizer when all of them succeeded.
"""

import asyncio

import pytest

from awscluster_operator.constants import CLUSTER_FINALIZER
from awscluster_operator.errors import DeletionError, SubsystemError
from awscluster_operator.models import Cluster, ReconcileRequest, ReconcileResult
from awscluster_operator.services.cluster_scope import ClusterScope
from tests.fixtures.awscluster_resources import (
    AWSCLUSTER_NAME,
    NAMESPACE,
    has_cluster_finalizer,
    make_awscluster,
    make_cluster,
)

DELETE_ORDER = [
    "delete_bastion",
    "delete_load_balancers",
    "delete_security_groups",
    "delete_network",
]


@pytest.fixture
def deleting_scope(resource_client):
    body = make_awscluster(deleting=True, finalizers=[CLUSTER_FINALIZER])
    resource_client.add_awscluster(body)
    cluster = Cluster.model_validate(make_cluster())
    return ClusterScope.create(resource_client, cluster, body)


class TestDeletePipeline:
    """Test reconcile_delete on a scope directly."""

    @pytest.mark.asyncio
    async def test_all_steps_succeed_removes_finalizer(
        self, reconciler, deleting_scope, services, recorder
    ):
        result = await reconciler.reconcile_delete(deleting_scope)

        assert result == ReconcileResult()
        assert services.calls == DELETE_ORDER
        assert not deleting_scope.has_finalizer()
        assert recorder.reasons() == ["SuccessfulDelete"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("failing", DELETE_ORDER)
    async def test_single_failure_keeps_finalizer_and_attempts_all(
        self, reconciler, deleting_scope, services, failing
    ):
        services.errors[failing] = RuntimeError(f"{failing} failed")

        with pytest.raises(DeletionError) as exc_info:
            await reconciler.reconcile_delete(deleting_scope)

        assert services.calls == DELETE_ORDER
        assert deleting_scope.has_finalizer()
        assert len(exc_info.value.errors) == 1
        assert f"{failing} failed" in str(exc_info.value)

    @pytest.mark.asyncio
    async def test_multiple_failures_are_aggregated(
        self, reconciler, deleting_scope, services, recorder
    ):
        first = RuntimeError("bastion stuck")
        services.errors["delete_bastion"] = first
        services.errors["delete_network"] = RuntimeError("vpc has dependencies")

        with pytest.raises(DeletionError) as exc_info:
            await reconciler.reconcile_delete(deleting_scope)

        error = exc_info.value
        assert [e.subsystem for e in error.errors] == ["bastion", "network"]
        assert all(isinstance(e, SubsystemError) for e in error.errors)
        assert error.cause.cause is first
        assert error.retryable
        assert deleting_scope.has_finalizer()
        assert recorder.reasons() == ["FailedDelete"]

    @pytest.mark.asyncio
    async def test_cancellation_propagates_immediately(
        self, reconciler, deleting_scope, services
    ):
        services.errors["delete_load_balancers"] = asyncio.CancelledError()

        with pytest.raises(asyncio.CancelledError):
            await reconciler.reconcile_delete(deleting_scope)

        assert services.calls == ["delete_bastion", "delete_load_balancers"]
        assert deleting_scope.has_finalizer()

    @pytest.mark.asyncio
    async def test_steps_run_without_finalizer_present(
        self, reconciler, resource_client, services
    ):
        body = make_awscluster(deleting=True, finalizers=[])
        resource_client.add_awscluster(body)
        scope = ClusterScope.create(
            resource_client, Cluster.model_validate(make_cluster()), body
        )

        await reconciler.reconcile_delete(scope)

        assert services.calls == DELETE_ORDER
        assert not scope.has_finalizer()


class TestDeleteThroughDispatcher:
    """Test that the stored object reflects the delete outcome."""

    @pytest.mark.asyncio
    async def test_finalizer_removed_in_storage(
        self, reconciler, owned_awscluster, resource_client
    ):
        owned_awscluster(deleting=True, finalizers=[CLUSTER_FINALIZER, "other"])

        await reconciler.reconcile(
            ReconcileRequest(namespace=NAMESPACE, name=AWSCLUSTER_NAME)
        )

        stored = resource_client.stored_awscluster()
        assert stored["metadata"]["finalizers"] == ["other"]

    @pytest.mark.asyncio
    async def test_finalizer_kept_in_storage_on_failure(
        self, reconciler, owned_awscluster, resource_client, services
    ):
        owned_awscluster(deleting=True, finalizers=[CLUSTER_FINALIZER])
        services.errors["delete_security_groups"] = RuntimeError("in use")

        with pytest.raises(DeletionError):
            await reconciler.reconcile(
                ReconcileRequest(namespace=NAMESPACE, name=AWSCLUSTER_NAME)
            )

        assert has_cluster_finalizer(resource_client.stored_awscluster())
        assert resource_client.patches == []
