"""Shared fixtures for reconciler unit tests."""

from unittest.mock import AsyncMock

import pytest

from awscluster_operator.services.awscluster_reconciler import AWSClusterReconciler
from tests.fixtures.awscluster_resources import (
    FakeRecorder,
    FakeResourceClient,
    FakeServices,
    make_awscluster,
    make_cluster,
)


@pytest.fixture
def resource_client():
    return FakeResourceClient()


@pytest.fixture
def services():
    return FakeServices()


@pytest.fixture
def recorder():
    return FakeRecorder()


@pytest.fixture
def dns_resolver():
    """Resolver that reports every name as resolvable unless told otherwise."""
    return AsyncMock(return_value=True)


@pytest.fixture
def reconciler(resource_client, services, recorder, dns_resolver):
    return AWSClusterReconciler(
        resource_client=resource_client,
        service_factories=services.factories(),
        recorder=recorder,
        dns_resolver=dns_resolver,
    )


@pytest.fixture
def owned_awscluster(resource_client):
    """Register an owner Cluster and return a helper that stores an AWSCluster."""
    resource_client.add_cluster(make_cluster())

    def store(**kwargs):
        body = make_awscluster(**kwargs)
        resource_client.add_awscluster(body)
        return body

    return store
