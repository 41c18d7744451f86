"""
Kubernetes utilities for the AWSCluster operator.

This module provides helper functions for interacting with the Kubernetes API,
including client configuration and the resource storage client the reconciler
reads AWSClusters and Clusters through and persists AWSCluster changes with.
"""

import asyncio
import logging
from typing import Any, Protocol

from kubernetes import client, config
from kubernetes.client.rest import ApiException

from ..errors import KubernetesAPIError, ResourceNotFoundError
from ..models.common import ResourceKind

logger = logging.getLogger(__name__)


def get_kubernetes_client() -> client.ApiClient:
    """
    Get configured Kubernetes API client.

    This function handles both in-cluster and local development configurations.

    Returns:
        Configured Kubernetes API client
    """
    try:
        # Try in-cluster config first (when running in a pod)
        config.load_incluster_config()
        logger.debug("Loaded in-cluster Kubernetes configuration")
    except config.ConfigException:
        try:
            # Fall back to local kubeconfig (for development)
            config.load_kube_config()
            logger.debug("Loaded kubeconfig from local environment")
        except config.ConfigException as e:
            logger.error(f"Failed to load Kubernetes configuration: {e}")
            raise

    return client.ApiClient()


def translate_api_exception(
    error: ApiException, kind: ResourceKind, namespace: str, name: str
) -> KubernetesAPIError:
    """Map an ApiException onto the operator error hierarchy."""
    if error.status == 404:
        return ResourceNotFoundError(kind.kind, namespace, name)
    http_status = getattr(error, "status", None)
    return KubernetesAPIError(
        message=f"{kind.kind} {namespace}/{name}: {error}",
        reason=getattr(error, "reason", None),
        status=http_status,
        # 5xx errors and throttling are retryable
        retryable=http_status is None or http_status >= 500 or http_status == 429,
    )


class ResourceClient(Protocol):
    """Storage operations the reconciler needs from the API server."""

    async def get_awscluster(self, namespace: str, name: str) -> dict[str, Any]: ...

    async def get_cluster(self, namespace: str, name: str) -> dict[str, Any]: ...

    async def patch_awscluster(
        self, namespace: str, name: str, patch: dict[str, Any]
    ) -> dict[str, Any]: ...

    async def patch_awscluster_status(
        self, namespace: str, name: str, status: dict[str, Any]
    ) -> dict[str, Any]: ...


class KubernetesResourceClient:
    """
    ResourceClient backed by the CustomObjectsApi.

    The synchronous client runs in a worker thread. Patches are JSON merge
    patches; status goes through the status subresource.
    """

    def __init__(self, k8s_client: client.ApiClient | None = None):
        self.k8s_client = k8s_client

    @property
    def custom_api(self) -> client.CustomObjectsApi:
        if self.k8s_client is None:
            self.k8s_client = get_kubernetes_client()
        return client.CustomObjectsApi(self.k8s_client)

    async def _get(
        self, kind: ResourceKind, namespace: str, name: str
    ) -> dict[str, Any]:
        try:
            return await asyncio.to_thread(
                self.custom_api.get_namespaced_custom_object,
                group=kind.group,
                version=kind.version,
                namespace=namespace,
                plural=kind.plural,
                name=name,
            )
        except ApiException as e:
            raise translate_api_exception(e, kind, namespace, name) from e

    async def get_awscluster(self, namespace: str, name: str) -> dict[str, Any]:
        return await self._get(ResourceKind.AWS_CLUSTER, namespace, name)

    async def get_cluster(self, namespace: str, name: str) -> dict[str, Any]:
        return await self._get(ResourceKind.CLUSTER, namespace, name)

    async def patch_awscluster(
        self, namespace: str, name: str, patch: dict[str, Any]
    ) -> dict[str, Any]:
        kind = ResourceKind.AWS_CLUSTER
        try:
            return await asyncio.to_thread(
                self.custom_api.patch_namespaced_custom_object,
                group=kind.group,
                version=kind.version,
                namespace=namespace,
                plural=kind.plural,
                name=name,
                body=patch,
            )
        except ApiException as e:
            raise translate_api_exception(e, kind, namespace, name) from e

    async def patch_awscluster_status(
        self, namespace: str, name: str, status: dict[str, Any]
    ) -> dict[str, Any]:
        kind = ResourceKind.AWS_CLUSTER
        try:
            return await asyncio.to_thread(
                self.custom_api.patch_namespaced_custom_object_status,
                group=kind.group,
                version=kind.version,
                namespace=namespace,
                plural=kind.plural,
                name=name,
                body={"status": status},
            )
        except ApiException as e:
            raise translate_api_exception(e, kind, namespace, name) from e
