"""
Owner resolution for AWSCluster resources.

An AWSCluster is owned by exactly one Cluster API Cluster, linked through an
owner reference that the Cluster controller sets. The lookup is keyed by
ResourceKind so only references into the cluster.x-k8s.io group count.
"""

import logging

from pydantic import ValidationError as PydanticValidationError

from ..errors import OwnerResolutionError, ValidationError
from ..models.cluster import Cluster
from ..models.common import ObjectMeta, ResourceKind
from .kubernetes import ResourceClient

logger = logging.getLogger(__name__)


async def get_owner_cluster(
    resource_client: ResourceClient, metadata: ObjectMeta
) -> Cluster | None:
    """
    Fetch the Cluster that owns a resource.

    Args:
        resource_client: Storage client to read the Cluster with
        metadata: Metadata of the owned resource

    Returns:
        The owning Cluster, or None when no Cluster owner reference is set

    Raises:
        OwnerResolutionError: If the reference is set but the Cluster cannot be read
        ValidationError: If the Cluster body cannot be parsed
    """
    owner_ref = metadata.find_owner(ResourceKind.CLUSTER)
    if owner_ref is None:
        return None

    try:
        body = await resource_client.get_cluster(metadata.namespace, owner_ref.name)
    except Exception as e:
        raise OwnerResolutionError(metadata.namespace, owner_ref.name, cause=e) from e

    try:
        return Cluster.model_validate(body)
    except PydanticValidationError as e:
        raise ValidationError(
            f"Cluster {metadata.namespace}/{owner_ref.name} is malformed: {e}"
        ) from e
