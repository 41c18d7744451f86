"""
Common models shared across different resource types.

This module defines shared data structures used by both the AWSCluster and
the Cluster API Cluster models: object metadata, owner and object references,
status conditions and the typed resource kinds the controller knows about.
"""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, Field

from ..constants import (
    AWSCLUSTER_KIND,
    AWSCLUSTER_PLURAL,
    CLUSTER_API_GROUP,
    CLUSTER_API_VERSION,
    CLUSTER_KIND,
    CLUSTER_PLURAL,
    INFRASTRUCTURE_GROUP,
    INFRASTRUCTURE_VERSION,
    SEVERITY_NONE,
)


def split_api_version(api_version: str) -> tuple[str, str]:
    """Split ``group/version`` into its parts; core resources have no group."""
    if "/" in api_version:
        group, version = api_version.split("/", 1)
        return group, version
    return "", api_version


class ResourceKind(Enum):
    """Resource kinds the controller reads, keyed by API group and kind."""

    CLUSTER = (CLUSTER_API_GROUP, CLUSTER_API_VERSION, CLUSTER_KIND, CLUSTER_PLURAL)
    AWS_CLUSTER = (
        INFRASTRUCTURE_GROUP,
        INFRASTRUCTURE_VERSION,
        AWSCLUSTER_KIND,
        AWSCLUSTER_PLURAL,
    )

    def __init__(self, group: str, version: str, kind: str, plural: str):
        self.group = group
        self.version = version
        self.kind = kind
        self.plural = plural

    @property
    def api_version(self) -> str:
        return f"{self.group}/{self.version}"

    @classmethod
    def from_reference(cls, api_version: str, kind: str) -> "ResourceKind | None":
        """
        Resolve a reference's apiVersion/kind pair to a known resource kind.

        Only the API group is compared so references written against an older
        version of the same group still resolve.

        Returns:
            The matching ResourceKind, or None for anything else
        """
        group, _ = split_api_version(api_version or "")
        for member in cls:
            if member.kind == kind and member.group == group:
                return member
        return None


class OwnerReference(BaseModel):
    """Typed pointer from a dependent resource to its owner."""

    model_config = {"populate_by_name": True}

    api_version: str = Field(..., alias="apiVersion")
    kind: str
    name: str
    uid: str = ""
    controller: bool | None = None
    block_owner_deletion: bool | None = Field(None, alias="blockOwnerDeletion")

    @property
    def resource_kind(self) -> ResourceKind | None:
        return ResourceKind.from_reference(self.api_version, self.kind)


class ObjectReference(BaseModel):
    """Reference to another object, possibly in a different namespace."""

    model_config = {"populate_by_name": True}

    api_version: str = Field("", alias="apiVersion")
    kind: str = ""
    name: str = ""
    namespace: str | None = None

    @property
    def resource_kind(self) -> ResourceKind | None:
        return ResourceKind.from_reference(self.api_version, self.kind)


class ObjectMeta(BaseModel):
    """The subset of Kubernetes object metadata the controller consumes."""

    model_config = {"populate_by_name": True}

    name: str = ""
    namespace: str = ""
    uid: str = ""
    generation: int = 0
    annotations: dict[str, str] = Field(default_factory=dict)
    labels: dict[str, str] = Field(default_factory=dict)
    finalizers: list[str] = Field(default_factory=list)
    owner_references: list[OwnerReference] = Field(
        default_factory=list, alias="ownerReferences"
    )
    deletion_timestamp: datetime | None = Field(None, alias="deletionTimestamp")

    def find_owner(self, kind: ResourceKind) -> OwnerReference | None:
        """Return the first owner reference that resolves to ``kind``."""
        for ref in self.owner_references:
            if ref.resource_kind is kind:
                return ref
        return None


class Condition(BaseModel):
    """
    Cluster API style status condition.

    Severity is only meaningful when status is False; an empty string stands
    for "no severity".
    """

    model_config = {"populate_by_name": True, "extra": "allow"}

    type: str
    status: str
    severity: str = SEVERITY_NONE
    reason: str = ""
    message: str = ""
    last_transition_time: str | None = Field(None, alias="lastTransitionTime")
