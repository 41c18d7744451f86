"""
Pydantic models for the Cluster API Cluster resource.

The controller never writes Clusters; only the fields that gate AWSCluster
reconciliation are modelled.
"""

from pydantic import BaseModel, Field, field_validator

from .common import ObjectMeta, ObjectReference


class ClusterNetwork(BaseModel):
    """Cluster-wide network settings."""

    model_config = {"populate_by_name": True}

    api_server_port: int | None = Field(None, alias="apiServerPort", ge=1, le=65535)


class ClusterSpec(BaseModel):
    """Desired state of a Cluster."""

    model_config = {"populate_by_name": True}

    paused: bool = False
    cluster_network: ClusterNetwork | None = Field(None, alias="clusterNetwork")
    infrastructure_ref: ObjectReference | None = Field(
        None, alias="infrastructureRef"
    )


class Cluster(BaseModel):
    """A Cluster API Cluster resource."""

    model_config = {"populate_by_name": True}

    api_version: str = Field("", alias="apiVersion")
    kind: str = ""
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: ClusterSpec = Field(default_factory=ClusterSpec)

    @field_validator("spec", mode="before")
    @classmethod
    def none_as_default(cls, v):
        return {} if v is None else v

    @property
    def name(self) -> str:
        return self.metadata.name

    @property
    def namespace(self) -> str:
        return self.metadata.namespace

    @property
    def is_deleting(self) -> bool:
        return self.metadata.deletion_timestamp is not None
