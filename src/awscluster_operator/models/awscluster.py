"""
Pydantic models for AWSCluster resources.

This module defines type-safe data models for the AWSCluster specification
and status. Field aliases follow the wire format of the
infrastructure.cluster.x-k8s.io/v1beta1 CRD so resources round-trip through
``model_validate`` and ``model_dump(by_alias=True)``. Fields this module does
not declare are kept and written back unchanged.
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator

from .common import Condition, ObjectMeta


class VPCSpec(BaseModel):
    """VPC the cluster lives in."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    id: str = Field("", description="ID of an existing VPC, empty to create one")
    cidr_block: str = Field("", alias="cidrBlock", description="VPC CIDR block")


class SubnetSpec(BaseModel):
    """A single subnet of the cluster network."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    id: str = Field("", description="Subnet ID")
    availability_zone: str = Field("", alias="availabilityZone")
    cidr_block: str = Field("", alias="cidrBlock")
    is_public: bool = Field(False, alias="isPublic")


class NetworkSpec(BaseModel):
    """Network topology of the cluster."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    vpc: VPCSpec = Field(default_factory=VPCSpec)
    subnets: list[SubnetSpec] = Field(default_factory=list)
    security_group_overrides: dict[str, str] = Field(
        default_factory=dict,
        alias="securityGroupOverrides",
        description="Security group IDs to use instead of managed groups, keyed by role",
    )

    @field_validator("subnets", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []

    def private_subnets(self) -> list[SubnetSpec]:
        return [subnet for subnet in self.subnets if not subnet.is_public]


class Bastion(BaseModel):
    """Bastion host settings."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    enabled: bool = Field(False, description="Whether a bastion host should exist")
    instance_type: str | None = Field(None, alias="instanceType")
    allowed_cidr_blocks: list[str] = Field(
        default_factory=list, alias="allowedCIDRBlocks"
    )


class APIEndpoint(BaseModel):
    """Host/port pair the control plane is reachable at."""

    model_config = {"extra": "allow"}

    host: str = ""
    port: int = 0

    @property
    def is_set(self) -> bool:
        return bool(self.host) and self.port > 0


class AWSClusterSpec(BaseModel):
    """Desired state of an AWSCluster."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    region: str = Field("", description="AWS region the cluster lives in")
    network: NetworkSpec = Field(default_factory=NetworkSpec)
    bastion: Bastion = Field(default_factory=Bastion)
    control_plane_endpoint: APIEndpoint = Field(
        default_factory=APIEndpoint, alias="controlPlaneEndpoint"
    )
    ssh_key_name: str | None = Field(None, alias="sshKeyName")
    additional_tags: dict[str, str] = Field(
        default_factory=dict, alias="additionalTags"
    )


class LoadBalancer(BaseModel):
    """Observed state of the API server load balancer."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    name: str = ""
    dns_name: str = Field("", alias="dnsName")
    availability_zones: list[str] = Field(
        default_factory=list, alias="availabilityZones"
    )

    @field_validator("availability_zones", mode="before")
    @classmethod
    def none_as_empty(cls, v):
        return v or []


class NetworkStatus(BaseModel):
    """Observed state of the cluster network."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    security_groups: dict[str, Any] = Field(
        default_factory=dict, alias="securityGroups"
    )
    api_server_elb: LoadBalancer = Field(
        default_factory=LoadBalancer, alias="apiServerElb"
    )


class FailureDomainSpec(BaseModel):
    """A failure domain (availability zone) the cluster can place machines in."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    control_plane: bool = Field(False, alias="controlPlane")
    attributes: dict[str, str] = Field(default_factory=dict)


class AWSClusterStatus(BaseModel):
    """Observed state of an AWSCluster."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    ready: bool = False
    network: NetworkStatus = Field(default_factory=NetworkStatus, alias="networkStatus")
    failure_domains: dict[str, FailureDomainSpec] = Field(
        default_factory=dict, alias="failureDomains"
    )
    conditions: list[Condition] = Field(default_factory=list)

    @field_validator("conditions", "failure_domains", mode="before")
    @classmethod
    def none_as_empty(cls, v, info):
        if v is None:
            return {} if info.field_name == "failure_domains" else []
        return v


class AWSCluster(BaseModel):
    """An AWSCluster resource as stored in the API server."""

    model_config = {"populate_by_name": True, "extra": "allow"}

    api_version: str = Field("", alias="apiVersion")
    kind: str = ""
    metadata: ObjectMeta = Field(default_factory=ObjectMeta)
    spec: AWSClusterSpec = Field(default_factory=AWSClusterSpec)
    status: AWSClusterStatus = Field(default_factory=AWSClusterStatus)

    @field_validator("spec", "status", mode="before")
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
