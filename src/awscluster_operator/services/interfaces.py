"""
Subsystem service interfaces for AWSCluster reconciliation.

The reconciler orchestrates four cloud subsystems (network, security groups,
bastion host, load balancers) but never talks to a cloud API itself. Each
subsystem is reached through a Protocol below; a ``ServiceFactories`` bundle
builds them for a given ClusterScope.

The concrete backend is pluggable: the operator imports the bundle named by
the ``SERVICE_FACTORIES`` setting (``package.module:attribute``) at startup.
"""

from __future__ import annotations

import importlib
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from ..errors import ConfigurationError

if TYPE_CHECKING:
    from .cluster_scope import ClusterScope

logger = logging.getLogger(__name__)


@runtime_checkable
class NetworkService(Protocol):
    """VPC, subnets, gateways and route tables."""

    async def reconcile_network(self) -> None: ...

    async def delete_network(self) -> None: ...


@runtime_checkable
class SecurityGroupService(Protocol):
    """Security groups of the cluster."""

    async def reconcile_security_groups(self) -> None: ...

    async def delete_security_groups(self) -> None: ...


@runtime_checkable
class EC2Service(Protocol):
    """
    Instances owned by the cluster itself.

    ``reconcile_bastion`` is always called; whether a bastion should exist
    (``spec.bastion.enabled``) is for the service to decide.
    """

    async def reconcile_bastion(self) -> None: ...

    async def delete_bastion(self) -> None: ...


@runtime_checkable
class ELBService(Protocol):
    """
    Load balancers in front of the control plane.

    A successful ``reconcile_load_balancers`` is expected to record the
    API server load balancer in ``status.networkStatus.apiServerElb``.
    """

    async def reconcile_load_balancers(self) -> None: ...

    async def delete_load_balancers(self) -> None: ...


@dataclass(frozen=True)
class ServiceFactories:
    """One factory per subsystem, each building a service bound to a scope."""

    network: Callable[[ClusterScope], NetworkService]
    security_groups: Callable[[ClusterScope], SecurityGroupService]
    ec2: Callable[[ClusterScope], EC2Service]
    elb: Callable[[ClusterScope], ELBService]


def load_service_factories(path: str) -> ServiceFactories:
    """
    Import a ServiceFactories bundle from ``package.module:attribute``.

    The attribute may be a ServiceFactories instance or a zero-argument
    callable returning one.

    Raises:
        ConfigurationError: If the path is empty, malformed or does not
            resolve to a ServiceFactories bundle
    """
    if not path:
        raise ConfigurationError(
            "No cloud backend configured",
            user_action="Set SERVICE_FACTORIES to 'package.module:attribute'",
        )

    module_name, sep, attribute = path.partition(":")
    if not sep or not module_name or not attribute:
        raise ConfigurationError(
            f"Invalid service factories path '{path}'",
            user_action="Use the form 'package.module:attribute'",
        )

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigurationError(
            f"Cannot import service factories module '{module_name}': {e}"
        ) from e

    try:
        target = getattr(module, attribute)
    except AttributeError as e:
        raise ConfigurationError(
            f"Module '{module_name}' has no attribute '{attribute}'"
        ) from e

    factories = target if isinstance(target, ServiceFactories) else None
    if factories is None and callable(target):
        factories = target()

    if not isinstance(factories, ServiceFactories):
        raise ConfigurationError(
            f"'{path}' does not provide a ServiceFactories bundle "
            f"(got {type(factories).__name__})"
        )

    logger.info(f"Loaded cloud backend from {path}")
    return factories
