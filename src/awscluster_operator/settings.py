"""Centralized operator settings using pydantic-settings.

This module provides a single source of truth for all operator configuration
loaded from environment variables. Uses pydantic for automatic validation,
type coercion, and documentation.
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from awscluster_operator.constants import (
    DEFAULT_DNS_RESOLVE_TIMEOUT,
    DEFAULT_SYNC_PERIOD_SECONDS,
    DNS_NAME_REQUEUE_SECONDS,
    DNS_RESOLVE_REQUEUE_SECONDS,
)


class Settings(BaseSettings):
    """Operator configuration loaded from environment variables.

    All settings have sensible defaults for production use. Override via
    environment variables as documented per field.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Operator identification
    operator_namespace: str = Field(
        default="capa-system",
        description="Namespace where the operator is deployed",
        validation_alias="OPERATOR_NAMESPACE",
    )
    operator_name: str = Field(
        default="awscluster-operator",
        description="Name of the operator deployment (also the peering name)",
        validation_alias="OPERATOR_NAME",
    )

    # Logging configuration
    log_level: str = Field(
        default="INFO",
        validation_alias="LOG_LEVEL",
        description="Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )
    json_logs: bool = Field(
        default=True,
        validation_alias="JSON_LOGS",
        description="Enable JSON formatted logging for structured log aggregation",
    )
    correlation_ids: bool = Field(
        default=True,
        validation_alias="CORRELATION_IDS",
        description="Enable correlation IDs in logs for request tracing",
    )
    log_health_probes: bool = Field(
        default=False,
        validation_alias="LOG_HEALTH_PROBES",
        description="Log requests to health and metrics endpoints",
    )

    # Namespace watching
    namespaces: str = Field(
        default="",
        validation_alias="AWSCLUSTER_OPERATOR_NAMESPACES",
        description="Comma-separated list of namespaces to watch (empty = all namespaces)",
    )

    # Metrics and observability
    metrics_port: int = Field(
        default=8081,
        validation_alias="METRICS_PORT",
        description="Port for Prometheus metrics endpoint",
    )
    metrics_host: str = Field(
        default="0.0.0.0",
        validation_alias="METRICS_HOST",
        description="Host address to bind metrics server",
    )

    # Reconciliation behavior
    sync_period_seconds: float = Field(
        default=DEFAULT_SYNC_PERIOD_SECONDS,
        validation_alias="SYNC_PERIOD_SECONDS",
        description="Interval between periodic resyncs of every AWSCluster",
        gt=0,
    )
    dns_name_requeue_seconds: float = Field(
        default=DNS_NAME_REQUEUE_SECONDS,
        validation_alias="DNS_NAME_REQUEUE_SECONDS",
        description="Requeue delay while the API server load balancer has no DNS name",
        gt=0,
    )
    dns_resolve_requeue_seconds: float = Field(
        default=DNS_RESOLVE_REQUEUE_SECONDS,
        validation_alias="DNS_RESOLVE_REQUEUE_SECONDS",
        description="Requeue delay while the load balancer DNS name does not resolve",
        gt=0,
    )
    dns_resolve_timeout_seconds: float = Field(
        default=DEFAULT_DNS_RESOLVE_TIMEOUT,
        validation_alias="DNS_RESOLVE_TIMEOUT_SECONDS",
        description="Timeout for a single DNS resolution probe",
        gt=0,
    )

    # Cloud backend
    service_factories: str = Field(
        default="",
        validation_alias="SERVICE_FACTORIES",
        description=(
            "Import path ('package.module:attribute') of the ServiceFactories "
            "bundle providing the network, security group, bastion and load "
            "balancer services"
        ),
    )

    @property
    def watched_namespaces(self) -> list[str] | None:
        """Parse watched namespaces from comma-separated string.

        Returns:
            List of namespace names, or None to watch all namespaces
        """
        if self.namespaces:
            return [ns.strip() for ns in self.namespaces.split(",") if ns.strip()]
        return None


# Global settings instance - initialized once at module import
settings = Settings()
