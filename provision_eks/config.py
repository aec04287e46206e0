"""Cluster configuration schema and loader."""

from typing import Any, Protocol

import pulumi
from pydantic import BaseModel, ConfigDict, Field, model_validator

DEFAULT_REGION = "us-west-2"


class ConfigSource(Protocol):
    """The part of `pulumi.Config` used to load a cluster configuration."""

    def get(self, key: str) -> str | None: ...

    def get_int(self, key: str) -> int | None: ...


class ClusterConfig(BaseModel):
    """Configuration for a cluster deployment.

    Only value types are checked. Sizing consistency and subnet placement are
    left to AWS.
    """

    model_config = ConfigDict(frozen=True)

    # Node group sizing
    min_cluster_size: int = Field(default=3)
    max_cluster_size: int = Field(default=6)
    desired_cluster_size: int = Field(default=3)
    eks_node_instance_type: str = Field(default="t3.medium")

    # Networking
    vpc_network_cidr: str = Field(default="10.0.0.0/16")
    aws_region: str = Field(default=DEFAULT_REGION)
    # Subnets are spread over the first two zones
    availability_zones: tuple[str, ...] = Field(min_length=2)

    eks_version: str = Field(default="1.27")

    @model_validator(mode="before")
    @classmethod
    def default_availability_zones(cls, data: Any) -> Any:
        """Default to zones `a` and `b` of the configured region."""
        if isinstance(data, dict) and not data.get("availability_zones"):
            region = data.get("aws_region") or DEFAULT_REGION
            data = {**data, "availability_zones": (f"{region}a", f"{region}b")}
        return data


def load_cluster_config(config: ConfigSource | None = None) -> ClusterConfig:
    """Load cluster configuration from Pulumi stack config.

    Unset (or falsy) values keep their defaults.
    """
    if config is None:
        config = pulumi.Config()

    values: dict[str, Any] = {
        "min_cluster_size": config.get_int("minClusterSize"),
        "max_cluster_size": config.get_int("maxClusterSize"),
        "desired_cluster_size": config.get_int("desiredClusterSize"),
        "eks_node_instance_type": config.get("eksNodeInstanceType"),
        "vpc_network_cidr": config.get("vpcNetworkCidr"),
        "aws_region": config.get("awsRegion"),
        "eks_version": config.get("eksVersion"),
    }

    # Comma-separated, e.g. "us-west-2a,us-west-2b"
    az_config = config.get("availabilityZones")
    if az_config:
        values["availability_zones"] = tuple(az.strip() for az in az_config.split(","))

    return ClusterConfig(**{key: value for key, value in values.items() if value})
