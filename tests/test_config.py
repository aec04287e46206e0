import pytest
from pydantic import ValidationError

from provision_eks.config import ClusterConfig, load_cluster_config
from provision_eks.plan import NODE_GROUP_NAME, build_plan

from .config import FakeConfig


def test_defaults(config: ClusterConfig):
    assert config.min_cluster_size == 3
    assert config.max_cluster_size == 6
    assert config.desired_cluster_size == 3
    assert config.eks_node_instance_type == "t3.medium"
    assert config.vpc_network_cidr == "10.0.0.0/16"
    assert config.aws_region == "us-west-2"
    assert config.availability_zones == ("us-west-2a", "us-west-2b")
    assert config.eks_version == "1.27"


def test_load_empty_config_uses_defaults():
    assert load_cluster_config(FakeConfig()) == ClusterConfig()


def test_load_from_pulumi_config():
    # NOTE: No values are set on the mocked test stack.
    assert load_cluster_config() == ClusterConfig()


def test_load_overrides():
    loaded = load_cluster_config(
        FakeConfig(
            minClusterSize="1",
            maxClusterSize="10",
            desiredClusterSize="4",
            eksNodeInstanceType="m5.large",
            vpcNetworkCidr="10.0.0.0/8",
            eksVersion="1.29",
            awsRegion="eu-west-1",
            availabilityZones="eu-west-1a, eu-west-1b ,eu-west-1c",
        )
    )

    assert loaded.min_cluster_size == 1
    assert loaded.max_cluster_size == 10
    assert loaded.desired_cluster_size == 4
    assert loaded.eks_node_instance_type == "m5.large"
    assert loaded.vpc_network_cidr == "10.0.0.0/8"
    assert loaded.eks_version == "1.29"
    assert loaded.aws_region == "eu-west-1"
    assert loaded.availability_zones == ("eu-west-1a", "eu-west-1b", "eu-west-1c")


def test_load_zero_falls_back_to_default():
    loaded = load_cluster_config(FakeConfig(minClusterSize="0", eksNodeInstanceType=""))
    assert loaded.min_cluster_size == 3
    assert loaded.eks_node_instance_type == "t3.medium"


@pytest.mark.parametrize(
    "sizes",
    [
        dict(min_cluster_size=5, desired_cluster_size=2, max_cluster_size=6),
        dict(min_cluster_size=1, desired_cluster_size=8, max_cluster_size=6),
        dict(min_cluster_size=9, desired_cluster_size=3, max_cluster_size=1),
    ],
)
def test_inconsistent_sizes_are_accepted(sizes):
    config = ClusterConfig(**sizes)
    node_group = build_plan(config)[NODE_GROUP_NAME]

    assert node_group.properties["min_size"] == sizes["min_cluster_size"]
    assert node_group.properties["desired_size"] == sizes["desired_cluster_size"]
    assert node_group.properties["max_size"] == sizes["max_cluster_size"]


def test_types_are_validated():
    assert ClusterConfig(min_cluster_size="4").min_cluster_size == 4

    with pytest.raises(ValidationError):
        ClusterConfig(min_cluster_size="three")


def test_immutable(config: ClusterConfig):
    with pytest.raises(ValidationError):
        config.min_cluster_size = 4  # type: ignore


def test_zones_follow_region():
    loaded = load_cluster_config(FakeConfig(awsRegion="eu-west-1"))
    assert loaded.aws_region == "eu-west-1"
    assert loaded.availability_zones == ("eu-west-1a", "eu-west-1b")

    assert ClusterConfig(aws_region="us-east-2").availability_zones == (
        "us-east-2a",
        "us-east-2b",
    )


def test_explicit_zones_override_region():
    loaded = load_cluster_config(
        FakeConfig(awsRegion="eu-west-1", availabilityZones="eu-west-1b,eu-west-1c")
    )
    assert loaded.availability_zones == ("eu-west-1b", "eu-west-1c")


def test_single_zone_is_rejected():
    with pytest.raises(ValidationError):
        load_cluster_config(FakeConfig(availabilityZones="us-west-2a"))

    with pytest.raises(ValidationError):
        ClusterConfig(availability_zones=("us-west-2a",))
