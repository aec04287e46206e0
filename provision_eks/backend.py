"""Pulumi backend that turns resource specs into AWS resources."""

from collections.abc import Callable, Iterable
from typing import Any

import pulumi
import pulumi_aws as aws

from provision_eks.plan import PlanError, Ref, ResourceGraph, ResourceKind, ResourceSpec


def _create_vpc(name: str, props: dict[str, Any], opts: pulumi.ResourceOptions):
    return aws.ec2.Vpc(name, cidr_block=props["cidr_block"], tags=props["tags"], opts=opts)


def _create_subnet(name: str, props: dict[str, Any], opts: pulumi.ResourceOptions):
    return aws.ec2.Subnet(
        name,
        vpc_id=props["vpc_id"],
        cidr_block=props["cidr_block"],
        map_public_ip_on_launch=props["map_public_ip_on_launch"],
        availability_zone=props["availability_zone"],
        tags=props["tags"],
        opts=opts,
    )


def _create_role(name: str, props: dict[str, Any], opts: pulumi.ResourceOptions):
    return aws.iam.Role(name, assume_role_policy=props["assume_role_policy"], opts=opts)


def _create_role_policy_attachment(
    name: str, props: dict[str, Any], opts: pulumi.ResourceOptions
):
    return aws.iam.RolePolicyAttachment(
        name, role=props["role"], policy_arn=props["policy_arn"], opts=opts
    )


def _create_cluster(name: str, props: dict[str, Any], opts: pulumi.ResourceOptions):
    return aws.eks.Cluster(
        name,
        role_arn=props["role_arn"],
        vpc_config=aws.eks.ClusterVpcConfigArgs(subnet_ids=props["subnet_ids"]),
        version=props["version"],
        tags=props["tags"],
        opts=opts,
    )


def _create_node_group(name: str, props: dict[str, Any], opts: pulumi.ResourceOptions):
    return aws.eks.NodeGroup(
        name,
        cluster_name=props["cluster_name"],
        node_role_arn=props["node_role_arn"],
        subnet_ids=props["subnet_ids"],
        scaling_config=aws.eks.NodeGroupScalingConfigArgs(
            desired_size=props["desired_size"],
            max_size=props["max_size"],
            min_size=props["min_size"],
        ),
        instance_types=props["instance_types"],
        opts=opts,
    )


FACTORIES: dict[
    ResourceKind, Callable[[str, dict[str, Any], pulumi.ResourceOptions], pulumi.CustomResource]
] = {
    ResourceKind.VPC: _create_vpc,
    ResourceKind.SUBNET: _create_subnet,
    ResourceKind.ROLE: _create_role,
    ResourceKind.ROLE_POLICY_ATTACHMENT: _create_role_policy_attachment,
    ResourceKind.CLUSTER: _create_cluster,
    ResourceKind.NODE_GROUP: _create_node_group,
}


class PulumiBackend:
    """Creates `pulumi_aws` resources from resource specs.

    Resources are registered under their logical names so that later specs can
    reference their outputs. Ordering between resources is left to Pulumi,
    which follows the outputs passed as inputs.
    """

    def __init__(self, provider: aws.Provider | None = None):
        self.provider = provider
        self.resources: dict[str, pulumi.CustomResource] = {}

    def __getitem__(self, name: str) -> pulumi.CustomResource:
        return self.resources[name]

    def resolve(self, value: Any) -> Any:
        """Replace every `Ref` inside `value` with the referenced output."""
        if isinstance(value, Ref):
            if value.target not in self.resources:
                raise PlanError(
                    f"Cannot resolve `{value.target}.{value.attribute}`, "
                    "the resource has not been created yet."
                )
            return getattr(self.resources[value.target], value.attribute)
        if isinstance(value, dict):
            return {key: self.resolve(item) for key, item in value.items()}
        if isinstance(value, (list, tuple)):
            return [self.resolve(item) for item in value]
        return value

    def materialize(
        self, spec: ResourceSpec, opts: pulumi.ResourceOptions | None = None
    ) -> pulumi.CustomResource:
        if spec.name in self.resources:
            raise PlanError(f"Resource `{spec.name}` was already created.")

        opts = pulumi.ResourceOptions.merge(
            opts, pulumi.ResourceOptions(provider=self.provider)
        )
        props = {key: self.resolve(value) for key, value in spec.properties.items()}

        pulumi.log.debug(f"Declaring {spec.kind.value} `{spec.name}`.")
        resource = FACTORIES[spec.kind](spec.name, props, opts)
        self.resources[spec.name] = resource
        return resource

    def materialize_all(
        self,
        graph: ResourceGraph,
        kinds: Iterable[ResourceKind],
        opts: pulumi.ResourceOptions | None = None,
    ) -> list[pulumi.CustomResource]:
        """Create every node of the given kinds, dependencies first."""
        kinds = set(kinds)
        return [
            self.materialize(spec, opts)
            for spec in graph.topological_order()
            if spec.kind in kinds
        ]
