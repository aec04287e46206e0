"""VPC and subnets for the EKS cluster."""

import pulumi

from provision_eks.backend import PulumiBackend
from provision_eks.plan import VPC_NAME, ResourceGraph, ResourceKind


class Networking(pulumi.ComponentResource):
    """VPC and networking infrastructure for the cluster.

    Creates:
    - VPC with the configured CIDR
    - Three private subnets
    - Three public subnets (public IPs mapped on launch)
    """

    def __init__(
        self,
        name: str,
        graph: ResourceGraph,
        backend: PulumiBackend,
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("eks:infrastructure:Networking", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        backend.materialize_all(graph, [ResourceKind.VPC, ResourceKind.SUBNET], child_opts)

        subnet_specs = graph.of_kind(ResourceKind.SUBNET)
        self.vpc = backend[VPC_NAME]
        self.subnets = [backend[spec.name] for spec in subnet_specs]

        # Export outputs
        self.vpc_id = self.vpc.id
        self.private_subnet_ids = [
            backend[spec.name].id
            for spec in subnet_specs
            if not spec.properties["map_public_ip_on_launch"]
        ]
        self.public_subnet_ids = [
            backend[spec.name].id
            for spec in subnet_specs
            if spec.properties["map_public_ip_on_launch"]
        ]

        self.register_outputs(
            {
                "vpc_id": self.vpc_id,
                "private_subnet_ids": self.private_subnet_ids,
                "public_subnet_ids": self.public_subnet_ids,
            }
        )
