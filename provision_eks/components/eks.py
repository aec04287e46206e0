"""EKS cluster and managed worker node group."""

import pulumi

from provision_eks.backend import PulumiBackend
from provision_eks.kubeconfig import kubeconfig_output
from provision_eks.plan import CLUSTER_NAME, NODE_GROUP_NAME, ResourceGraph, ResourceKind


class EksCluster(pulumi.ComponentResource):
    """EKS control plane with a single autoscaling node group.

    Creates:
    - EKS cluster spanning every private and public subnet
    - Managed node group sized from the cluster config

    Both the VPC subnets and the IAM roles must already be declared on
    `backend`.
    """

    def __init__(
        self,
        name: str,
        graph: ResourceGraph,
        backend: PulumiBackend,
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("eks:infrastructure:EksCluster", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        backend.materialize_all(
            graph, [ResourceKind.CLUSTER, ResourceKind.NODE_GROUP], child_opts
        )
        self.cluster = backend[CLUSTER_NAME]
        self.node_group = backend[NODE_GROUP_NAME]

        # Export outputs
        self.cluster_name = self.cluster.name
        self.cluster_arn = self.cluster.arn
        self.cluster_endpoint = self.cluster.endpoint
        self.kubeconfig = kubeconfig_output(self.cluster)

        self.register_outputs(
            {
                "cluster_name": self.cluster_name,
                "cluster_arn": self.cluster_arn,
                "cluster_endpoint": self.cluster_endpoint,
                "kubeconfig": self.kubeconfig,
            }
        )
