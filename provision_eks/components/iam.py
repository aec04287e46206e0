"""IAM roles and policy attachments for EKS."""

import pulumi

from provision_eks.backend import PulumiBackend
from provision_eks.plan import (
    CLUSTER_ROLE_NAME,
    WORKER_NODE_ROLE_NAME,
    ResourceGraph,
    ResourceKind,
)


class IamRoles(pulumi.ComponentResource):
    """IAM roles for the EKS control plane and its worker nodes.

    The cluster role carries `AmazonEKSClusterPolicy`. The worker node role
    carries the worker node, CNI and read-only container registry policies.
    """

    def __init__(
        self,
        name: str,
        graph: ResourceGraph,
        backend: PulumiBackend,
        opts: pulumi.ResourceOptions | None = None,
    ):
        super().__init__("eks:infrastructure:IamRoles", name, None, opts)

        child_opts = pulumi.ResourceOptions(parent=self)

        backend.materialize_all(graph, [ResourceKind.ROLE], child_opts)
        self.cluster_role = backend[CLUSTER_ROLE_NAME]
        self.worker_node_role = backend[WORKER_NODE_ROLE_NAME]

        self.attachments = backend.materialize_all(
            graph, [ResourceKind.ROLE_POLICY_ATTACHMENT], child_opts
        )

        self.register_outputs(
            {
                "cluster_role_arn": self.cluster_role.arn,
                "worker_node_role_arn": self.worker_node_role.arn,
            }
        )
