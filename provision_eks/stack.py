"""Assembles the cluster stack from a `ClusterConfig`."""

from dataclasses import dataclass

import pulumi
import pulumi_aws as aws

from provision_eks.backend import PulumiBackend
from provision_eks.components import EksCluster, IamRoles, Networking
from provision_eks.config import ClusterConfig
from provision_eks.plan import ResourceGraph, build_plan
from provision_eks.providers import create_aws_provider

STACK_NAME = "eks"


@dataclass(frozen=True)
class ClusterStack:
    graph: ResourceGraph
    provider: aws.Provider
    networking: Networking
    iam: IamRoles
    eks_cluster: EksCluster


def create_cluster_stack(config: ClusterConfig) -> ClusterStack:
    graph = build_plan(config)

    # Create AWS provider for the configured region
    aws_provider = create_aws_provider(config)
    backend = PulumiBackend(provider=aws_provider)

    # 1. Networking (VPC, subnets)
    networking = Networking(name=STACK_NAME, graph=graph, backend=backend)

    # 2. IAM roles for the control plane and worker nodes
    iam = IamRoles(
        name=STACK_NAME,
        graph=graph,
        backend=backend,
        opts=pulumi.ResourceOptions(depends_on=[networking]),
    )

    # 3. EKS cluster with its managed node group
    eks_cluster = EksCluster(
        name=STACK_NAME,
        graph=graph,
        backend=backend,
        opts=pulumi.ResourceOptions(depends_on=[networking, iam]),
    )

    return ClusterStack(
        graph=graph,
        provider=aws_provider,
        networking=networking,
        iam=iam,
        eks_cluster=eks_cluster,
    )


def export_outputs(stack: ClusterStack) -> None:
    pulumi.export("clusterName", stack.eks_cluster.cluster_name)
    pulumi.export("clusterArn", stack.eks_cluster.cluster_arn)
    pulumi.export("clusterKubeConfig", stack.eks_cluster.kubeconfig)
    pulumi.export("vpcId", stack.networking.vpc_id)
