"""Kubeconfig generation for the EKS cluster."""

from typing import Any

import pulumi
import pulumi_aws as aws

KUBECONFIG_CLUSTER = "kubernetes"
KUBECONFIG_USER = "aws"
KUBECONFIG_CONTEXT = "aws"
EXEC_API_VERSION = "client.authentication.k8s.io/v1alpha1"


def render_kubeconfig(
    cluster_name: str,
    endpoint: str,
    certificate_authority_data: str,
) -> dict[str, Any]:
    """Build a kubeconfig that fetches tokens through `aws eks get-token`.

    Args:
        cluster_name: EKS cluster name passed to the token command
        endpoint: Kubernetes API server URL
        certificate_authority_data: Base64 encoded cluster CA certificate
    """
    return {
        "apiVersion": "v1",
        "clusters": [
            {
                "cluster": {
                    "server": endpoint,
                    "certificate-authority-data": certificate_authority_data,
                },
                "name": KUBECONFIG_CLUSTER,
            }
        ],
        "contexts": [
            {
                "context": {"cluster": KUBECONFIG_CLUSTER, "user": KUBECONFIG_USER},
                "name": KUBECONFIG_CONTEXT,
            }
        ],
        "current-context": KUBECONFIG_CONTEXT,
        "kind": "Config",
        "users": [
            {
                "name": KUBECONFIG_USER,
                "user": {
                    "exec": {
                        "apiVersion": EXEC_API_VERSION,
                        "command": "aws",
                        "args": ["eks", "get-token", "--cluster-name", cluster_name],
                    }
                },
            }
        ],
    }


def kubeconfig_output(cluster: aws.eks.Cluster) -> pulumi.Output[dict[str, Any]]:
    """Render the kubeconfig once name, endpoint and CA of `cluster` resolve."""
    cluster_ca_data = cluster.certificate_authority.apply(lambda ca: ca.data if ca else "")

    return pulumi.Output.all(cluster.name, cluster.endpoint, cluster_ca_data).apply(
        lambda args: render_kubeconfig(args[0], args[1], args[2])
    )
