"""Provision EKS Cluster - Main entry point for Pulumi infrastructure deployment."""

from provision_eks.config import load_cluster_config
from provision_eks.stack import create_cluster_stack, export_outputs

# Load cluster configuration from stack config
config = load_cluster_config()

# VPC, IAM roles, EKS cluster and worker node group
stack = create_cluster_stack(config)

# Exports
export_outputs(stack)
