"""Pulumi program provisioning an EKS cluster with its VPC and IAM roles."""
