"""AWS provider configuration."""

import pulumi
import pulumi_aws as aws

from provision_eks.config import ClusterConfig


def create_aws_provider(config: ClusterConfig) -> aws.Provider:
    """Create an explicit AWS provider for the configured region.

    The availability zones in the config must belong to this region.
    """
    return aws.Provider(
        "eks-aws",
        region=config.aws_region,
        default_tags=aws.ProviderDefaultTagsArgs(
            tags={
                "ManagedBy": "Pulumi",
                "Stack": pulumi.get_stack(),
            },
        ),
    )
