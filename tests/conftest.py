import pulumi
import pytest

from provision_eks.config import ClusterConfig

from .config import CLUSTER_CA_DATA, CLUSTER_ENDPOINT

PROJECT = "provision-eks-cluster"
STACK = "test"

# Types whose `name` and `arn` are computed by AWS.
NAMED_TYPES = {"aws:iam/role:Role", "aws:eks/cluster:Cluster"}
ARN_TYPES = NAMED_TYPES | {"aws:eks/nodeGroup:NodeGroup"}


class InfraMocks(pulumi.runtime.Mocks):
    """Echo inputs back as outputs and fill in what AWS would compute."""

    def new_resource(self, args: pulumi.runtime.MockResourceArgs):
        outputs = dict(args.inputs)
        if args.typ in NAMED_TYPES:
            outputs.setdefault("name", args.name)
        if args.typ in ARN_TYPES:
            outputs.setdefault("arn", f"arn:aws:mock::123456789012:{args.name}")
        if args.typ == "aws:eks/cluster:Cluster":
            outputs["endpoint"] = CLUSTER_ENDPOINT
            outputs["certificateAuthority"] = {"data": CLUSTER_CA_DATA}

        return [f"{args.name}_id", outputs]

    def call(self, args: pulumi.runtime.MockCallArgs):
        return {}


pulumi.runtime.set_mocks(InfraMocks(), project=PROJECT, stack=STACK, preview=False)


@pytest.fixture
def config() -> ClusterConfig:
    return ClusterConfig()
