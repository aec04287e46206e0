"""Resource graph for the EKS cluster deployment.

`build_plan` turns a `ClusterConfig` into a `ResourceGraph` without touching
the Pulumi engine. Nodes are the desired resources, edges come from the
`Ref` values found in their properties:

- VPC and six subnets (three private, three public)
- EKS control plane role and worker node role, with policy attachments
- EKS cluster and a managed worker node group

The graph is handed to a backend (see `provision_eks.backend`) that creates
the actual resources.
"""

import enum
import json
import logging
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, NamedTuple

from provision_eks.config import ClusterConfig

logger = logging.getLogger(__name__)

PRIVATE_SUBNET_CIDR_BLOCKS = ("10.0.1.0/24", "10.0.2.0/24", "10.0.3.0/24")
PUBLIC_SUBNET_CIDR_BLOCKS = ("10.0.101.0/24", "10.0.102.0/24", "10.0.103.0/24")

VPC_NAME = "eks-vpc"
CLUSTER_ROLE_NAME = "eks-cluster-role"
CLUSTER_NAME = "eks-cluster"
WORKER_NODE_ROLE_NAME = "worker-node-role"
NODE_GROUP_NAME = "worker-node-group"

CLUSTER_POLICY_ATTACHMENTS = {
    "cluster-role-policy-attachment": "arn:aws:iam::aws:policy/AmazonEKSClusterPolicy",
}
WORKER_NODE_POLICY_ATTACHMENTS = {
    "worker-node-policy-attachment": "arn:aws:iam::aws:policy/AmazonEKSWorkerNodePolicy",
    "cni-policy-attachment": "arn:aws:iam::aws:policy/AmazonEKS_CNI_Policy",
    "container-registry-policy-attachment": (
        "arn:aws:iam::aws:policy/AmazonEC2ContainerRegistryReadOnly"
    ),
}


class PlanError(Exception):
    """Raised when a resource graph is inconsistent or cannot be resolved."""


class ResourceKind(str, enum.Enum):
    """Kind of provider resource a graph node describes."""

    VPC = "vpc"
    SUBNET = "subnet"
    ROLE = "role"
    ROLE_POLICY_ATTACHMENT = "role_policy_attachment"
    CLUSTER = "cluster"
    NODE_GROUP = "node_group"


@dataclass(frozen=True)
class Ref:
    """Reference to an attribute of another node, resolved once it exists."""

    target: str
    attribute: str


@dataclass(frozen=True)
class Edge:
    source: str
    target: str
    attribute: str


@dataclass(frozen=True)
class ResourceSpec:
    """Desired state of a single resource."""

    name: str
    kind: ResourceKind
    properties: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        object.__setattr__(self, "properties", MappingProxyType(dict(self.properties)))

    def refs(self) -> list[Ref]:
        return list(_iter_refs(self.properties))


class SubnetSpec(NamedTuple):
    name: str
    cidr_block: str
    index: int
    is_public: bool
    availability_zone: str


def _iter_refs(value: Any) -> Iterator[Ref]:
    if isinstance(value, Ref):
        yield value
    elif isinstance(value, Mapping):
        for item in value.values():
            yield from _iter_refs(item)
    elif isinstance(value, (list, tuple)):
        for item in value:
            yield from _iter_refs(item)


class ResourceGraph:
    """Ordered collection of resource specs and the references between them."""

    def __init__(self, specs: list[ResourceSpec] | None = None):
        self._nodes: dict[str, ResourceSpec] = {}
        for spec in specs or []:
            self.add(spec)

    def add(self, spec: ResourceSpec) -> ResourceSpec:
        if spec.name in self._nodes:
            raise PlanError(f"Duplicate resource name `{spec.name}`.")
        self._nodes[spec.name] = spec
        return spec

    def __getitem__(self, name: str) -> ResourceSpec:
        return self._nodes[name]

    def __contains__(self, name: object) -> bool:
        return name in self._nodes

    def __iter__(self) -> Iterator[ResourceSpec]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def of_kind(self, kind: ResourceKind) -> list[ResourceSpec]:
        return [spec for spec in self if spec.kind == kind]

    @property
    def edges(self) -> list[Edge]:
        return [
            Edge(source=spec.name, target=ref.target, attribute=ref.attribute)
            for spec in self
            for ref in spec.refs()
        ]

    def dependencies(self, name: str) -> list[str]:
        """Names of the nodes `name` references, in first-reference order."""
        targets = (ref.target for ref in self[name].refs())
        return list(dict.fromkeys(targets))

    def topological_order(self) -> list[ResourceSpec]:
        """Nodes ordered so that every node follows the nodes it references.

        Independent nodes keep their insertion order.
        """
        for edge in self.edges:
            if edge.target not in self._nodes:
                raise PlanError(
                    f"`{edge.source}` references unknown resource `{edge.target}`."
                )

        remaining = {name: set(self.dependencies(name)) for name in self._nodes}
        ordered: list[ResourceSpec] = []
        while remaining:
            ready = [name for name, deps in remaining.items() if not deps]
            if not ready:
                raise PlanError(f"Reference cycle between {sorted(remaining)}.")

            for name in ready:
                ordered.append(self._nodes[name])
                del remaining[name]
            for deps in remaining.values():
                deps.difference_update(ready)

        return ordered


def select_availability_zone(index: int, zones: tuple[str, ...]) -> str:
    """Zone for the subnet at `index` of its (private or public) list.

    NOTE: Uses true division, so only index 0 satisfies `index / 2 == 0` and
          every other subnet lands in the second zone.
    """
    return zones[0] if index / 2 == 0 else zones[1]


def subnet_layout(config: ClusterConfig) -> list[SubnetSpec]:
    """Private subnets first, then public ones."""
    layout = []
    for is_public, cidr_blocks in (
        (False, PRIVATE_SUBNET_CIDR_BLOCKS),
        (True, PUBLIC_SUBNET_CIDR_BLOCKS),
    ):
        for index, cidr_block in enumerate(cidr_blocks):
            layout.append(
                SubnetSpec(
                    name=f"{'public' if is_public else 'private'}-subnet-{index}",
                    cidr_block=cidr_block,
                    index=index,
                    is_public=is_public,
                    availability_zone=select_availability_zone(
                        index, config.availability_zones
                    ),
                )
            )
    return layout


def assume_role_policy(service: str) -> str:
    """Trust policy letting an AWS service principal assume a role."""
    return json.dumps(
        {
            "Version": "2012-10-17",
            "Statement": [
                {
                    "Action": "sts:AssumeRole",
                    "Effect": "Allow",
                    "Principal": {"Service": service},
                }
            ],
        }
    )


def _role_with_attachments(
    graph: ResourceGraph, role_name: str, service: str, attachments: dict[str, str]
) -> None:
    graph.add(
        ResourceSpec(
            role_name,
            ResourceKind.ROLE,
            {"assume_role_policy": assume_role_policy(service)},
        )
    )
    for attachment_name, policy_arn in attachments.items():
        graph.add(
            ResourceSpec(
                attachment_name,
                ResourceKind.ROLE_POLICY_ATTACHMENT,
                {"role": Ref(role_name, "name"), "policy_arn": policy_arn},
            )
        )


def build_plan(config: ClusterConfig) -> ResourceGraph:
    """Build the resource graph for a cluster deployment."""
    graph = ResourceGraph()

    graph.add(
        ResourceSpec(
            VPC_NAME,
            ResourceKind.VPC,
            {"cidr_block": config.vpc_network_cidr, "tags": {"name": "my-eks-vpc"}},
        )
    )

    subnet_refs = []
    for subnet in subnet_layout(config):
        graph.add(
            ResourceSpec(
                subnet.name,
                ResourceKind.SUBNET,
                {
                    "vpc_id": Ref(VPC_NAME, "id"),
                    "cidr_block": subnet.cidr_block,
                    "map_public_ip_on_launch": subnet.is_public,
                    "availability_zone": subnet.availability_zone,
                    "tags": {"name": "my-eks-subnets"},
                },
            )
        )
        subnet_refs.append(Ref(subnet.name, "id"))

    _role_with_attachments(
        graph, CLUSTER_ROLE_NAME, "eks.amazonaws.com", CLUSTER_POLICY_ATTACHMENTS
    )

    graph.add(
        ResourceSpec(
            CLUSTER_NAME,
            ResourceKind.CLUSTER,
            {
                "role_arn": Ref(CLUSTER_ROLE_NAME, "arn"),
                "subnet_ids": list(subnet_refs),
                "version": config.eks_version,
                "tags": {"name": "my-eks-cluster"},
            },
        )
    )

    _role_with_attachments(
        graph, WORKER_NODE_ROLE_NAME, "ec2.amazonaws.com", WORKER_NODE_POLICY_ATTACHMENTS
    )

    graph.add(
        ResourceSpec(
            NODE_GROUP_NAME,
            ResourceKind.NODE_GROUP,
            {
                "cluster_name": Ref(CLUSTER_NAME, "name"),
                "node_role_arn": Ref(WORKER_NODE_ROLE_NAME, "arn"),
                "subnet_ids": list(subnet_refs),
                "desired_size": config.desired_cluster_size,
                "max_size": config.max_cluster_size,
                "min_size": config.min_cluster_size,
                "instance_types": [config.eks_node_instance_type],
            },
        )
    )

    logger.debug("Planned %d resources with %d references.", len(graph), len(graph.edges))
    return graph
