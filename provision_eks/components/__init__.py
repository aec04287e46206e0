"""EKS cluster infrastructure components."""

from provision_eks.components.eks import EksCluster
from provision_eks.components.iam import IamRoles
from provision_eks.components.networking import Networking

__all__ = ["Networking", "EksCluster", "IamRoles"]
