import pulumi
import pytest

from provision_eks.backend import FACTORIES, PulumiBackend
from provision_eks.plan import PlanError, Ref, ResourceKind, ResourceSpec, assume_role_policy


def test_every_kind_has_a_factory():
    assert set(FACTORIES) == set(ResourceKind)


def test_resolve_plain_values():
    backend = PulumiBackend()
    assert backend.resolve("10.0.0.0/16") == "10.0.0.0/16"
    assert backend.resolve({"name": "my-eks-vpc"}) == {"name": "my-eks-vpc"}
    assert backend.resolve(("a", 1)) == ["a", 1]


def test_resolve_before_materialize():
    backend = PulumiBackend()
    with pytest.raises(PlanError, match="backend-missing.id"):
        backend.resolve([Ref("backend-missing", "id")])


@pulumi.runtime.test
def test_materialize_and_resolve():
    backend = PulumiBackend()
    role = backend.materialize(
        ResourceSpec(
            "backend-test-role",
            ResourceKind.ROLE,
            {"assume_role_policy": assume_role_policy("ec2.amazonaws.com")},
        )
    )
    assert backend["backend-test-role"] is role

    resolved = backend.resolve({"role": Ref("backend-test-role", "name"), "other": "x"})
    assert resolved["other"] == "x"

    with pytest.raises(PlanError, match="already created"):
        backend.materialize(ResourceSpec("backend-test-role", ResourceKind.ROLE))

    def check(args):
        name, arn = args
        assert name == "backend-test-role"
        assert arn.endswith(":backend-test-role")

    return pulumi.Output.all(resolved["role"], role.arn).apply(check)
