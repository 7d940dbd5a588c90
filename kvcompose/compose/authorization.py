"""Authorization mode resolution (RBAC vs. legacy access policies).

The vault authorizes data-plane access one way or the other, never both.
The choice is made once per composition and carried as a tagged variant, so
builders never consult the unused branch of the configuration.
"""
from dataclasses import dataclass
from typing import FrozenSet, Tuple, Union

from ..graph.models import ResourceKind
from ..manifest.schema import AccessPolicy, ModuleConfiguration

# Role class -> built-in role definition name
ROLE_NAMES = {
    "administrators": "Key Vault Administrator",
    "secrets_officers": "Key Vault Secrets Officer",
    "secrets_users": "Key Vault Secrets User",
    "crypto_officers": "Key Vault Crypto Officer",
    "crypto_users": "Key Vault Crypto User",
    "certificates_officers": "Key Vault Certificates Officer",
}

@dataclass(frozen=True)
class RoleBinding:
    """One principal bound to one role class at vault scope."""
    role_class: str
    principal_id: str

    @property
    def role_name(self) -> str:
        return ROLE_NAMES[self.role_class]

    @property
    def logical_key(self) -> str:
        return ResourceKind.ROLE_ASSIGNMENT.address(self.role_class, self.principal_id)

@dataclass(frozen=True)
class RbacMode:
    bindings: Tuple[RoleBinding, ...] = ()

    name = "rbac"

    def material_dependencies(self) -> FrozenSet[str]:
        # Role assignments are not propagation-ordered against data-plane writes
        return frozenset()

@dataclass(frozen=True)
class AccessPolicyMode:
    policies: Tuple[Tuple[str, AccessPolicy], ...] = ()

    name = "access_policies"

    @staticmethod
    def policy_key(policy_key: str) -> str:
        return ResourceKind.ACCESS_POLICY.address("policies", policy_key)

    def material_dependencies(self) -> FrozenSet[str]:
        """Access policies must be applied before secrets and certificates are written."""
        return frozenset(self.policy_key(key) for key, _ in self.policies)

AuthorizationMode = Union[RbacMode, AccessPolicyMode]

def resolve_authorization_mode(config: ModuleConfiguration) -> AuthorizationMode:
    """Pick the authorization branch for a configuration.

    When RBAC is enabled the access policies are ignored entirely, even if
    populated; otherwise the role-class mappings are never consulted.
    """
    if config.enable_rbac_authorization:
        bindings = []
        for role_class in ROLE_NAMES:
            seen = set()
            for principal_id in getattr(config.role_assignments, role_class):
                if principal_id in seen:
                    continue
                seen.add(principal_id)
                bindings.append(RoleBinding(role_class, principal_id))
        return RbacMode(tuple(bindings))
    return AccessPolicyMode(tuple(config.access_policies.items()))
