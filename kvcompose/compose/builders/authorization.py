"""Role assignment and access policy builder."""
from typing import List

from .base import VAULT_KEY, CompositionContext, ResourceBuilder
from ..authorization import AccessPolicyMode, RbacMode
from ...graph.models import ResourceDescriptor, ResourceKind

class AuthorizationBuilder(ResourceBuilder):
    """Emits role assignments in RBAC mode, access policies otherwise."""

    def build(self, context: CompositionContext) -> List[ResourceDescriptor]:
        mode = context.authorization
        if isinstance(mode, RbacMode):
            return self._role_assignments(mode, context)
        return self._access_policies(mode, context)

    def _role_assignments(self, mode: RbacMode, context: CompositionContext) -> List[ResourceDescriptor]:
        return [
            ResourceDescriptor(
                logical_key=binding.logical_key,
                kind=ResourceKind.ROLE_ASSIGNMENT,
                attributes={
                    "scope": context.vault_ref,
                    "role_definition_name": binding.role_name,
                    "principal_id": binding.principal_id
                },
                depends_on=frozenset({VAULT_KEY})
            )
            for binding in mode.bindings
        ]

    def _access_policies(self, mode: AccessPolicyMode, context: CompositionContext) -> List[ResourceDescriptor]:
        descriptors = []
        for key, policy in mode.policies:
            descriptors.append(
                ResourceDescriptor(
                    logical_key=mode.policy_key(key),
                    kind=ResourceKind.ACCESS_POLICY,
                    attributes={
                        "key_vault_id": context.vault_ref,
                        # Policies without their own tenant inherit the vault's
                        "tenant_id": policy.tenant_id or context.config.tenant_id,
                        "object_id": policy.object_id,
                        "key_permissions": list(policy.key_permissions),
                        "secret_permissions": list(policy.secret_permissions),
                        "certificate_permissions": list(policy.certificate_permissions),
                        "storage_permissions": list(policy.storage_permissions)
                    },
                    depends_on=frozenset({VAULT_KEY})
                )
            )
        return descriptors
