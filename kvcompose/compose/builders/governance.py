"""Resource lock and Azure Policy builders."""
from dataclasses import dataclass
from typing import Dict, List, Optional

from .base import VAULT_KEY, CompositionContext, ResourceBuilder
from ...graph.models import Reference, ResourceDescriptor, ResourceKind

LOCK_NOTES = "Resource lock to prevent accidental deletion or modification of the Key Vault"

@dataclass(frozen=True)
class BuiltInPolicy:
    """A built-in policy referenced by display name."""
    slug: str
    display_name: str
    effect: str

PURGE_PROTECTION = BuiltInPolicy(
    "purge-protection", "Key vaults should have deletion protection enabled", "Deny"
)
SOFT_DELETE = BuiltInPolicy(
    "soft-delete", "Key vaults should have soft delete enabled", "Deny"
)
FIREWALL = BuiltInPolicy(
    "firewall", "Azure Key Vault should have firewall enabled", "Deny"
)
PUBLIC_NETWORK = BuiltInPolicy(
    "public-network", "Azure Key Vault should disable public network access", "Deny"
)
LOGGING = BuiltInPolicy(
    "logging",
    "Deploy - Configure diagnostic settings for Azure Key Vault to Log Analytics workspace",
    "DeployIfNotExists"
)
# Allowed effects for this definition are Audit and Disabled only
PRIVATE_LINK = BuiltInPolicy(
    "private-link", "Azure Key Vaults should use private link", "Audit"
)

ASSIGNED_POLICIES = (PURGE_PROTECTION, SOFT_DELETE, FIREWALL, PUBLIC_NETWORK, LOGGING, PRIVATE_LINK)
INITIATIVE_POLICIES = (PURGE_PROTECTION, SOFT_DELETE, PRIVATE_LINK, LOGGING)

def resolve_definition_id(policy: BuiltInPolicy, context: CompositionContext) -> Optional[str]:
    """Resolve a definition id, or None to leave resolution to the reconciler."""
    if context.policy_lookup is None:
        return None
    return context.policy_lookup.resolve(policy.display_name)

class ManagementLockBuilder(ResourceBuilder):
    """Builds the vault's management lock."""

    def build(self, context: CompositionContext) -> List[ResourceDescriptor]:
        config = context.config
        if not config.enable_resource_lock:
            return []
        return [
            ResourceDescriptor(
                logical_key=ResourceKind.MANAGEMENT_LOCK.address("main"),
                kind=ResourceKind.MANAGEMENT_LOCK,
                attributes={
                    "name": f"lock-{context.vault_name}",
                    "scope": context.vault_ref,
                    "lock_level": config.resource_lock_level,
                    "notes": LOCK_NOTES
                },
                depends_on=frozenset({VAULT_KEY})
            )
        ]

class PolicyAssignmentBuilder(ResourceBuilder):
    """Assigns the six built-in Key Vault policies at resource group scope."""

    def build(self, context: CompositionContext) -> List[ResourceDescriptor]:
        config = context.config
        if not config.enable_policy_assignments:
            return []

        descriptors = []
        for policy in ASSIGNED_POLICIES:
            attributes = {
                "name": f"{context.vault_name}-{policy.slug}",
                "display_name": f"{context.vault_name}: {policy.display_name}",
                "resource_group_id": config.resource_group_id,
                "policy_definition_id": resolve_definition_id(policy, context),
                "policy_definition_display_name": policy.display_name,
                "parameters": self._parameters(policy, config.log_analytics_workspace_id)
            }
            if policy.effect == "DeployIfNotExists":
                # Remediation runs under the assignment's own identity
                attributes["location"] = config.location
                attributes["identity"] = {"type": "SystemAssigned"}
            descriptors.append(
                ResourceDescriptor(
                    logical_key=ResourceKind.POLICY_ASSIGNMENT.address(policy.slug.replace("-", "_")),
                    kind=ResourceKind.POLICY_ASSIGNMENT,
                    attributes=attributes
                )
            )
        return descriptors

    def _parameters(self, policy: BuiltInPolicy, workspace_id: str) -> Dict:
        parameters = {"effect": {"value": policy.effect}}
        if policy is LOGGING:
            parameters["logAnalytics"] = {"value": workspace_id}
        return parameters

def _custom_rule(resource_type: str, condition: Dict) -> Dict:
    return {
        "if": {
            "allOf": [
                {"field": "type", "equals": resource_type},
                condition
            ]
        },
        "then": {"effect": "audit"}
    }

CUSTOM_POLICIES = (
    (
        "key-rotation-audit",
        "Audit Key Vault keys without a rotation policy",
        _custom_rule(
            "Microsoft.KeyVault.Data/vaults/keys",
            {"field": "Microsoft.KeyVault.Data/vaults/keys/rotationPolicy", "exists": "false"}
        )
    ),
    (
        "secret-expiration-audit",
        "Audit Key Vault secrets without an expiration date",
        _custom_rule(
            "Microsoft.KeyVault.Data/vaults/secrets",
            {"field": "Microsoft.KeyVault.Data/vaults/secrets/attributes.expiresOn", "exists": "false"}
        )
    ),
    (
        "certificate-issuer-audit",
        "Audit self-signed Key Vault certificates",
        _custom_rule(
            "Microsoft.KeyVault.Data/vaults/certificates",
            {"field": "Microsoft.KeyVault.Data/vaults/certificates/issuer.name", "equals": "Self"}
        )
    ),
)

class CustomPolicyBuilder(ResourceBuilder):
    """Defines the module's custom audit policies."""

    def build(self, context: CompositionContext) -> List[ResourceDescriptor]:
        if not context.config.enable_custom_policies:
            return []
        return [
            ResourceDescriptor(
                logical_key=ResourceKind.POLICY_DEFINITION.address(slug.replace("-", "_")),
                kind=ResourceKind.POLICY_DEFINITION,
                attributes={
                    "name": f"{context.vault_name}-{slug}",
                    "policy_type": "Custom",
                    "mode": "Microsoft.KeyVault.Data",
                    "display_name": display_name,
                    "metadata": {"category": "Key Vault"},
                    "policy_rule": rule
                }
            )
            for slug, display_name, rule in CUSTOM_POLICIES
        ]

class PolicyInitiativeBuilder(ResourceBuilder):
    """Bundles the core built-in policies into one initiative and assigns it."""

    def build(self, context: CompositionContext) -> List[ResourceDescriptor]:
        config = context.config
        if not config.enable_policy_initiative:
            return []

        initiative_key = ResourceKind.POLICY_SET_DEFINITION.address("main")
        references = []
        for policy in INITIATIVE_POLICIES:
            parameter_values = {"effect": {"value": policy.effect}}
            if policy is LOGGING:
                parameter_values["logAnalytics"] = {"value": "[parameters('logAnalyticsWorkspaceId')]"}
            references.append({
                "reference_id": policy.slug,
                "policy_definition_id": resolve_definition_id(policy, context),
                "policy_definition_display_name": policy.display_name,
                "parameter_values": parameter_values
            })

        initiative = ResourceDescriptor(
            logical_key=initiative_key,
            kind=ResourceKind.POLICY_SET_DEFINITION,
            attributes={
                "name": f"{context.vault_name}-security-initiative",
                "policy_type": "Custom",
                "display_name": f"Key Vault security baseline ({context.vault_name})",
                "metadata": {"category": "Key Vault"},
                "parameters": {
                    "logAnalyticsWorkspaceId": {
                        "type": "String",
                        "metadata": {"displayName": "Log Analytics workspace ID"}
                    }
                },
                "policy_definition_reference": references
            }
        )
        assignment = ResourceDescriptor(
            logical_key=ResourceKind.POLICY_ASSIGNMENT.address("initiative"),
            kind=ResourceKind.POLICY_ASSIGNMENT,
            attributes={
                "name": f"{context.vault_name}-security-initiative",
                "display_name": f"{context.vault_name}: Key Vault security baseline",
                "resource_group_id": config.resource_group_id,
                "policy_definition_id": Reference(initiative_key),
                "location": config.location,
                "identity": {"type": "SystemAssigned"},
                "parameters": {
                    "logAnalyticsWorkspaceId": {"value": config.log_analytics_workspace_id}
                }
            },
            depends_on=frozenset({initiative_key})
        )
        return [initiative, assignment]
