"""Key Vault descriptor builder."""
from typing import Dict, List

from .base import VAULT_KEY, CompositionContext, ResourceBuilder
from ...graph.models import ResourceDescriptor, ResourceKind
from ...manifest.schema import ModuleConfiguration

class VaultBuilder(ResourceBuilder):
    """Builds the vault descriptor every other descriptor hangs off."""

    def build(self, context: CompositionContext) -> List[ResourceDescriptor]:
        """Build the key vault descriptor.

        The network ACL block is part of the vault itself, not a separate
        resource, and is attached only when network ACLs are enabled.

        Args:
            context: Shared composition context.

        Returns:
            List[ResourceDescriptor]: A single vault descriptor.
        """
        config = context.config

        attributes = {
            "name": context.vault_name,
            "location": config.location,
            "resource_group_name": config.resource_group_name,
            "tenant_id": config.tenant_id,
            "sku_name": config.sku_name,
            "enabled_for_deployment": config.enabled_for_deployment,
            "enabled_for_disk_encryption": config.enabled_for_disk_encryption,
            "enabled_for_template_deployment": config.enabled_for_template_deployment,
            "enable_rbac_authorization": config.enable_rbac_authorization,
            "purge_protection_enabled": config.purge_protection_enabled,
            "soft_delete_retention_days": config.soft_delete_retention_days,
            "public_network_access_enabled": config.public_network_access_enabled,
            "tags": context.tags.resolve()
        }

        if config.enable_network_acls:
            attributes["network_acls"] = self._network_acls(config)

        return [
            ResourceDescriptor(
                logical_key=VAULT_KEY,
                kind=ResourceKind.KEY_VAULT,
                attributes=attributes
            )
        ]

    def _network_acls(self, config: ModuleConfiguration) -> Dict:
        return {
            "bypass": config.bypass,
            "default_action": config.default_action,
            "ip_rules": list(config.ip_rules),
            # Subnet references are a set; sorted for a stable descriptor
            "virtual_network_subnet_ids": sorted(config.subnet_ids)
        }
