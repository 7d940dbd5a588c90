"""Vault naming and tag derivation."""
from datetime import date
from typing import Dict, Optional

from ..manifest.schema import ModuleConfiguration

MANAGED_BY = "Terraform"
MODULE_NAME = "azure-key-vault-module"

def resolve_vault_name(config: ModuleConfiguration) -> str:
    """Compute the vault's canonical name.

    A non-empty custom name wins verbatim. Otherwise the prefix falls back to
    ``kv-<environment>-<locationShort>`` and the suffix is appended.
    """
    if config.custom_name:
        return config.custom_name
    prefix = config.name_prefix or f"kv-{config.environment}-{config.location_short}"
    return f"{prefix}{config.name_suffix or ''}"

def default_tags(config: ModuleConfiguration, today: date) -> Dict[str, str]:
    return {
        "Environment": config.environment,
        "Project": config.project_name,
        "ManagedBy": MANAGED_BY,
        "Module": MODULE_NAME,
        "CreatedDate": today.strftime("%Y-%m-%d"),
        "CreatedBy": config.created_by
    }

class TagResolver:
    """Merges tags with fixed precedence: defaults < additional tags < resource tags."""

    def __init__(self, config: ModuleConfiguration, today: Optional[date] = None):
        self.base_tags = {
            **default_tags(config, today or date.today()),
            **config.additional_tags
        }

    def resolve(self, resource_tags: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        """Return the base tags overlaid with one resource's own tags."""
        return {**self.base_tags, **(resource_tags or {})}
