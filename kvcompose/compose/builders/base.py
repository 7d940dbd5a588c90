"""Shared builder context and interface."""
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from ..authorization import AuthorizationMode
from ..naming import TagResolver
from ...graph.models import Reference, ResourceDescriptor, ResourceKind
from ...manifest.schema import ModuleConfiguration
from ...policy.lookup import PolicyDefinitionLookup

VAULT_KEY = ResourceKind.KEY_VAULT.address("main")

@dataclass(frozen=True)
class CompositionContext:
    """Values derived once per composition and shared by all builders."""
    config: ModuleConfiguration
    vault_name: str
    tags: TagResolver
    authorization: AuthorizationMode
    policy_lookup: Optional[PolicyDefinitionLookup] = None

    @property
    def vault_ref(self) -> Reference:
        return Reference(VAULT_KEY)

class ResourceBuilder(ABC):
    """Base class for per-category descriptor builders."""

    @abstractmethod
    def build(self, context: CompositionContext) -> List[ResourceDescriptor]:
        """Build the descriptors for one resource category.

        Args:
            context: Shared composition context.

        Returns:
            List[ResourceDescriptor]: Descriptors to add, empty when the
            category is disabled.
        """
        pass

def compact(values: dict) -> dict:
    """Drop keys whose value is None."""
    return {k: v for k, v in values.items() if v is not None}
