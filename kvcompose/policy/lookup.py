"""Policy definition lookup collaborators."""
from abc import ABC, abstractmethod
from typing import Dict, Optional

from azure.identity import DefaultAzureCredential
from rich.console import Console

from ..errors import PolicyLookupError

console = Console(stderr=True)

class PolicyDefinitionLookup(ABC):
    """Resolves well-known policy display names to definition identifiers."""

    @abstractmethod
    def resolve(self, display_name: str) -> str:
        """Resolve a policy display name.

        Args:
            display_name: Display name of a policy definition.

        Returns:
            str: The policy definition resource identifier.

        Raises:
            PolicyLookupError: If no definition carries that display name.
        """
        pass

class StaticPolicyDefinitionLookup(PolicyDefinitionLookup):
    """Lookup backed by a fixed display name -> identifier mapping."""

    def __init__(self, definitions: Dict[str, str]):
        self.definitions = dict(definitions)

    def resolve(self, display_name: str) -> str:
        try:
            return self.definitions[display_name]
        except KeyError:
            raise PolicyLookupError(
                "Unknown policy definition",
                {"display_name": display_name}
            ) from None

class AzurePolicyDefinitionLookup(PolicyDefinitionLookup):
    """Lookup against the built-in policy definitions of a subscription."""

    def __init__(self, subscription_id: str, debug: bool = False):
        """Initialize the lookup.

        Args:
            subscription_id: Azure subscription ID.
            debug: If True, print verbose debug information.
        """
        self.subscription_id = subscription_id
        self.debug = debug
        self.credential = DefaultAzureCredential()
        self._definitions: Optional[Dict[str, str]] = None

    def _load_definitions(self) -> Dict[str, str]:
        from azure.mgmt.resource import PolicyClient

        client = PolicyClient(self.credential, self.subscription_id)
        definitions = {}
        for definition in client.policy_definitions.list_built_in():
            if definition.display_name:
                definitions[definition.display_name] = definition.id

        if self.debug:
            console.print(f"[blue]Debug: Loaded {len(definitions)} built-in policy definitions[/]")

        return definitions

    def resolve(self, display_name: str) -> str:
        # Built-in definitions are listed once per lookup instance
        if self._definitions is None:
            self._definitions = self._load_definitions()
        if display_name not in self._definitions:
            raise PolicyLookupError(
                "Unknown policy definition",
                {"display_name": display_name, "subscription_id": self.subscription_id}
            )
        return self._definitions[display_name]
