"""Shared data models for the desired resource graph."""
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, FrozenSet, Iterator, List, Optional, Set

class ResourceKind(str, Enum):
    """Managed resource kinds the engine can emit."""
    KEY_VAULT = "azurerm_key_vault"
    KEY = "azurerm_key_vault_key"
    SECRET = "azurerm_key_vault_secret"
    CERTIFICATE = "azurerm_key_vault_certificate"
    CERTIFICATE_CONTACTS = "azurerm_key_vault_certificate_contacts"
    ACCESS_POLICY = "azurerm_key_vault_access_policy"
    ROLE_ASSIGNMENT = "azurerm_role_assignment"
    PRIVATE_ENDPOINT = "azurerm_private_endpoint"
    DIAGNOSTIC_SETTING = "azurerm_monitor_diagnostic_setting"
    MANAGEMENT_LOCK = "azurerm_management_lock"
    POLICY_ASSIGNMENT = "azurerm_resource_group_policy_assignment"
    POLICY_DEFINITION = "azurerm_policy_definition"
    POLICY_SET_DEFINITION = "azurerm_policy_set_definition"

    def address(self, name: str, key: Optional[str] = None) -> str:
        """Build a logical key in resource address form.

        Args:
            name: Block name, e.g. "main" or "secrets".
            key: Map key for per-entry expansions.

        Returns:
            str: ``kind.name`` or ``kind.name["key"]``.
        """
        if key is None:
            return f"{self.value}.{name}"
        return f'{self.value}.{name}["{key}"]'

@dataclass(frozen=True)
class Reference:
    """Pointer to an attribute of another descriptor, resolved by the reconciler."""
    logical_key: str
    attribute: str = "id"

    def __str__(self) -> str:
        return f"${{{self.logical_key}.{self.attribute}}}"

def iter_references(value: Any) -> Iterator[Reference]:
    """Yield every Reference nested anywhere inside an attribute value."""
    if isinstance(value, Reference):
        yield value
    elif isinstance(value, dict):
        for item in value.values():
            yield from iter_references(item)
    elif isinstance(value, (list, tuple, set, frozenset)):
        for item in value:
            yield from iter_references(item)

def to_plain(value: Any) -> Any:
    """Convert an attribute value into JSON-compatible data."""
    if isinstance(value, Reference):
        return str(value)
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {k: to_plain(v) for k, v in value.items()}
    if isinstance(value, (set, frozenset)):
        return sorted(to_plain(v) for v in value)
    if isinstance(value, (list, tuple)):
        return [to_plain(v) for v in value]
    return value

@dataclass
class ResourceDescriptor:
    """One planned managed resource."""
    logical_key: str
    kind: ResourceKind
    attributes: Dict[str, Any]
    depends_on: FrozenSet[str] = frozenset()

    def references(self) -> List[Reference]:
        return list(iter_references(self.attributes))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "logicalKey": self.logical_key,
            "resourceKind": self.kind.value,
            "attributes": to_plain(self.attributes),
            "dependsOn": sorted(self.depends_on)
        }

@dataclass
class DesiredResourceGraph:
    """Validated set of descriptors with explicit dependency edges.

    Equality compares descriptors and outputs only; the derived orderings
    are a function of those.
    """
    descriptors: Dict[str, ResourceDescriptor]
    outputs: Dict[str, Any] = field(default_factory=dict)
    order: List[str] = field(default_factory=list, compare=False)
    waves: List[List[str]] = field(default_factory=list, compare=False)

    def __contains__(self, logical_key: str) -> bool:
        return logical_key in self.descriptors

    def __getitem__(self, logical_key: str) -> ResourceDescriptor:
        return self.descriptors[logical_key]

    def __len__(self) -> int:
        return len(self.descriptors)

    def __iter__(self) -> Iterator[ResourceDescriptor]:
        """Iterate descriptors in dependency order."""
        for logical_key in self.order:
            yield self.descriptors[logical_key]

    def of_kind(self, kind: ResourceKind) -> List[ResourceDescriptor]:
        """Return descriptors of one kind in dependency order."""
        return [d for d in self if d.kind == kind]

    def dependents(self, logical_key: str) -> Set[str]:
        """Return keys of descriptors that depend directly on ``logical_key``."""
        return {d.logical_key for d in self.descriptors.values() if logical_key in d.depends_on}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resources": [d.to_dict() for d in self],
            "waves": self.waves,
            "outputs": to_plain(self.outputs)
        }
