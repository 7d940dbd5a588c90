"""Exception types raised by the composition engine."""
from typing import Any, Dict, Optional


class KeyVaultModuleError(Exception):
    """Base class for all composition errors.

    Attributes:
        message: Human-readable error description.
        context: Additional details (field names, logical keys, etc.).
    """

    def __init__(self, message: str, context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.context = context or {}

    def __str__(self) -> str:
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            return f"{self.message} (context: {context_str})"
        return self.message


class ValidationError(KeyVaultModuleError):
    """Raised when a module configuration violates an invariant.

    Raised before any descriptor is emitted, never with a partial graph.
    """
    pass


class GraphError(KeyVaultModuleError):
    """Raised when the desired resource graph is inconsistent.

    Duplicate logical keys, dangling or undeclared dependencies and cycles
    all point at a defect in the composition rules, not at user input.
    """
    pass


class PolicyLookupError(KeyVaultModuleError):
    """Raised when a policy display name cannot be resolved to a definition."""
    pass
