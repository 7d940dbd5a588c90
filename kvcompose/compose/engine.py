"""Composition engine: module configuration to desired resource graph."""
from datetime import date
from typing import Any, Dict, Mapping, Optional, Union

from rich.console import Console

from .authorization import resolve_authorization_mode
from .naming import TagResolver, resolve_vault_name
from .builders.base import VAULT_KEY, CompositionContext
from .builders.vault import VaultBuilder
from .builders.authorization import AuthorizationBuilder
from .builders.material import CertificateBuilder, CertificateContactsBuilder, KeyBuilder, SecretBuilder
from .builders.network import PRIVATE_ENDPOINT_KEY, PrivateEndpointBuilder
from .builders.monitoring import DiagnosticSettingBuilder
from .builders.governance import (
    CustomPolicyBuilder,
    ManagementLockBuilder,
    PolicyAssignmentBuilder,
    PolicyInitiativeBuilder,
)
from ..graph.assembler import GraphAssembler
from ..graph.models import DesiredResourceGraph, Reference, ResourceKind
from ..manifest.schema import ModuleConfiguration
from ..policy.lookup import PolicyDefinitionLookup

console = Console(stderr=True)

class CompositionEngine:
    """Derives the desired resource graph for one key vault configuration.

    The engine is a pure function of its inputs: it keeps no state between
    calls and never touches cloud resources. The only collaborator it may
    call is the optional policy definition lookup.
    """

    def __init__(
        self,
        policy_lookup: Optional[PolicyDefinitionLookup] = None,
        today: Optional[date] = None,
        debug: bool = False
    ):
        """Initialize the engine.

        Args:
            policy_lookup: Resolves policy display names to definition ids.
                Without one, policy descriptors carry display names only.
            today: Date used for the CreatedDate tag. Defaults to the
                current date at composition time.
            debug: If True, print verbose debug information.
        """
        self.policy_lookup = policy_lookup
        self.today = today
        self.debug = debug

        # Builder order only affects debug output; edges decide apply order
        self.builders = [
            VaultBuilder(),
            AuthorizationBuilder(),
            KeyBuilder(),
            SecretBuilder(),
            CertificateBuilder(),
            CertificateContactsBuilder(),
            PrivateEndpointBuilder(),
            DiagnosticSettingBuilder(),
            ManagementLockBuilder(),
            PolicyAssignmentBuilder(),
            CustomPolicyBuilder(),
            PolicyInitiativeBuilder()
        ]

    def compose(self, config: Union[ModuleConfiguration, Mapping[str, Any]]) -> DesiredResourceGraph:
        """Compose the desired resource graph.

        Args:
            config: Validated configuration, or raw data to validate.

        Returns:
            DesiredResourceGraph: Acyclic graph for the resource reconciler.

        Raises:
            ValidationError: If raw configuration data is invalid.
            PolicyLookupError: If a policy display name cannot be resolved.
            GraphError: If the composed descriptors are inconsistent.
        """
        if not isinstance(config, ModuleConfiguration):
            config = ModuleConfiguration.load(config)

        context = CompositionContext(
            config=config,
            vault_name=resolve_vault_name(config),
            tags=TagResolver(config, self.today),
            authorization=resolve_authorization_mode(config),
            policy_lookup=self.policy_lookup
        )

        if self.debug:
            console.print(f"[blue]Debug: Composing key vault {context.vault_name}[/]")
            console.print(f"[blue]Debug: Authorization mode: {context.authorization.name}[/]")

        assembler = GraphAssembler(debug=self.debug)
        for builder in self.builders:
            descriptors = assembler.extend(builder.build(context))
            if self.debug and descriptors:
                console.print(f"[blue]Debug: {type(builder).__name__} emitted {len(descriptors)} descriptor(s)[/]")

        return assembler.assemble(self._outputs(context))

    def _outputs(self, context: CompositionContext) -> Dict[str, Any]:
        """Build the named outputs exported with the graph."""
        config = context.config
        outputs = {
            "key_vault_id": Reference(VAULT_KEY),
            "key_vault_name": context.vault_name,
            "key_vault_uri": Reference(VAULT_KEY, "vault_uri"),
            "authorization_mode": context.authorization.name,
            "key_ids": {
                key: Reference(ResourceKind.KEY.address("keys", key))
                for key in config.keys
            },
            "secret_ids": {
                key: Reference(ResourceKind.SECRET.address("secrets", key))
                for key in config.secrets
            },
            "certificate_ids": {
                key: Reference(ResourceKind.CERTIFICATE.address("certificates", key))
                for key in config.certificates
            }
        }
        if config.enable_private_endpoint:
            outputs["private_endpoint_id"] = Reference(PRIVATE_ENDPOINT_KEY)
        return outputs
