"""Private endpoint builder."""
from typing import List

from .base import VAULT_KEY, CompositionContext, ResourceBuilder
from ...graph.models import ResourceDescriptor, ResourceKind

PRIVATE_ENDPOINT_KEY = ResourceKind.PRIVATE_ENDPOINT.address("main")

class PrivateEndpointBuilder(ResourceBuilder):
    """Builds the vault's private endpoint."""

    def build(self, context: CompositionContext) -> List[ResourceDescriptor]:
        config = context.config
        if not config.enable_private_endpoint:
            return []

        attributes = {
            "name": f"pe-{context.vault_name}",
            "location": config.location,
            "resource_group_name": config.resource_group_name,
            "subnet_id": config.private_endpoint_subnet_id,
            "private_service_connection": {
                "name": f"psc-{context.vault_name}",
                "private_connection_resource_id": context.vault_ref,
                "subresource_names": ["vault"],
                "is_manual_connection": False
            },
            "tags": context.tags.resolve()
        }
        if config.private_dns_zone_ids is not None:
            attributes["private_dns_zone_group"] = {
                "name": "default",
                "private_dns_zone_ids": list(config.private_dns_zone_ids)
            }

        return [
            ResourceDescriptor(
                logical_key=PRIVATE_ENDPOINT_KEY,
                kind=ResourceKind.PRIVATE_ENDPOINT,
                attributes=attributes,
                depends_on=frozenset({VAULT_KEY})
            )
        ]
