"""Diagnostic setting builder."""
from typing import List

from .base import VAULT_KEY, CompositionContext, ResourceBuilder
from ...graph.models import ResourceDescriptor, ResourceKind

class DiagnosticSettingBuilder(ResourceBuilder):
    """Ships vault logs and metrics to a Log Analytics workspace."""

    def build(self, context: CompositionContext) -> List[ResourceDescriptor]:
        config = context.config
        if not config.enable_diagnostic_settings:
            return []

        return [
            ResourceDescriptor(
                logical_key=ResourceKind.DIAGNOSTIC_SETTING.address("main"),
                kind=ResourceKind.DIAGNOSTIC_SETTING,
                attributes={
                    "name": f"diag-{context.vault_name}",
                    "target_resource_id": context.vault_ref,
                    "log_analytics_workspace_id": config.log_analytics_workspace_id,
                    "enabled_log": [
                        {"category": category}
                        for category in sorted(config.diagnostic_logs)
                    ],
                    "metric": [
                        {"category": category, "enabled": True}
                        for category in sorted(config.diagnostic_metrics)
                    ]
                },
                depends_on=frozenset({VAULT_KEY})
            )
        ]
