"""Resource reconciler seam.

The reconciler diffs the desired graph against live cloud state and issues
provider calls. Real implementations live outside this package; the what-if
reconciler only reports what would be applied.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .graph.models import DesiredResourceGraph

@dataclass
class ApplyResult:
    """Outcome of one reconciliation pass."""
    applied: List[str] = field(default_factory=list)
    skipped: List[str] = field(default_factory=list)

class ResourceReconciler(ABC):
    """Applies a desired resource graph.

    Implementations may create any two descriptors in parallel when no
    dependency path connects them, and must respect every dependsOn edge.
    """

    @abstractmethod
    def apply(self, graph: DesiredResourceGraph) -> ApplyResult:
        pass

class WhatIfReconciler(ResourceReconciler):
    """Prints the ordered plan without changing anything."""

    def __init__(self, console: Optional[Console] = None):
        self.console = console or Console()

    def apply(self, graph: DesiredResourceGraph) -> ApplyResult:
        table = Table(title=f"Key Vault plan: {graph.outputs.get('key_vault_name', '')}")
        table.add_column("Wave", justify="right", style="cyan")
        table.add_column("Resource", style="green")
        table.add_column("Depends on")

        for index, wave in enumerate(graph.waves, start=1):
            for key in wave:
                depends_on = "\n".join(sorted(graph[key].depends_on))
                table.add_row(str(index), escape(key), escape(depends_on))

        self.console.print(table)
        self.console.print(f"[yellow]What-if only: {len(graph)} resource(s) would be reconciled, none were modified.[/]")
        return ApplyResult(skipped=list(graph.order))
