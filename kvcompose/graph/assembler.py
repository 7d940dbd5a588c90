"""Dependency graph assembly and validation."""
from typing import Any, Dict, Iterable, List, Optional, Set

from rich.console import Console

from .models import DesiredResourceGraph, ResourceDescriptor, iter_references
from ..errors import GraphError

console = Console(stderr=True)

class GraphAssembler:
    """Collects descriptors and validates them into a DesiredResourceGraph."""

    def __init__(self, debug: bool = False):
        """Initialize the assembler.

        Args:
            debug: If True, print verbose debug information.
        """
        self.debug = debug
        self._descriptors: Dict[str, ResourceDescriptor] = {}

    def add(self, descriptor: ResourceDescriptor) -> ResourceDescriptor:
        """Add one descriptor.

        Raises:
            GraphError: If the logical key was already added.
        """
        if descriptor.logical_key in self._descriptors:
            raise GraphError(
                "Duplicate logical key",
                {"logical_key": descriptor.logical_key}
            )
        self._descriptors[descriptor.logical_key] = descriptor
        return descriptor

    def extend(self, descriptors: Iterable[ResourceDescriptor]) -> List[ResourceDescriptor]:
        return [self.add(d) for d in descriptors]

    def assemble(self, outputs: Optional[Dict[str, Any]] = None) -> DesiredResourceGraph:
        """Validate the collected descriptors and build the graph.

        Args:
            outputs: Named values exported alongside the graph.

        Returns:
            DesiredResourceGraph: Acyclic graph with resolved edges.

        Raises:
            GraphError: On dangling edges, undeclared references or cycles.
        """
        outputs = dict(outputs or {})
        self._check_edges()
        self._check_outputs(outputs)
        waves = self._waves()
        order = [key for wave in waves for key in wave]

        if self.debug:
            console.print(f"[blue]Debug: Assembled {len(order)} descriptors in {len(waves)} waves[/]")

        return DesiredResourceGraph(
            descriptors=dict(self._descriptors),
            outputs=outputs,
            order=order,
            waves=waves
        )

    def _check_edges(self) -> None:
        for key, descriptor in self._descriptors.items():
            for dependency in descriptor.depends_on:
                if dependency not in self._descriptors:
                    raise GraphError(
                        "Dangling dependency",
                        {"logical_key": key, "depends_on": dependency}
                    )
            # Every attribute reference must be covered by an explicit edge
            for reference in descriptor.references():
                if reference.logical_key not in self._descriptors:
                    raise GraphError(
                        "Reference to unknown descriptor",
                        {"logical_key": key, "reference": str(reference)}
                    )
                if reference.logical_key not in descriptor.depends_on:
                    raise GraphError(
                        "Reference without dependency edge",
                        {"logical_key": key, "reference": str(reference)}
                    )

    def _check_outputs(self, outputs: Dict[str, Any]) -> None:
        for name, value in outputs.items():
            for reference in iter_references(value):
                if reference.logical_key not in self._descriptors:
                    raise GraphError(
                        "Output references unknown descriptor",
                        {"output": name, "reference": str(reference)}
                    )

    def _waves(self) -> List[List[str]]:
        """Group descriptors into dependency levels (Kahn's algorithm).

        Descriptors within one wave have no path between them.

        Raises:
            GraphError: If the dependency relation contains a cycle.
        """
        remaining: Dict[str, Set[str]] = {
            key: set(d.depends_on) for key, d in self._descriptors.items()
        }
        waves = []
        while remaining:
            ready = sorted(key for key, deps in remaining.items() if not deps)
            if not ready:
                raise GraphError(
                    "Dependency cycle detected",
                    {"descriptors": ", ".join(sorted(remaining))}
                )
            waves.append(ready)
            for key in ready:
                del remaining[key]
            for deps in remaining.values():
                deps.difference_update(ready)
        return waves
