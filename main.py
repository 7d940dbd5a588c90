"""Key Vault module CLI entrypoint."""
from pathlib import Path
from typing import Optional

import typer
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from kvcompose.compose.engine import CompositionEngine
from kvcompose.errors import KeyVaultModuleError
from kvcompose.graph.models import DesiredResourceGraph
from kvcompose.manifest.parser import ConfigurationParser
from kvcompose.policy.lookup import AzurePolicyDefinitionLookup
from kvcompose.reconciler import WhatIfReconciler
from kvcompose.render.plan import PlanRenderer

app = typer.Typer(help="Azure Key Vault module - composes the desired resource graph for a key vault")
console = Console()

def _compose(config: str, subscription: Optional[str], debug: bool) -> DesiredResourceGraph:
    """Load a configuration file and compose its graph."""
    module_config = ConfigurationParser.load(config)
    lookup = AzurePolicyDefinitionLookup(subscription, debug=debug) if subscription else None
    engine = CompositionEngine(policy_lookup=lookup, debug=debug)
    return engine.compose(module_config)

def _fail(error: Exception) -> None:
    console.print(f"[bold red]Error: {escape(str(error))}[/]")
    raise typer.Exit(code=1)

@app.command("validate")
def validate(
    config: str = typer.Option("keyvault.yaml", "--config", "-c", help="Path to the key vault YAML configuration"),
    debug: bool = typer.Option(False, "--debug", help="Print verbose debug information")
):
    """Validate a configuration and its composed graph."""
    try:
        graph = _compose(config, None, debug)
    except (KeyVaultModuleError, FileNotFoundError, yaml.YAMLError) as e:
        _fail(e)

    console.print(f"[green]Configuration is valid: {len(graph)} resource(s) for {graph.outputs['key_vault_name']}[/]")

    table = Table(title="Resources by kind")
    table.add_column("Kind", style="cyan")
    table.add_column("Count", justify="right")
    counts = {}
    for descriptor in graph:
        counts[descriptor.kind.value] = counts.get(descriptor.kind.value, 0) + 1
    for kind, count in sorted(counts.items()):
        table.add_row(kind, str(count))
    console.print(table)

@app.command("plan")
def plan(
    config: str = typer.Option("keyvault.yaml", "--config", "-c", help="Path to the key vault YAML configuration"),
    subscription: Optional[str] = typer.Option(None, "--subscription", "-s", help="Subscription used to resolve built-in policy definitions"),
    text: bool = typer.Option(False, "--text", help="Print the plain text plan instead of a table"),
    debug: bool = typer.Option(False, "--debug", help="Print verbose debug information")
):
    """Show what the reconciler would apply, in dependency order."""
    try:
        graph = _compose(config, subscription, debug)
    except (KeyVaultModuleError, FileNotFoundError, yaml.YAMLError) as e:
        _fail(e)

    if text:
        console.print(PlanRenderer().render_text(graph), markup=False)
    else:
        WhatIfReconciler(console).apply(graph)

@app.command("export")
def export(
    config: str = typer.Option("keyvault.yaml", "--config", "-c", help="Path to the key vault YAML configuration"),
    output: str = typer.Option("keyvault-graph.json", "--output", "-o", help="Path for the exported graph"),
    subscription: Optional[str] = typer.Option(None, "--subscription", "-s", help="Subscription used to resolve built-in policy definitions"),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing export"),
    debug: bool = typer.Option(False, "--debug", help="Print verbose debug information")
):
    """Export the desired resource graph as JSON for the reconciler."""
    output_path = Path(output)
    if output_path.exists() and not force:
        console.print(f"[bold yellow]WARNING: {output_path} already exists.[/]")
        console.print("[yellow]Use --force to overwrite the existing file.[/]")
        raise typer.Exit(code=1)

    try:
        graph = _compose(config, subscription, debug)
    except (KeyVaultModuleError, FileNotFoundError, yaml.YAMLError) as e:
        _fail(e)

    path = PlanRenderer().save_json(graph, str(output_path))
    console.print(f"[green]Resource graph written to {path}[/]")

if __name__ == "__main__":
    app()
