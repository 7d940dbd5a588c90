"""Plan rendering and JSON export for desired resource graphs."""
import json
from pathlib import Path

from jinja2 import BaseLoader, Environment

from ..graph.models import DesiredResourceGraph, to_plain

# Embedded plan template
PLAN_TEMPLATE = """Key Vault plan: {{ outputs.key_vault_name }} ({{ outputs.authorization_mode }})
{{ resources | length }} resource(s) in {{ waves | length }} wave(s)
{% for wave in waves %}

Wave {{ loop.index }}:
{% for key in wave %}
  + {{ key }}{% if resources[key].dependsOn %} <- {{ resources[key].dependsOn | join(', ') }}{% endif %}

{% endfor %}
{% endfor %}
{% if outputs %}

Outputs:
{% for name, value in outputs | dictsort %}
  {{ name }} = {{ value | tojson }}
{% endfor %}
{% endif %}
"""

class PlanRenderer:
    """Renders a graph as a text plan or JSON document."""

    def __init__(self):
        self.jinja_env = Environment(
            loader=BaseLoader(),
            trim_blocks=True,
            lstrip_blocks=True
        )

    def render_text(self, graph: DesiredResourceGraph) -> str:
        """Render a human-readable plan grouped by creation wave.

        Args:
            graph: Graph to render.

        Returns:
            str: Plan text.
        """
        data = graph.to_dict()
        template = self.jinja_env.from_string(PLAN_TEMPLATE)
        return template.render(
            resources={r["logicalKey"]: r for r in data["resources"]},
            waves=data["waves"],
            outputs=to_plain(graph.outputs)
        )

    def render_json(self, graph: DesiredResourceGraph) -> str:
        return json.dumps(graph.to_dict(), indent=2)

    def save_json(self, graph: DesiredResourceGraph, output_path: str) -> str:
        """Write the graph as JSON.

        Args:
            graph: Graph to export.
            output_path: Path to write the JSON file.

        Returns:
            str: Path of the written file.
        """
        path = Path(output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.render_json(graph))
        return str(path)
