"""Infrastructure: dependency graph output in Graphviz DOT format.

One node per module, one edge per import of the checked module.  The
output path comes from ``--dependency-graph``.
"""

from __future__ import annotations

from pathlib import Path

from dtc.core.models import CheckedModule, Configuration
from dtc.exceptions import GenerationError, impossible


def _quote(label: str) -> str:
    escaped = label.replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def render_dot(module: CheckedModule) -> str:
    """Return the DOT source for *module* and its direct imports."""
    names = [module.name]
    for imported in module.imports:
        if imported not in names:
            names.append(imported)
    node_ids = {name: f"m{index}" for index, name in enumerate(names)}

    lines = ["digraph dependencies {"]
    for name in names:
        lines.append(f"   {node_ids[name]}[label={_quote(name)}];")
    for imported in dict.fromkeys(module.imports):
        lines.append(f"   {node_ids[module.name]} -> {node_ids[imported]};")
    lines.append("}")
    return "\n".join(lines) + "\n"


class DotGenerator:
    """Concrete :class:`~dtc.core.protocols.ArtifactGenerator` for DOT graphs."""

    def generate(self, module: CheckedModule, config: Configuration) -> None:
        target: Path | None = config.dependency_graph
        if target is None:
            impossible("dependency graph generation requested without an output path")
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(render_dot(module), encoding="utf-8")
        except OSError as exc:
            raise GenerationError(
                f"Could not write dependency graph to {target}: {exc}",
            ) from exc
