"""Render a collapsed DependencyGraph to a yEd GraphML file."""

from __future__ import annotations

import math
import textwrap
import zlib
from pathlib import Path
from string import Template
from xml.sax.saxutils import escape

from depzoom.analysis import strongly_connected_components
from depzoom.classify import bare_name
from depzoom.model import DependencyGraph

_TEMPLATE_PATH = Path(__file__).with_name("template.graphml")

_NODE = Template(
    """    <node id="$id">
      <data key="d6">
        <y:ShapeNode>
          <y:Geometry height="$height" width="$width"/>
          <y:Fill color="#$color" transparent="false"/>
          <y:NodeLabel>$label</y:NodeLabel>
        </y:ShapeNode>
      </data>
    </node>"""
)

_EDGE = Template('    <edge id="$id" source="$source" target="$target"/>')

LABEL_WIDTH = 60


def _attr(value: str) -> str:
    return escape(value, {'"': "&quot;"})


def heat_color(count: int | None) -> str:
    """Return a white-to-red fill colour for a change count."""
    heat = 0 if not count or count <= 0 else min(510, int(math.log(count) * 50 + 1))
    green = max(0, min(510 - heat, 255))
    blue = max(0, min(255 - heat, 255))
    return f"ff{green:02x}{blue:02x}"


def cluster_color(members: list[str]) -> str:
    """Return a pastel fill colour shared by all members of one cycle."""
    h = zlib.crc32(",".join(sorted(members)).encode("utf-8")) % 300
    channels = (h, (h + 100) % 300, (h + 200) % 300)
    return "".join(f"{max(0, min(abs(c - 150), 100)) + 155:02x}" for c in channels)


def node_label(node: str, membership: dict[str, set[str]]) -> list[str]:
    """Return the label lines: the name, then the absorbed modules if any."""
    lines = [node]
    members = membership.get(node)
    if members:
        names = sorted({bare_name(m) for m in members})
        lines.extend(textwrap.wrap(", ".join(names), LABEL_WIDTH))
    return lines


def node_colors(
    graph: DependencyGraph, changes: dict[str, int] | None = None
) -> dict[str, str]:
    """Colour by change count when *changes* is given, else by cycle."""
    if changes is not None:
        return {node: heat_color(changes.get(node)) for node in graph.nodes}
    colors: dict[str, str] = {}
    for scc in strongly_connected_components(graph.nodes, graph.successors):
        color = cluster_color(scc)
        for node in scc:
            colors[node] = color
    return colors


def to_graphml(
    graph: DependencyGraph,
    *,
    membership: dict[str, set[str]] | None = None,
    changes: dict[str, int] | None = None,
    graph_id: str = "G",
) -> str:
    """Serialize *graph* into a GraphML document."""
    membership = membership or {}
    colors = node_colors(graph, changes)

    nodes: list[str] = []
    for node in sorted(graph.nodes):
        lines = node_label(node, membership)
        nodes.append(
            _NODE.substitute(
                id=_attr(node),
                height=f"{20.0 * len(lines):.1f}",
                width=f"{8.0 * max(len(line) for line in lines):.1f}",
                color=colors[node],
                label=escape("\n".join(lines)),
            )
        )

    edges = [
        _EDGE.substitute(id=f"e{i}", source=_attr(source), target=_attr(target))
        for i, (source, target) in enumerate(graph.edges())
    ]

    template = Template(_TEMPLATE_PATH.read_text(encoding="utf-8"))
    return template.substitute(
        GRAPH_ID=_attr(graph_id),
        NODES="\n".join(nodes),
        EDGES="\n".join(edges),
    )


def render_graphml(
    graph: DependencyGraph,
    output_path: Path,
    *,
    membership: dict[str, set[str]] | None = None,
    changes: dict[str, int] | None = None,
) -> None:
    """Write the GraphML visualization to *output_path*."""
    document = to_graphml(graph, membership=membership, changes=changes)
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(document, encoding="utf-8")
