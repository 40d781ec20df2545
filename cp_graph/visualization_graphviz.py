"""Graphviz rendering of resource trees."""

import logging
from pathlib import Path
from typing import Any

from cp_graph.models import ResourceNode
from cp_graph.visualization import (
    DEFAULT_GRAPH_FIELDS,
    STATUS_COLORS,
    format_node_label,
    get_graph_node_id,
    get_health_state,
)

logger = logging.getLogger(__name__)


def draw_resource_tree(
    root: ResourceNode,
    output_file: str,
    fields: tuple[str, ...] | list[str] = DEFAULT_GRAPH_FIELDS,
    layout: str = "dot",
    title: str | None = None,
    **kwargs: Any,
) -> None:
    """
    Draw a resource tree using Graphviz.

    Args:
        root: Root of the tree
        output_file: Path to output image file; the format follows the
            extension (png when there is none)
        fields: Fields shown in each node label
        layout: Graphviz layout engine ('dot' draws the hierarchy top-down)
        title: Optional title for the graph
        **kwargs: Additional graph attributes (rankdir, ranksep, nodesep, dpi)

    Example:
        >>> draw_resource_tree(root, "claim.png", fields=["kind", "name", "ready"])
    """
    try:
        import pygraphviz as pgv
    except ImportError:
        logger.error(
            "pygraphviz not installed. Install with: pip install 'cp-graph[graphviz]'\n"
            "Note: Requires graphviz system package. On macOS: brew install graphviz"
        )
        raise

    agraph = pgv.AGraph(directed=False, strict=False)

    agraph.graph_attr.update(
        {
            "rankdir": kwargs.get("rankdir", "TB"),
            "ranksep": kwargs.get("ranksep", "0.8"),
            "nodesep": kwargs.get("nodesep", "0.5"),
            "dpi": str(kwargs.get("dpi", 150)),
            "bgcolor": "white",
            "fontname": "Arial",
        }
    )

    if title:
        agraph.graph_attr["label"] = title
        agraph.graph_attr["labelloc"] = "t"
        agraph.graph_attr["fontsize"] = "18"

    agraph.node_attr.update(
        {
            "shape": "box",
            "style": "filled,rounded",
            "fontname": "Arial",
            "fontsize": "10",
            "margin": "0.2,0.1",
            "penwidth": "2",
        }
    )
    agraph.edge_attr.update({"color": "#666666"})

    def add(node: ResourceNode) -> str:
        node_id = get_graph_node_id(node)
        agraph.add_node(
            node_id,
            label=format_node_label(node, fields),
            fillcolor=STATUS_COLORS[get_health_state(node)],
            color="#333333",
        )
        for child in node.children:
            agraph.add_edge(node_id, add(child))
        return node_id

    add(root)
    agraph.layout(prog=layout)

    output_path = Path(output_file)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    output_format = output_path.suffix.lstrip(".") or "png"
    agraph.draw(str(output_path), format=output_format)
    logger.info(f"Rendered tree of {root.count_nodes()} resources to {output_file}")
