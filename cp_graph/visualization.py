import logging

import pydot

from cp_graph.models import HEALTH_CONDITIONS, ResourceNode

logger = logging.getLogger(__name__)

ALLOWED_FIELDS = (
    "parent",
    "name",
    "kind",
    "namespace",
    "apiversion",
    "synced",
    "ready",
    "message",
    "event",
)

DEFAULT_GRAPH_FIELDS = ("kind", "name", "synced", "ready")

STATUS_COLORS = {
    "healthy": "#90EE90",  # Light green
    "unhealthy": "#F08080",  # Light coral
    "unknown": "#D3D3D3",  # Light gray
    "errored": "#FFA500",  # Orange
}


def get_field_value(node: ResourceNode, field: str, parent: ResourceNode | None = None) -> str:
    """
    Value of a display field for a node.

    Args:
        node: Resource node
        field: One of ALLOWED_FIELDS
        parent: Parent node, used by the "parent" field

    Raises:
        ValueError: Unknown field
    """
    if field == "parent":
        return parent.kind if parent else ""
    if field == "name":
        return node.name
    if field == "kind":
        return node.kind
    if field == "namespace":
        return node.namespace
    if field == "apiversion":
        return node.api_version
    if field == "synced":
        return node.get_condition_status("Synced")
    if field == "ready":
        return node.get_condition_status("Ready")
    if field == "message":
        return node.error or node.get_condition_message()
    if field == "event":
        return node.latest_event
    raise ValueError(f"Unknown field: {field}")


def get_graph_node_id(node: ResourceNode) -> str:
    """
    Graph node id "Kind-name", or "Kind-namespace-name" for namespaced objects.

    Long names keep their first and last 12 chars. A resource referenced from
    two branches maps to one graph node.
    """
    name = node.name
    if len(name) > 24:
        name = name[:12] + "..." + name[-12:]
    if node.namespace:
        return f"{node.kind}-{node.namespace}-{name}"
    return f"{node.kind}-{name}"


def format_node_label(node: ResourceNode, fields: tuple[str, ...] | list[str]) -> str:
    """One "field: value" line per requested field ("parent" is skipped)."""
    return "\n".join(
        f"{field}: {get_field_value(node, field)}" for field in fields if field != "parent"
    )


def get_health_state(node: ResourceNode) -> str:
    if node.is_errored:
        return "errored"
    statuses = [node.get_condition_status(c) for c in HEALTH_CONDITIONS]
    if "False" in statuses:
        return "unhealthy"
    if statuses == ["True", "True"]:
        return "healthy"
    return "unknown"


def export_to_dot(
    root: ResourceNode,
    output_file: str,
    fields: tuple[str, ...] | list[str] = DEFAULT_GRAPH_FIELDS,
) -> None:
    """
    Export a resource tree to Graphviz DOT format.

    Args:
        root: Root of the tree
        output_file: Path to output DOT file
        fields: Fields shown in each node label

    Example:
        >>> export_to_dot(root, "claim.dot")
        >>> # Then: dot -Tpng claim.dot -o claim.png
    """
    pydot_graph = pydot.Dot(graph_type="digraph", rankdir="TB")

    def add(node: ResourceNode) -> pydot.Node:
        dot_node = pydot.Node(
            get_graph_node_id(node),
            label=format_node_label(node, fields).replace("\n", "\\n"),
            shape="box",
            style="filled,rounded",
            fillcolor=STATUS_COLORS[get_health_state(node)],
            penwidth="2",
        )
        pydot_graph.add_node(dot_node)
        for child in node.children:
            child_node = add(child)
            pydot_graph.add_edge(pydot.Edge(dot_node.get_name(), child_node.get_name()))
        return dot_node

    add(root)

    try:
        pydot_graph.write(output_file)
    except OSError as e:
        logger.error(f"Error exporting to DOT format: {e}")
        raise

    logger.info(f"Exported tree to {output_file}")
