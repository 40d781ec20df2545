import logging
from typing import Any

import networkx as nx

from cp_graph.models import ResourceNode

logger = logging.getLogger(__name__)


def node_attributes(node: ResourceNode) -> dict[str, Any]:
    """Flat attributes describing a node, as stored on graph nodes."""
    return {
        "kind": node.kind,
        "name": node.name,
        "namespace": node.namespace or None,
        "api_version": node.api_version,
        "synced": node.get_condition_status("Synced"),
        "ready": node.get_condition_status("Ready"),
        "message": node.get_condition_message(),
        "event": node.latest_event,
        "error": node.error,
    }


def to_networkx(root: ResourceNode) -> nx.DiGraph:
    """
    Convert a resource tree into a directed graph.

    Node ids use the kind:namespace:name format ("cluster" for
    cluster-scoped resources); edges point from parent to child.

    Args:
        root: Root of a resource tree

    Returns:
        NetworkX directed graph

    Example:
        >>> graph = to_networkx(root)
        >>> list(graph.successors("XObjectStorage:cluster:my-storage-x7k2"))
        ['Bucket:cluster:bucket-1']
    """
    graph = nx.DiGraph()

    def add(node: ResourceNode) -> None:
        if not graph.has_node(node.node_id):
            graph.add_node(node.node_id, **node_attributes(node))

        for child in node.children:
            add(child)
            if not graph.has_edge(node.node_id, child.node_id):
                graph.add_edge(node.node_id, child.node_id, relationship_type="resource_ref")

    add(root)
    logger.debug(
        f"Converted tree to graph with {graph.number_of_nodes()} nodes "
        f"and {graph.number_of_edges()} edges"
    )
    return graph


def tree_to_dict(node: ResourceNode, include_state: bool = False) -> dict[str, Any]:
    """Nested dictionary of a tree, suitable for JSON output."""
    data = node_attributes(node)
    data["node_id"] = node.node_id
    if include_state:
        data["raw_state"] = node.raw_state
    data["children"] = [tree_to_dict(child, include_state) for child in node.children]
    return data
