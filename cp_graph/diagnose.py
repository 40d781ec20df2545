"""
Find unhealthy resources in a built tree.

A node is unhealthy when its Synced or Ready condition reports "False".
A missing condition is not a failure.
"""

import logging

from cp_graph.models import HEALTH_CONDITIONS, ResourceNode, UnhealthyFinding

logger = logging.getLogger(__name__)


def is_unhealthy(node: ResourceNode) -> bool:
    return any(node.get_condition_status(c) == "False" for c in HEALTH_CONDITIONS)


def diagnose(root: ResourceNode) -> ResourceNode | None:
    """
    Collect unhealthy nodes into a two-level tree.

    Nodes are visited in pre-order. The first unhealthy node becomes the
    root of the result; every later unhealthy node is attached directly
    below it, whatever its position in the original tree. Returned nodes
    are copies without their original children.

    Args:
        root: Root of a built tree, not modified

    Returns:
        The promoted node, or None when nothing is unhealthy

    Example:
        >>> result = diagnose(root)
        >>> if result is None:
        ...     print("no issues found")
    """
    promoted: ResourceNode | None = None

    for node in root.walk():
        if not is_unhealthy(node):
            continue
        if promoted is None:
            promoted = node.without_children()
        else:
            promoted.add_child(node.without_children())

    if promoted is None:
        logger.debug(f"No unhealthy resources below {root}")
    return promoted


def find_unhealthy(root: ResourceNode) -> list[UnhealthyFinding]:
    """
    List every unhealthy node with the node ids leading to it.

    Unlike :func:`diagnose` the true lineage of each node is kept.

    Args:
        root: Root of a built tree

    Returns:
        Findings in pre-order, empty when everything is healthy
    """
    findings: list[UnhealthyFinding] = []

    def visit(node: ResourceNode, path: tuple[str, ...]) -> None:
        path = (*path, node.node_id)
        if is_unhealthy(node):
            findings.append(UnhealthyFinding(node=node, path=path))
        for child in node.children:
            visit(child, path)

    visit(root, ())
    return findings


def find_errors(root: ResourceNode) -> list[ResourceNode]:
    """Nodes whose branch could not be expanded during the build."""
    return [node for node in root.walk() if node.is_errored]
