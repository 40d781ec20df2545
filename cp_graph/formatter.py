import json
import logging

from rich import box
from rich.console import Console
from rich.table import Table

from cp_graph.export import tree_to_dict
from cp_graph.models import ResourceNode, UnhealthyFinding
from cp_graph.visualization import get_field_value

logger = logging.getLogger(__name__)

DEFAULT_TABLE_FIELDS = ("parent", "kind", "name", "namespace", "apiversion", "synced", "ready")
DIAGNOSE_TABLE_FIELDS = ("kind", "apiversion", "name", "synced", "ready", "message", "event")

HEADERS = {
    "parent": "PARENT",
    "name": "NAME",
    "kind": "KIND",
    "namespace": "NAMESPACE",
    "apiversion": "API VERSION",
    "synced": "SYNCED",
    "ready": "READY",
    "message": "MESSAGE",
    "event": "EVENT",
}


def build_resource_table(
    root: ResourceNode,
    fields: tuple[str, ...] | list[str] = DEFAULT_TABLE_FIELDS,
) -> Table:
    """
    Build a table with one row per node, in pre-order.

    Args:
        root: Root of the tree
        fields: Columns to show, see ``cp_graph.visualization.ALLOWED_FIELDS``

    Returns:
        rich Table
    """
    table = Table(show_header=True, header_style="bold magenta", box=box.ROUNDED)
    for field in fields:
        table.add_column(HEADERS[field], overflow="fold")

    def add_rows(node: ResourceNode, parent: ResourceNode | None) -> None:
        table.add_row(*(get_field_value(node, field, parent) for field in fields))
        for child in node.children:
            add_rows(child, node)

    add_rows(root, None)
    return table


def build_findings_table(
    findings: list[UnhealthyFinding],
    fields: tuple[str, ...] | list[str] = DIAGNOSE_TABLE_FIELDS,
) -> Table:
    """Table of unhealthy nodes with the path leading to each of them."""
    table = Table(show_header=True, header_style="bold magenta", box=box.ROUNDED)
    table.add_column("PATH", overflow="fold")
    for field in fields:
        if field != "parent":
            table.add_column(HEADERS[field], overflow="fold")

    for finding in findings:
        table.add_row(
            " -> ".join(finding.path[:-1]),
            *(get_field_value(finding.node, field) for field in fields if field != "parent"),
        )
    return table


def print_resource_table(
    root: ResourceNode,
    fields: tuple[str, ...] | list[str] = DEFAULT_TABLE_FIELDS,
    console: Console | None = None,
) -> None:
    console = console or Console()
    console.print(build_resource_table(root, fields))


def format_tree_output(
    root: ResourceNode,
    format_type: str = "json",
    include_state: bool = False,
) -> str:
    """
    Format a tree as text.

    Args:
        root: Root of the tree
        format_type: "json" (nested tree) or "minimal" (flat list of
            kind/name/namespace)
        include_state: Include the raw object state in JSON output

    Returns:
        Formatted string

    Raises:
        ValueError: Unknown format type
    """
    if format_type == "json":
        return json.dumps(tree_to_dict(root, include_state), indent=2, default=str)

    if format_type == "minimal":
        nodes = [
            {"kind": node.kind, "name": node.name, "namespace": node.namespace}
            for node in root.walk()
        ]
        return json.dumps({"nodes": nodes}, indent=2)

    raise ValueError(f"Unknown format type: {format_type}")
