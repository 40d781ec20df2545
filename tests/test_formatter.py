"""Tests for cp_graph.formatter."""

import json

import pytest
from rich.console import Console

from cp_graph.diagnose import find_unhealthy
from cp_graph.formatter import (
    DEFAULT_TABLE_FIELDS,
    DIAGNOSE_TABLE_FIELDS,
    build_findings_table,
    build_resource_table,
    format_tree_output,
    print_resource_table,
)
from cp_graph.models import ResourceNode
from tests.conftest import HEALTHY, condition, make_object


@pytest.fixture
def tree():
    root = ResourceNode.from_object(
        make_object("XStore", "store", "example.org/v1", conditions=HEALTHY)
    )
    root.add_child(
        ResourceNode.from_object(
            make_object(
                "Bucket",
                "b1",
                "s3.aws/v1",
                conditions=[condition("Synced", "False", "denied"), condition("Ready", "True")],
            )
        )
    )
    root.add_child(ResourceNode.from_object(make_object("Bucket", "b2", "s3.aws/v1")))
    return root


def render(table):
    console = Console(width=200, record=True)
    console.print(table)
    return console.export_text()


def test_build_resource_table(tree):
    """Test one row per node with the default columns."""
    table = build_resource_table(tree)

    assert table.row_count == 3
    assert [column.header for column in table.columns] == [
        "PARENT",
        "KIND",
        "NAME",
        "NAMESPACE",
        "API VERSION",
        "SYNCED",
        "READY",
    ]
    assert len(table.columns) == len(DEFAULT_TABLE_FIELDS)


def test_resource_table_rows(tree):
    """Test rendered rows carry parent kinds and statuses."""
    output = render(build_resource_table(tree, ["parent", "name", "synced"]))

    assert "store" in output
    assert "XStore" in output
    assert "False" in output


def test_diagnose_table_columns(tree):
    table = build_resource_table(tree, DIAGNOSE_TABLE_FIELDS)

    assert [column.header for column in table.columns][-2:] == ["MESSAGE", "EVENT"]


def test_build_findings_table(tree):
    """Test the lineage table of unhealthy nodes."""
    table = build_findings_table(find_unhealthy(tree))

    assert table.row_count == 1
    assert table.columns[0].header == "PATH"
    output = render(table)
    assert "XStore:cluster:store" in output
    assert "denied" in output


def test_print_resource_table(tree):
    console = Console(width=200, record=True)

    print_resource_table(tree, ["kind", "name"], console=console)

    output = console.export_text()
    assert "b1" in output
    assert "b2" in output


def test_format_tree_output_json(tree):
    """Test nested JSON output."""
    data = json.loads(format_tree_output(tree, "json"))

    assert data["kind"] == "XStore"
    assert [child["name"] for child in data["children"]] == ["b1", "b2"]
    assert data["children"][0]["message"] == "denied"


def test_format_tree_output_minimal(tree):
    data = json.loads(format_tree_output(tree, "minimal"))

    assert data == {
        "nodes": [
            {"kind": "XStore", "name": "store", "namespace": ""},
            {"kind": "Bucket", "name": "b1", "namespace": ""},
            {"kind": "Bucket", "name": "b2", "namespace": ""},
        ]
    }


def test_format_tree_output_unknown(tree):
    with pytest.raises(ValueError, match="Unknown format type"):
        format_tree_output(tree, "yaml")
