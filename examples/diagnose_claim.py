"""Example: find unhealthy resources below a composite."""

import asyncio

from cp_graph import GraphBuilder, KubernetesAdapter, diagnose, find_errors, find_unhealthy
from cp_graph.formatter import DIAGNOSE_TABLE_FIELDS, print_resource_table


async def main():
    builder = GraphBuilder(KubernetesAdapter())
    root = await builder.build("xobjectstorage.my-fqdn.cloud", "my-object-storage-x7k2")

    for node in find_errors(root):
        print(f"Could not expand {node.node_id}: {node.error}")

    unhealthy = diagnose(root)
    if unhealthy is None:
        print(f"No issues found for resource {root.kind} {root.name}.")
        return

    print("Identified the following resources as potentially unhealthy.")
    print_resource_table(unhealthy, DIAGNOSE_TABLE_FIELDS)

    print("\nLineage:")
    for finding in find_unhealthy(root):
        print(f"  {' -> '.join(finding.path)}")
        print(f"    {finding.node.get_condition_message() or finding.node.latest_event}")


if __name__ == "__main__":
    asyncio.run(main())
