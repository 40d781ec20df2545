"""Basic usage example for cp-graph."""

import asyncio

from cp_graph import BuildOptions, GraphBuilder, KubernetesAdapter, to_networkx


async def main():
    """Build and explore the resource tree behind a claim."""
    client = KubernetesAdapter()
    builder = GraphBuilder(client, BuildOptions(max_workers=8))

    print("Building tree from ObjectStorage claim...")
    root = await builder.build("objectstorage", "my-object-storage", "default")

    print("\nTree Statistics:")
    print(f"  Nodes: {root.count_nodes()}")
    print(f"  Depth: {root.depth()}")

    print("\nResources:")
    for node in root.walk():
        synced = node.get_condition_status("Synced") or "-"
        ready = node.get_condition_status("Ready") or "-"
        print(f"  {node} synced={synced} ready={ready}")

    graph = to_networkx(root)
    print("\nRelationships:")
    for source, target in graph.edges():
        print(f"  {source} --> {target}")

    stats = builder.get_build_stats()
    print("\nBuild Statistics:")
    print(f"  Object fetches: {stats['object_fetches']}")
    print(f"  Event lookups: {stats['event_lookups']}")
    print(f"  Errored branches: {stats['errors']}")


if __name__ == "__main__":
    asyncio.run(main())
