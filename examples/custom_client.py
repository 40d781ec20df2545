"""Example: Custom cluster client with rate limiting."""

import asyncio
from typing import Any

from cp_graph import APIResource, GraphBuilder, KubernetesAdapter, ResourceDescriptor


class RateLimitedClusterClient:
    """Cluster client with rate limiting."""

    def __init__(self, upstream: KubernetesAdapter, requests_per_second: float = 10.0):
        """
        Initialize rate-limited client.

        Args:
            upstream: Upstream cluster client
            requests_per_second: Maximum requests per second
        """
        self.upstream = upstream
        self.min_interval = 1.0 / requests_per_second
        self.last_request_time = 0.0
        self.request_count = 0
        self._lock = asyncio.Lock()

    async def _rate_limit(self) -> None:
        async with self._lock:
            current_time = asyncio.get_running_loop().time()
            time_since_last = current_time - self.last_request_time

            if time_since_last < self.min_interval:
                await asyncio.sleep(self.min_interval - time_since_last)

            self.last_request_time = asyncio.get_running_loop().time()
            self.request_count += 1

    async def get_api_resources(self) -> list[APIResource]:
        await self._rate_limit()
        return await self.upstream.get_api_resources()

    async def get_object(
        self, descriptor: ResourceDescriptor, name: str, namespace: str
    ) -> dict[str, Any]:
        await self._rate_limit()
        return await self.upstream.get_object(descriptor, name, namespace)

    async def list_events(self, namespace: str, field_selector: str) -> list[dict[str, Any]]:
        await self._rate_limit()
        return await self.upstream.list_events(namespace, field_selector)


async def main():
    """Demonstrate custom client with rate limiting."""
    client = RateLimitedClusterClient(KubernetesAdapter(), requests_per_second=5.0)
    builder = GraphBuilder(client)

    print("Building tree with rate-limited client...")
    print("Rate limit: 5 requests/second\n")

    root = await builder.build("objectstorage", "my-object-storage", "default")

    print(f"Nodes: {root.count_nodes()}")
    print(f"Total requests: {client.request_count}")


if __name__ == "__main__":
    asyncio.run(main())
