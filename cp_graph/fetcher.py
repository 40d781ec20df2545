import logging
from typing import Any

from cp_graph.exceptions import ResolutionError
from cp_graph.models import ResourceDescriptor
from cp_graph.protocols import ClusterClientProtocol
from cp_graph.resolver import TypeResolver

logger = logging.getLogger(__name__)


class ObjectFetcher:
    """
    Reads live objects by name through a :class:`TypeResolver`.

    Errors are left typed so callers can tell them apart:
    ``ResolutionError`` (unknown type), ``ObjectNotFoundError`` and
    ``TransportError``.
    """

    def __init__(self, client: ClusterClientProtocol, resolver: TypeResolver | None = None):
        self.client = client
        self.resolver = resolver or TypeResolver(client)
        self.fetch_count = 0

    async def fetch(
        self,
        name: str,
        kind: str,
        group: str = "",
        api_version: str = "",
        namespace: str = "",
    ) -> dict[str, Any]:
        """
        Resolve the type and read one object.

        Args:
            name: Object name
            kind: Kind or alias
            group: API group
            api_version: "group/version" or "version"
            namespace: Required for namespaced types, ignored otherwise

        Returns:
            The object as a nested dictionary
        """
        descriptor, _ = await self.resolver.resolve(kind, group, api_version)
        return await self.fetch_resolved(descriptor, name, namespace)

    async def fetch_resolved(
        self,
        descriptor: ResourceDescriptor,
        name: str,
        namespace: str = "",
    ) -> dict[str, Any]:
        if descriptor.namespaced and not namespace:
            raise ResolutionError(
                f"{descriptor.kind} is namespaced but no namespace was given for {name!r}",
                {"kind": descriptor.kind, "name": name},
            )
        if not descriptor.namespaced:
            namespace = ""

        self.fetch_count += 1
        logger.debug(f"GET {descriptor.object_path(name, namespace)}")
        return await self.client.get_object(descriptor, name, namespace)
