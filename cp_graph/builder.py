import asyncio
import logging
from typing import Any

from cp_graph.events import EventCorrelator
from cp_graph.exceptions import (
    BuildError,
    CPGraphError,
    CyclicReferenceError,
    MalformedReferenceError,
)
from cp_graph.fetcher import ObjectFetcher
from cp_graph.models import (
    BuildOptions,
    ResourceIdentifier,
    ResourceNode,
    ResourceReference,
)
from cp_graph.protocols import ClusterClientProtocol
from cp_graph.references import extract_references
from cp_graph.resolver import TypeResolver, parse_type_argument

logger = logging.getLogger(__name__)

NodeKey = tuple[str, str, str, str, str]


class GraphBuilder:
    """
    Builds the tree of resources referenced from a claim or composite.

    The GraphBuilder orchestrates the whole build:
    - Resolving each kind to a REST resource and its scope
    - Fetching every object and its latest event
    - Following spec.resourceRef / spec.resourceRefs recursively
    - Passing the namespace down to namespaced children

    Key features:
    - One discovery lookup per builder
    - Sibling references fetched concurrently, kept in declaration order
    - Failed children recorded on the tree instead of aborting the build
      (unless ``fail_fast`` is set)
    - Cyclic references detected along the ancestor chain

    Example:
        >>> from cp_graph import GraphBuilder, KubernetesAdapter, BuildOptions
        >>> client = KubernetesAdapter()
        >>> builder = GraphBuilder(client, BuildOptions(max_workers=8))
        >>> root = await builder.build("objectstorage", "my-object-storage", "team-a")
        >>> [child.kind for child in root.children]
        ['XObjectStorage']
    """

    def __init__(
        self,
        client: ClusterClientProtocol,
        options: BuildOptions | None = None,
        resolver: TypeResolver | None = None,
    ):
        """
        Initialize the graph builder.

        Args:
            client: Cluster client implementation
            options: Build options (defaults if None)
            resolver: Optional type resolver, e.g. one with a preloaded
                discovery document
        """
        self.client = client
        self.options = options or BuildOptions()
        self.resolver = resolver or TypeResolver(client)
        self.fetcher = ObjectFetcher(client, self.resolver)
        self.events = EventCorrelator(client, strict_recency=self.options.strict_event_recency)

        self._semaphore: asyncio.Semaphore | None = None
        self._stats: dict[str, int] = {}
        self._reset_stats()

    async def build(self, kind: str, name: str, namespace: str = "") -> ResourceNode:
        """
        Build the tree rooted at a resource.

        Args:
            kind: TYPE[.GROUP][/VERSION], e.g. "xobjectstorage.my-fqdn.cloud"
            name: Root object name
            namespace: Namespace of the root, ``options.default_namespace`` if empty

        Returns:
            Root node with all referenced children

        Raises:
            ResolutionError: The root type is unknown
            ObjectNotFoundError: The root object does not exist
            TransportError: The API could not be reached
            MalformedReferenceError: The root's reference fields are malformed
            BuildError: A child failed and ``fail_fast`` is set
        """
        kind, group, api_version = parse_type_argument(kind)
        return await self.build_from_resource(
            ResourceIdentifier(
                kind=kind,
                name=name,
                namespace=namespace or None,
                group=group,
                api_version=api_version,
            )
        )

    async def build_from_resource(self, resource_id: ResourceIdentifier) -> ResourceNode:
        self._reset_stats()
        self._semaphore = asyncio.Semaphore(self.options.max_workers)

        namespace = resource_id.namespace or self.options.default_namespace
        root = await self._build_node(
            kind=resource_id.kind,
            group=resource_id.group,
            api_version=resource_id.api_version,
            name=resource_id.name,
            namespace=namespace,
            ancestors=(),
            path=(),
        )

        logger.info(
            f"Built tree for {root} with {self._stats['nodes']} nodes "
            f"({self._stats['errors']} errored branches)"
        )
        return root

    async def _build_node(
        self,
        kind: str,
        group: str,
        api_version: str,
        name: str,
        namespace: str,
        ancestors: tuple[NodeKey, ...],
        path: tuple[str, ...],
    ) -> ResourceNode:
        """
        Fetch one resource and recursively expand its references.

        Args:
            kind: Kind or alias
            group: API group
            api_version: apiVersion from the reference, may be ""
            name: Object name
            namespace: Namespace context inherited from the parent
            ancestors: Keys of all ancestors, for cycle detection
            path: Node ids of all ancestors, for error reporting
        """
        descriptor, namespaced = await self.resolver.resolve(kind, group, api_version)
        object_namespace = namespace if namespaced else ""

        key: NodeKey = (
            descriptor.kind,
            descriptor.group,
            descriptor.version,
            object_namespace,
            name,
        )
        node_id = f"{descriptor.kind}:{object_namespace or 'cluster'}:{name}"
        if key in ancestors:
            raise CyclicReferenceError(node_id, [*path, node_id])

        assert self._semaphore is not None
        async with self._semaphore:
            obj = await self.fetcher.fetch_resolved(descriptor, name, object_namespace)
            self._stats["object_fetches"] += 1

            latest_event = ""
            if self.options.include_events:
                latest_event = await self.events.latest_event(
                    name,
                    obj.get("kind") or descriptor.kind,
                    obj.get("apiVersion") or descriptor.api_version,
                    object_namespace,
                )
                self._stats["event_lookups"] += 1

        self._stats["nodes"] += 1
        node_path = (*path, node_id)

        try:
            references = extract_references(obj)
        except MalformedReferenceError as e:
            if not path or self.options.fail_fast:
                raise
            logger.warning(f"Cannot expand {node_id}: {e.message}")
            self._stats["errors"] += 1
            return ResourceNode.from_object(obj, descriptor, latest_event).model_copy(
                update={"error": e.message}
            )

        node = ResourceNode.from_object(obj, descriptor, latest_event)
        logger.debug(f"Fetched {node_id} with {len(references)} references")

        # Cluster-scoped parents pass on the namespace they inherited
        child_namespace = object_namespace or namespace
        children = await asyncio.gather(
            *(
                self._build_child(reference, child_namespace, (*ancestors, key), node_path)
                for reference in references
            )
        )
        for child in children:
            node.add_child(child)

        return node

    async def _build_child(
        self,
        reference: ResourceReference,
        namespace: str,
        ancestors: tuple[NodeKey, ...],
        path: tuple[str, ...],
    ) -> ResourceNode:
        # Unresolvable types keep the inherited namespace
        child_namespace = namespace
        try:
            _, namespaced = await self.resolver.resolve(
                reference.kind, reference.group, reference.api_version
            )
            if not namespaced:
                child_namespace = ""
            return await self._build_node(
                kind=reference.kind,
                group=reference.group,
                api_version=reference.api_version,
                name=reference.name,
                namespace=namespace,
                ancestors=ancestors,
                path=path,
            )
        except BuildError:
            raise
        except CPGraphError as e:
            child_id = f"{reference.kind}:{child_namespace or 'cluster'}:{reference.name}"
            if self.options.fail_fast:
                raise BuildError([*path, child_id], e) from e

            logger.warning(f"Skipping {child_id} referenced by {path[-1]}: {e.message}")
            self._stats["errors"] += 1
            return ResourceNode.errored(reference, child_namespace, e.message)

    def _reset_stats(self) -> None:
        self._stats = {"nodes": 0, "errors": 0, "object_fetches": 0, "event_lookups": 0}

    def get_build_stats(self) -> dict[str, Any]:
        """
        Get statistics about the last build.

        Returns:
            Dictionary with node, error, fetch and event lookup counts
        """
        return self._stats.copy()
