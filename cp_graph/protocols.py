from typing import Any, Protocol, runtime_checkable

from cp_graph.models import APIResource, ResourceDescriptor


@runtime_checkable
class ClusterClientProtocol(Protocol):
    """
    Operations the resolution engine needs from a cluster connection.

    Implementations raise the exceptions from :mod:`cp_graph.exceptions`:
    ``ScopeDeterminationError`` when discovery fails, ``ObjectNotFoundError``
    for missing objects and ``TransportError`` for connectivity or
    authorization problems.

    Example:
        >>> class MyClient:
        ...     async def get_api_resources(self): ...
        ...     async def get_object(self, descriptor, name, namespace): ...
        ...     async def list_events(self, namespace, field_selector): ...
        >>> isinstance(MyClient(), ClusterClientProtocol)
        True
    """

    async def get_api_resources(self) -> list[APIResource]:
        """
        Return the discovery document: every servable resource type.

        Returns:
            List of API resources using each group's preferred version
        """
        ...

    async def get_object(
        self,
        descriptor: ResourceDescriptor,
        name: str,
        namespace: str,
    ) -> dict[str, Any]:
        """
        Read a single object.

        Args:
            descriptor: Resolved REST resource
            name: Object name
            namespace: Namespace ("" for cluster-scoped resources)

        Returns:
            The object as a plain nested dictionary
        """
        ...

    async def list_events(
        self,
        namespace: str,
        field_selector: str,
    ) -> list[dict[str, Any]]:
        """
        List events matching a field selector.

        Args:
            namespace: Namespace to search, "" for all namespaces
            field_selector: Kubernetes field selector string

        Returns:
            Events as plain dictionaries, in server order
        """
        ...
