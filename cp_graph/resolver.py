import logging

from cp_graph.exceptions import ResolutionError, ResourceNotFoundError
from cp_graph.models import APIResource, ResourceDescriptor, split_api_version
from cp_graph.protocols import ClusterClientProtocol

logger = logging.getLogger(__name__)


def parse_group_resource(value: str) -> tuple[str, str]:
    """
    Split "resource.group" into (resource, group).

    Example:
        >>> parse_group_resource("xstorages.example.org")
        ('xstorages', 'example.org')
        >>> parse_group_resource("Bucket")
        ('Bucket', '')
    """
    resource, _, group = value.partition(".")
    return resource, group


def parse_type_argument(value: str) -> tuple[str, str, str]:
    """
    Parse a TYPE[.GROUP][/VERSION] argument.

    Args:
        value: e.g. "xobjectstorage.my-fqdn.cloud/v1alpha1"

    Returns:
        Tuple of (kind, group, api_version); api_version is "group/version"
        when a version was given, otherwise ""

    Raises:
        ResolutionError: The argument has no type name, e.g. "/v1"

    Example:
        >>> parse_type_argument("xobjectstorage.my-fqdn.cloud/v1alpha1")
        ('xobjectstorage', 'my-fqdn.cloud', 'my-fqdn.cloud/v1alpha1')
    """
    type_part, _, version = value.partition("/")
    kind, group = parse_group_resource(type_part)
    if not kind:
        raise ResolutionError(f"invalid resource type {value!r}", {"type": value})
    api_version = f"{group}/{version}" if group and version else version
    return kind, group, api_version


class TypeResolver:
    """
    Maps (kind, group, apiVersion) to a REST resource and its scope.

    The discovery document is requested from the client the first time it
    is needed and kept for the lifetime of the resolver, so one resolver
    should be used per invocation.

    Example:
        >>> resolver = TypeResolver(client)
        >>> descriptor, namespaced = await resolver.resolve("Bucket", "", "s3.aws/v1")
        >>> descriptor.resource
        'buckets'
    """

    def __init__(self, client: ClusterClientProtocol):
        self.client = client
        self._resources: list[APIResource] | None = None

    async def get_api_resources(self) -> list[APIResource]:
        if self._resources is None:
            self._resources = await self.client.get_api_resources()
            logger.debug(f"Loaded discovery document with {len(self._resources)} resource types")
        return self._resources

    async def resolve(
        self,
        kind: str,
        group: str = "",
        api_version: str = "",
    ) -> tuple[ResourceDescriptor, bool]:
        """
        Resolve a kind (or plural, singular, short name) to a REST resource.

        Args:
            kind: Kind or alias, optionally "resource.group"
            group: API group, "" when unknown or core
            api_version: "group/version", or a bare "version" for the core
                group; "" leaves the group open

        Returns:
            Tuple of the resource descriptor and whether it is namespaced

        Raises:
            ResourceNotFoundError: No discovery entry matches
            ScopeDeterminationError: The discovery document could not be read
        """
        version_group, version = split_api_version(api_version)
        group = group or version_group
        # A bare "v1" apiVersion names the core group
        group_known = bool(group or api_version)

        if "." in kind and not group_known:
            kind, group = parse_group_resource(kind)
            group_known = True

        resources = await self.get_api_resources()
        candidates = [
            resource
            for resource in resources
            if (not group_known or resource.group == group) and resource.matches(kind)
        ]

        if not candidates:
            raise ResourceNotFoundError(kind, group)

        match = candidates[0]
        if version:
            match = next((c for c in candidates if c.version == version), match)

        groups = {c.group for c in candidates}
        if len(groups) > 1:
            logger.debug(
                f"Kind {kind!r} is served by several groups {sorted(groups)}, "
                f"using {match.group or 'core'}"
            )

        descriptor = ResourceDescriptor(
            group=match.group,
            version=version or match.version,
            resource=match.name,
            kind=match.kind,
            namespaced=match.namespaced,
        )
        logger.debug(
            f"Resolved {kind!r} (group={group!r}, apiVersion={api_version!r}) to "
            f"{descriptor.resource}.{descriptor.group or 'core'}/{descriptor.version} "
            f"(namespaced={descriptor.namespaced})"
        )
        return descriptor, descriptor.namespaced

    async def is_namespaced(self, kind: str, group: str = "", api_version: str = "") -> bool:
        _, namespaced = await self.resolve(kind, group, api_version)
        return namespaced
