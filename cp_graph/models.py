import copy
from collections.abc import Iterator
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

HEALTH_CONDITIONS = ("Synced", "Ready")


def split_api_version(api_version: str) -> tuple[str, str]:
    """
    Split an apiVersion string into (group, version).

    Args:
        api_version: "group/version", "version" or ""

    Returns:
        Tuple of group ("" for the core group) and version

    Example:
        >>> split_api_version("s3.aws/v1")
        ('s3.aws', 'v1')
        >>> split_api_version("v1")
        ('', 'v1')
    """
    if not api_version:
        return "", ""
    if "/" in api_version:
        group, _, version = api_version.partition("/")
        return group, version
    return "", api_version


def join_api_version(group: str, version: str) -> str:
    if not group:
        return version
    if not version:
        return group
    return f"{group}/{version}"


class ResourceIdentifier(BaseModel):
    """Identifies a resource requested by a caller."""

    model_config = ConfigDict(frozen=True)

    kind: str = Field(..., min_length=1, description="Kind, plural or short name")
    name: str = Field(..., min_length=1)
    namespace: str | None = None
    group: str = ""
    api_version: str = ""

    def __str__(self) -> str:
        kind = f"{self.kind}.{self.group}" if self.group else self.kind
        if self.namespace:
            return f"{kind}/{self.name} (ns: {self.namespace})"
        return f"{kind}/{self.name}"


class ResourceReference(BaseModel):
    """A single entry of spec.resourceRef / spec.resourceRefs."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    name: str = Field(..., min_length=1)
    kind: str = Field(..., min_length=1)
    api_version: str = Field(..., min_length=1, alias="apiVersion")

    @property
    def group(self) -> str:
        return split_api_version(self.api_version)[0]

    @property
    def version(self) -> str:
        return split_api_version(self.api_version)[1]

    def __str__(self) -> str:
        return f"{self.kind}/{self.name} ({self.api_version})"


class APIResource(BaseModel):
    """One resource type from the discovery document."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(..., description="Plural resource name")
    singular_name: str = ""
    kind: str
    group: str = ""
    version: str
    namespaced: bool
    short_names: tuple[str, ...] = ()

    @property
    def group_version(self) -> str:
        return join_api_version(self.group, self.version)

    def matches(self, name: str) -> bool:
        """Check whether a kind, plural, singular or short name refers to this type."""
        name = name.lower()
        return (
            name == self.name
            or name == self.singular_name
            or name == self.kind.lower()
            or name in self.short_names
        )


class ResourceDescriptor(BaseModel):
    """A concrete REST resource (group, version, plural) plus its scope."""

    model_config = ConfigDict(frozen=True)

    group: str = ""
    version: str
    resource: str
    kind: str
    namespaced: bool

    @property
    def api_version(self) -> str:
        return join_api_version(self.group, self.version)

    def object_path(self, name: str, namespace: str = "") -> str:
        """
        Build the REST path of a single object.

        Args:
            name: Object name
            namespace: Namespace, ignored for cluster-scoped resources

        Returns:
            Path such as /apis/s3.aws/v1/buckets/bucket-1
        """
        prefix = f"/apis/{self.group}/{self.version}" if self.group else f"/api/{self.version}"
        if self.namespaced and namespace:
            return f"{prefix}/namespaces/{namespace}/{self.resource}/{name}"
        return f"{prefix}/{self.resource}/{name}"


class BuildOptions(BaseModel):
    """Options for building a resource tree."""

    default_namespace: str = Field(
        "default", description="Namespace used when the caller gives none"
    )
    max_workers: int = Field(4, ge=1, le=64, description="Concurrent fetches per build")
    fail_fast: bool = Field(
        False, description="Abort the whole build on the first child failure"
    )
    include_events: bool = Field(True, description="Look up the latest event per node")
    strict_event_recency: bool = Field(
        False, description="Sort events by timestamp instead of using server order"
    )


class ResourceNode(BaseModel):
    """
    A fetched resource and the resources it references.

    The node itself is immutable; ``children`` is only appended to while
    the tree is being built. Status is derived from ``raw_state`` on
    demand.
    """

    model_config = ConfigDict(frozen=True)

    kind: str
    api_group: str = ""
    api_version: str = ""
    name: str
    namespace: str = ""
    raw_state: dict[str, Any] = Field(default_factory=dict)
    latest_event: str = ""
    children: list["ResourceNode"] = Field(default_factory=list)
    error: str | None = None

    @classmethod
    def from_object(
        cls,
        obj: dict[str, Any],
        descriptor: ResourceDescriptor | None = None,
        latest_event: str = "",
    ) -> "ResourceNode":
        metadata = obj.get("metadata") or {}
        api_version = obj.get("apiVersion") or (descriptor.api_version if descriptor else "")
        return cls(
            kind=obj.get("kind") or (descriptor.kind if descriptor else ""),
            api_group=split_api_version(api_version)[0],
            api_version=api_version,
            name=metadata.get("name", ""),
            namespace=metadata.get("namespace") or "",
            raw_state=obj,
            latest_event=latest_event,
        )

    @classmethod
    def errored(
        cls, reference: ResourceReference, namespace: str, error: str
    ) -> "ResourceNode":
        """Placeholder for a referenced resource that could not be fetched."""
        return cls(
            kind=reference.kind,
            api_group=reference.group,
            api_version=reference.api_version,
            name=reference.name,
            namespace=namespace,
            error=error,
        )

    @property
    def node_id(self) -> str:
        return f"{self.kind}:{self.namespace or 'cluster'}:{self.name}"

    @property
    def is_errored(self) -> bool:
        return self.error is not None

    @property
    def conditions(self) -> list[dict[str, Any]]:
        status = self.raw_state.get("status") or {}
        if not isinstance(status, dict):
            return []
        conditions = status.get("conditions") or []
        return [c for c in conditions if isinstance(c, dict)]

    def get_condition(self, condition_type: str) -> dict[str, Any] | None:
        for condition in self.conditions:
            if condition.get("type") == condition_type:
                return condition
        return None

    def get_condition_status(self, condition_type: str) -> str:
        """Status ("True", "False", "Unknown") of a condition, "" when absent."""
        condition = self.get_condition(condition_type)
        if condition is None:
            return ""
        return str(condition.get("status", ""))

    def get_condition_message(self) -> str:
        """
        Message explaining the node's health.

        Prefers the message of a failing Synced/Ready condition, then the
        first condition carrying a message.
        """
        for condition_type in HEALTH_CONDITIONS:
            condition = self.get_condition(condition_type)
            if condition and condition.get("status") == "False" and condition.get("message"):
                return str(condition["message"])
        for condition in self.conditions:
            if condition.get("message"):
                return str(condition["message"])
        return ""

    def add_child(self, child: "ResourceNode") -> None:
        self.children.append(child)

    def without_children(self) -> "ResourceNode":
        """Copy of this node with an empty children list."""
        return self.model_copy(
            update={"children": [], "raw_state": copy.deepcopy(self.raw_state)}
        )

    def walk(self) -> Iterator["ResourceNode"]:
        """Yield this node and all descendants in pre-order."""
        yield self
        for child in self.children:
            yield from child.walk()

    def count_nodes(self) -> int:
        return sum(1 for _ in self.walk())

    def depth(self) -> int:
        """Number of levels below this node (0 for a leaf)."""
        if not self.children:
            return 0
        return 1 + max(child.depth() for child in self.children)

    def __str__(self) -> str:
        if self.namespace:
            return f"{self.kind}/{self.name} (ns: {self.namespace})"
        return f"{self.kind}/{self.name}"


class UnhealthyFinding(BaseModel):
    """An unhealthy node together with the node ids leading to it."""

    model_config = ConfigDict(frozen=True)

    node: ResourceNode
    path: tuple[str, ...]

    @property
    def parent_id(self) -> str | None:
        return self.path[-2] if len(self.path) > 1 else None
