"""Exceptions raised while resolving and building resource trees."""

from typing import Any


class CPGraphError(Exception):
    """Base exception for cp-graph."""

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(CPGraphError):
    """Raised when the cluster connection cannot be configured."""


class ResolutionError(CPGraphError):
    """Raised when a kind/group cannot be turned into a REST resource."""


class ResourceNotFoundError(ResolutionError):
    """Raised when no discovery entry matches the requested kind/group."""

    def __init__(self, kind: str, group: str = ""):
        self.kind = kind
        self.group = group
        target = f"{kind}.{group}" if group else kind
        super().__init__(
            f"the server doesn't have a resource type {target!r}",
            {"kind": kind, "group": group},
        )


class ScopeDeterminationError(CPGraphError):
    """Raised when the discovery document cannot be retrieved."""


class ObjectNotFoundError(CPGraphError):
    """Raised when the requested object does not exist."""

    def __init__(self, kind: str, name: str, namespace: str = ""):
        self.kind = kind
        self.name = name
        self.namespace = namespace
        location = f" in namespace {namespace!r}" if namespace else ""
        super().__init__(
            f"{kind} {name!r} not found{location}",
            {"kind": kind, "name": name, "namespace": namespace},
        )


class TransportError(CPGraphError):
    """Raised for connectivity, authentication and unexpected API failures."""

    def __init__(self, message: str, status: int | None = None):
        self.status = status
        super().__init__(message, {"status": status})


class MalformedReferenceError(CPGraphError):
    """Raised when a reference field exists but has the wrong shape."""

    def __init__(self, field_path: str, message: str, value: Any = None):
        self.field_path = field_path
        self.value = value
        super().__init__(f"malformed reference at {field_path}: {message}", {"value": value})


class CyclicReferenceError(CPGraphError):
    """Raised when a reference points back at one of its ancestors."""

    def __init__(self, node_id: str, path: list[str]):
        self.node_id = node_id
        self.path = path
        super().__init__(
            f"cyclic reference to {node_id} via {' -> '.join(path)}",
            {"node_id": node_id, "path": path},
        )


class BuildError(CPGraphError):
    """
    Raised when building a tree aborts because a child could not be expanded.

    Attributes:
        path: Node ids from the root down to the failing child
        cause: The underlying error
    """

    def __init__(self, path: list[str], cause: CPGraphError):
        self.path = path
        self.cause = cause
        super().__init__(
            f"failed to expand {path[-1]} (path: {' -> '.join(path)}): {cause.message}",
            {"path": path},
        )
