"""
cp-graph: resolve and diagnose the resource tree behind Crossplane claims.

Example:
    >>> import asyncio
    >>> from cp_graph import GraphBuilder, KubernetesAdapter, diagnose
    >>> builder = GraphBuilder(KubernetesAdapter())
    >>> root = asyncio.run(builder.build("objectstorage", "my-object-storage", "team-a"))
    >>> unhealthy = diagnose(root)
"""

from cp_graph.adapters import KubernetesAdapter
from cp_graph.builder import GraphBuilder
from cp_graph.config import Settings
from cp_graph.diagnose import diagnose, find_errors, find_unhealthy, is_unhealthy
from cp_graph.discovery_cache import DiscoveryCache
from cp_graph.events import EventCorrelator
from cp_graph.exceptions import (
    BuildError,
    ConfigurationError,
    CPGraphError,
    CyclicReferenceError,
    MalformedReferenceError,
    ObjectNotFoundError,
    ResolutionError,
    ResourceNotFoundError,
    ScopeDeterminationError,
    TransportError,
)
from cp_graph.export import to_networkx, tree_to_dict
from cp_graph.fetcher import ObjectFetcher
from cp_graph.formatter import build_resource_table, format_tree_output, print_resource_table
from cp_graph.models import (
    APIResource,
    BuildOptions,
    ResourceDescriptor,
    ResourceIdentifier,
    ResourceNode,
    ResourceReference,
    UnhealthyFinding,
)
from cp_graph.protocols import ClusterClientProtocol
from cp_graph.references import extract_references
from cp_graph.resolver import TypeResolver, parse_type_argument

__version__ = "0.1.0"

__all__ = [
    "APIResource",
    "BuildError",
    "BuildOptions",
    "ClusterClientProtocol",
    "ConfigurationError",
    "CPGraphError",
    "CyclicReferenceError",
    "DiscoveryCache",
    "EventCorrelator",
    "GraphBuilder",
    "KubernetesAdapter",
    "MalformedReferenceError",
    "ObjectFetcher",
    "ObjectNotFoundError",
    "ResolutionError",
    "ResourceDescriptor",
    "ResourceIdentifier",
    "ResourceNode",
    "ResourceNotFoundError",
    "ResourceReference",
    "ScopeDeterminationError",
    "Settings",
    "TransportError",
    "TypeResolver",
    "UnhealthyFinding",
    "build_resource_table",
    "diagnose",
    "extract_references",
    "find_errors",
    "find_unhealthy",
    "format_tree_output",
    "is_unhealthy",
    "parse_type_argument",
    "print_resource_table",
    "to_networkx",
    "tree_to_dict",
]
