"""Shared test fixtures for cp-graph tests."""

from typing import Any

import pytest

from cp_graph.exceptions import ObjectNotFoundError
from cp_graph.models import APIResource, ResourceDescriptor


class MockClusterClient:
    """In-memory cluster client with API call statistics for testing."""

    def __init__(self, api_resources: list[APIResource]):
        self.api_resources = api_resources
        self.objects: dict[tuple[str, str, str, str], dict[str, Any]] = {}
        self.events: dict[tuple[str, str, str], list[dict[str, Any]]] = {}
        self.failures: dict[tuple[str, str], Exception] = {}
        self.event_queries: list[tuple[str, str]] = []
        self._api_call_stats = {
            "get_api_resources": 0,
            "get_object": 0,
            "list_events": 0,
            "total": 0,
        }

    def add_object(self, resource: str, obj: dict[str, Any], group: str = "") -> None:
        """Add an object, keyed by its group, plural resource, namespace and name."""
        metadata = obj.get("metadata", {})
        key = (group, resource, metadata.get("namespace", ""), metadata["name"])
        self.objects[key] = obj

    def add_event(self, namespace: str, kind: str, name: str, message: str, **fields: Any) -> None:
        self.events.setdefault((namespace, kind, name), []).append({"message": message, **fields})

    def fail_on(self, resource: str, name: str, error: Exception) -> None:
        self.failures[(resource, name)] = error

    def _count(self, call: str) -> None:
        self._api_call_stats[call] += 1
        self._api_call_stats["total"] += 1

    async def get_api_resources(self) -> list[APIResource]:
        self._count("get_api_resources")
        return list(self.api_resources)

    async def get_object(
        self, descriptor: ResourceDescriptor, name: str, namespace: str
    ) -> dict[str, Any]:
        self._count("get_object")
        if (descriptor.resource, name) in self.failures:
            raise self.failures[(descriptor.resource, name)]

        key = (descriptor.group, descriptor.resource, namespace, name)
        if key not in self.objects:
            raise ObjectNotFoundError(descriptor.kind, name, namespace)
        return self.objects[key]

    async def list_events(self, namespace: str, field_selector: str) -> list[dict[str, Any]]:
        self._count("list_events")
        self.event_queries.append((namespace, field_selector))

        selectors = dict(part.split("=", 1) for part in field_selector.split(","))
        name = selectors.get("involvedObject.name")
        kind = selectors.get("involvedObject.kind")
        if namespace:
            return list(self.events.get((namespace, kind, name), []))
        return [
            event
            for (_, ev_kind, ev_name), events in self.events.items()
            if ev_kind == kind and ev_name == name
            for event in events
        ]

    def get_api_call_stats(self) -> dict[str, int]:
        return self._api_call_stats.copy()


def make_object(
    kind: str,
    name: str,
    api_version: str,
    namespace: str | None = None,
    spec: dict[str, Any] | None = None,
    conditions: list[dict[str, Any]] | None = None,
) -> dict[str, Any]:
    """Build a minimal object document."""
    metadata: dict[str, Any] = {"name": name}
    if namespace:
        metadata["namespace"] = namespace
    obj: dict[str, Any] = {
        "apiVersion": api_version,
        "kind": kind,
        "metadata": metadata,
        "spec": spec or {},
    }
    if conditions is not None:
        obj["status"] = {"conditions": conditions}
    return obj


def ref(kind: str, name: str, api_version: str) -> dict[str, str]:
    return {"kind": kind, "name": name, "apiVersion": api_version}


def condition(condition_type: str, status: str, message: str = "") -> dict[str, str]:
    result = {"type": condition_type, "status": status}
    if message:
        result["message"] = message
    return result


HEALTHY = [condition("Synced", "True"), condition("Ready", "True")]


@pytest.fixture
def api_resources() -> list[APIResource]:
    """Discovery document of a cluster running Crossplane with an AWS provider."""
    return [
        APIResource(
            name="configmaps",
            singular_name="configmap",
            kind="ConfigMap",
            version="v1",
            namespaced=True,
            short_names=("cm",),
        ),
        APIResource(
            name="namespaces",
            singular_name="namespace",
            kind="Namespace",
            version="v1",
            namespaced=False,
            short_names=("ns",),
        ),
        APIResource(
            name="objectstorages",
            singular_name="objectstorage",
            kind="ObjectStorage",
            group="my-fqdn.cloud",
            version="v1alpha1",
            namespaced=True,
        ),
        APIResource(
            name="xobjectstorages",
            singular_name="xobjectstorage",
            kind="XObjectStorage",
            group="my-fqdn.cloud",
            version="v1alpha1",
            namespaced=False,
            short_names=("xos",),
        ),
        APIResource(
            name="buckets",
            singular_name="bucket",
            kind="Bucket",
            group="s3.aws",
            version="v1",
            namespaced=False,
        ),
        APIResource(
            name="bucketpolicies",
            singular_name="bucketpolicy",
            kind="BucketPolicy",
            group="s3.aws",
            version="v1",
            namespaced=False,
        ),
        APIResource(
            name="objects",
            singular_name="object",
            kind="Object",
            group="kubernetes.crossplane.io",
            version="v1alpha2",
            namespaced=False,
        ),
        APIResource(
            name="buckets",
            singular_name="bucket",
            kind="Bucket",
            group="storage.gcp",
            version="v1beta1",
            namespaced=False,
        ),
    ]


@pytest.fixture
def mock_client(api_resources) -> MockClusterClient:
    """Empty mock cluster with the test discovery document."""
    return MockClusterClient(api_resources)


@pytest.fixture
def storage_client(mock_client) -> MockClusterClient:
    """
    Claim -> composite -> two buckets, everything healthy.

    ObjectStorage (team-a) -> XObjectStorage -> [Bucket bucket-1, Bucket bucket-2]
    """
    mock_client.add_object(
        "objectstorages",
        make_object(
            "ObjectStorage",
            "my-storage",
            "my-fqdn.cloud/v1alpha1",
            namespace="team-a",
            spec={
                "resourceRef": ref(
                    "XObjectStorage", "my-storage-x7k2", "my-fqdn.cloud/v1alpha1"
                )
            },
            conditions=HEALTHY,
        ),
        group="my-fqdn.cloud",
    )
    mock_client.add_object(
        "xobjectstorages",
        make_object(
            "XObjectStorage",
            "my-storage-x7k2",
            "my-fqdn.cloud/v1alpha1",
            spec={
                "resourceRefs": [
                    ref("Bucket", "bucket-1", "s3.aws/v1"),
                    ref("Bucket", "bucket-2", "s3.aws/v1"),
                ]
            },
            conditions=HEALTHY,
        ),
        group="my-fqdn.cloud",
    )
    for name in ("bucket-1", "bucket-2"):
        mock_client.add_object(
            "buckets",
            make_object("Bucket", name, "s3.aws/v1", conditions=HEALTHY),
            group="s3.aws",
        )
    return mock_client
