"""Tests for cp_graph.discovery_cache."""

from cp_graph.discovery_cache import DiscoveryCache
from cp_graph.models import APIResource

HOST = "https://10.0.0.1:6443"

RESOURCES = [
    APIResource(
        name="configmaps",
        singular_name="configmap",
        kind="ConfigMap",
        version="v1",
        namespaced=True,
        short_names=("cm",),
    ),
    APIResource(
        name="buckets",
        singular_name="bucket",
        kind="Bucket",
        group="s3.aws",
        version="v1",
        namespaced=False,
    ),
]


def test_store_and_load(tmp_path):
    """Test a fresh cache entry is returned unchanged."""
    cache = DiscoveryCache(tmp_path, ttl=600)

    cache.store(HOST, RESOURCES, now=1000.0)

    assert cache.load(HOST, now=1300.0) == RESOURCES
    assert cache.path_for(HOST).exists()


def test_stale_entry_is_ignored(tmp_path):
    cache = DiscoveryCache(tmp_path, ttl=600)
    cache.store(HOST, RESOURCES, now=1000.0)

    assert cache.load(HOST, now=1600.0) == RESOURCES
    assert cache.load(HOST, now=1601.0) is None


def test_missing_entry(tmp_path):
    assert DiscoveryCache(tmp_path).load(HOST) is None


def test_hosts_are_cached_separately(tmp_path):
    cache = DiscoveryCache(tmp_path)
    cache.store(HOST, RESOURCES)

    assert cache.path_for(HOST) != cache.path_for("https://other:6443")
    assert cache.load("https://other:6443") is None


def test_zero_ttl_disables_cache(tmp_path):
    cache = DiscoveryCache(tmp_path, ttl=0)

    cache.store(HOST, RESOURCES)

    assert not cache.path_for(HOST).exists()
    assert cache.load(HOST) is None


def test_corrupt_entry_is_ignored(tmp_path):
    """Test that an unreadable cache file behaves like a miss."""
    cache = DiscoveryCache(tmp_path)
    path = cache.path_for(HOST)
    path.parent.mkdir(parents=True)

    path.write_text("{not json")
    assert cache.load(HOST) is None

    path.write_text('{"fetched_at": 1, "resources": [{"name": "x"}]}')
    assert cache.load(HOST, now=2.0) is None
