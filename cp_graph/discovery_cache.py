"""Disk cache for discovery documents, one file per API server."""

import hashlib
import json
import logging
import time
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from cp_graph.models import APIResource

logger = logging.getLogger(__name__)

_resources_adapter = TypeAdapter(list[APIResource])


class DiscoveryCache:
    """
    Stores the discovery document on disk with a freshness window.

    Example:
        >>> cache = DiscoveryCache(Path("~/.kube/cache/discovery").expanduser(), ttl=600)
        >>> resources = cache.load("https://10.0.0.1:6443")
        >>> if resources is None:
        ...     resources = fetch_from_server()
        ...     cache.store("https://10.0.0.1:6443", resources)
    """

    def __init__(self, directory: Path, ttl: int = 600):
        self.directory = Path(directory)
        self.ttl = ttl

    def path_for(self, host: str) -> Path:
        digest = hashlib.sha256(host.encode()).hexdigest()[:16]
        return self.directory / digest / "serverresources.json"

    def load(self, host: str, now: float | None = None) -> list[APIResource] | None:
        """
        Load a cached document.

        Returns:
            Cached resources, or None when missing, stale or unreadable
        """
        if self.ttl <= 0:
            return None

        path = self.path_for(host)
        if not path.exists():
            return None

        try:
            data = json.loads(path.read_text())
            age = (now if now is not None else time.time()) - float(data["fetched_at"])
            if age > self.ttl:
                logger.debug(f"Discovery cache for {host} is stale ({age:.0f}s old)")
                return None
            resources = _resources_adapter.validate_python(data["resources"])
        except (OSError, ValueError, KeyError, TypeError, ValidationError) as e:
            logger.debug(f"Ignoring unreadable discovery cache {path}: {e}")
            return None

        logger.debug(f"Using cached discovery document for {host} ({len(resources)} types)")
        return resources

    def store(self, host: str, resources: list[APIResource], now: float | None = None) -> None:
        if self.ttl <= 0:
            return

        path = self.path_for(host)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            payload = {
                "host": host,
                "fetched_at": now if now is not None else time.time(),
                "resources": _resources_adapter.dump_python(resources, mode="json"),
            }
            path.write_text(json.dumps(payload))
        except OSError as e:
            logger.warning(f"Could not write discovery cache {path}: {e}")
