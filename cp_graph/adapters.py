import asyncio
import logging
from typing import Any

from kubernetes import client, config
from kubernetes.client.exceptions import ApiException
from kubernetes.config.config_exception import ConfigException
from urllib3.exceptions import HTTPError

from cp_graph.config import Settings
from cp_graph.discovery_cache import DiscoveryCache
from cp_graph.exceptions import (
    ConfigurationError,
    ObjectNotFoundError,
    ScopeDeterminationError,
    TransportError,
)
from cp_graph.models import APIResource, ResourceDescriptor

logger = logging.getLogger(__name__)


class KubernetesAdapter:
    """
    Cluster client backed by the official kubernetes Python client.

    Blocking client calls run in worker threads so several objects can be
    fetched at once.

    Example:
        >>> adapter = KubernetesAdapter(Settings(kubeconfig="~/.kube/config"))
        >>> resources = await adapter.get_api_resources()
    """

    def __init__(
        self,
        settings: Settings | None = None,
        api_client: client.ApiClient | None = None,
        discovery_cache: DiscoveryCache | None = None,
    ):
        """
        Initialize the adapter.

        Args:
            settings: Connection settings (environment defaults if None)
            api_client: Preconfigured API client, skips kubeconfig loading
            discovery_cache: Cache for the discovery document; built from
                settings when None
        """
        self.settings = settings or Settings()
        self.api_client = api_client or self._load_api_client()
        self.core_v1 = client.CoreV1Api(self.api_client)
        self.timeout = self.settings.request_timeout_seconds

        if discovery_cache is None:
            discovery_cache = DiscoveryCache(
                self.settings.discovery_cache_dir,
                ttl=self.settings.discovery_cache_ttl_seconds,
            )
        self.discovery_cache = discovery_cache

    def _load_api_client(self) -> client.ApiClient:
        try:
            api_client = config.new_client_from_config(
                config_file=self.settings.kubeconfig,
                context=self.settings.context,
            )
        except (ConfigException, OSError) as e:
            raise ConfigurationError(
                f"Cannot load kubeconfig {self.settings.resolve_kubeconfig()}: {e}"
            ) from e

        logger.debug(f"Loaded kubeconfig for {api_client.configuration.host}")
        return api_client

    @property
    def host(self) -> str:
        return str(self.api_client.configuration.host)

    def _get(self, path: str) -> Any:
        return self.api_client.call_api(
            path,
            "GET",
            header_params={"Accept": "application/json"},
            response_type="object",
            auth_settings=["BearerToken"],
            _return_http_data_only=True,
            _request_timeout=self.timeout,
        )

    async def get_api_resources(self) -> list[APIResource]:
        cached = self.discovery_cache.load(self.host)
        if cached is not None:
            return cached

        try:
            resources = await asyncio.to_thread(self._discover)
        except (ApiException, HTTPError) as e:
            raise ScopeDeterminationError(f"Failed to query API discovery: {e}") from e

        self.discovery_cache.store(self.host, resources)
        return resources

    def _discover(self) -> list[APIResource]:
        resources = _parse_resource_list(self._get("/api/v1"))

        group_list = self._get("/apis") or {}
        for group in group_list.get("groups") or []:
            preferred = group.get("preferredVersion") or {}
            group_version = preferred.get("groupVersion")
            if not group_version:
                continue
            try:
                resources.extend(_parse_resource_list(self._get(f"/apis/{group_version}")))
            except (ApiException, HTTPError) as e:
                logger.warning(f"Skipping API group {group_version} during discovery: {e}")

        logger.info(f"Discovered {len(resources)} resource types on {self.host}")
        return resources

    async def get_object(
        self,
        descriptor: ResourceDescriptor,
        name: str,
        namespace: str,
    ) -> dict[str, Any]:
        path = descriptor.object_path(name, namespace)
        try:
            obj: dict[str, Any] = await asyncio.to_thread(self._get, path)
        except ApiException as e:
            if e.status == 404:
                raise ObjectNotFoundError(descriptor.kind, name, namespace) from e
            raise TransportError(
                f"GET {path} failed: {e.status} {e.reason}", status=e.status
            ) from e
        except HTTPError as e:
            raise TransportError(f"GET {path} failed: {e}") from e
        return obj

    async def list_events(self, namespace: str, field_selector: str) -> list[dict[str, Any]]:
        try:
            if namespace:
                event_list = await asyncio.to_thread(
                    self.core_v1.list_namespaced_event,
                    namespace,
                    field_selector=field_selector,
                    _request_timeout=self.timeout,
                )
            else:
                event_list = await asyncio.to_thread(
                    self.core_v1.list_event_for_all_namespaces,
                    field_selector=field_selector,
                    _request_timeout=self.timeout,
                )
        except ApiException as e:
            raise TransportError(
                f"Listing events ({field_selector}) failed: {e.status} {e.reason}",
                status=e.status,
            ) from e
        except HTTPError as e:
            raise TransportError(f"Listing events ({field_selector}) failed: {e}") from e

        return [self.api_client.sanitize_for_serialization(item) for item in event_list.items]


def _parse_resource_list(resource_list: dict[str, Any] | None) -> list[APIResource]:
    """Convert an APIResourceList document into APIResource models."""
    if not resource_list:
        return []

    group_version = resource_list.get("groupVersion", "")
    group, _, version = group_version.rpartition("/")

    resources = []
    for entry in resource_list.get("resources") or []:
        name = entry.get("name", "")
        # Subresources such as "pods/log"
        if not name or "/" in name:
            continue
        resources.append(
            APIResource(
                name=name,
                singular_name=entry.get("singularName") or "",
                kind=entry.get("kind", ""),
                group=group,
                version=version,
                namespaced=bool(entry.get("namespaced", False)),
                short_names=tuple(entry.get("shortNames") or ()),
            )
        )
    return resources
