import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from cp_graph.models import BuildOptions


class Settings(BaseSettings):
    """
    Configuration for a single invocation.

    Every field can be set through the environment with the ``CP_GRAPH_``
    prefix, e.g. ``CP_GRAPH_MAX_WORKERS=8``.
    """

    model_config = SettingsConfigDict(env_prefix="CP_GRAPH_")

    kubeconfig: str | None = Field(None, description="Path to kubeconfig file")
    context: str | None = Field(None, description="Kubeconfig context to use")
    namespace: str = Field("default", description="Namespace of the root resource")
    discovery_cache_dir: Path = Field(
        Path.home() / ".kube" / "cache" / "discovery",
        description="Directory for cached discovery documents",
    )
    discovery_cache_ttl_seconds: int = Field(
        600, ge=0, description="Freshness window of the discovery cache, 0 disables it"
    )
    request_timeout_seconds: float = Field(30.0, gt=0, description="Timeout per API request")
    max_workers: int = Field(4, ge=1, le=64, description="Concurrent fetches per build")
    log_level: str = Field("WARNING", description="Logging level")

    def resolve_kubeconfig(self) -> str:
        """
        Kubeconfig path in effect: explicit setting, then $KUBECONFIG,
        then ~/.kube/config.
        """
        if self.kubeconfig:
            return self.kubeconfig
        env_value = os.environ.get("KUBECONFIG")
        if env_value:
            return env_value
        return str(Path.home() / ".kube" / "config")

    def build_options(self, **overrides: object) -> BuildOptions:
        values: dict[str, object] = {
            "default_namespace": self.namespace,
            "max_workers": self.max_workers,
        }
        values.update(overrides)
        return BuildOptions.model_validate(values)
