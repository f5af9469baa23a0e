"""Kubernetes Secrets and ConfigMaps provider.

Only source parsing is implemented; loading always fails until a Kubernetes
client is wired in.
"""

from __future__ import annotations

from typing import Any, Dict, Optional, Tuple

from ..core.context import Context

PROVIDER_NAME = "kubernetes"

SECRET_TYPE = "secret"
CONFIGMAP_TYPE = "configmap"
DEFAULT_NAMESPACE = "default"


class KubernetesProvider:
    def __init__(
        self,
        namespace: str = DEFAULT_NAMESPACE,
        kubeconfig: Optional[str] = None,
        context: Optional[str] = None,
    ):
        self.name = PROVIDER_NAME
        self.namespace = namespace or DEFAULT_NAMESPACE
        self.kubeconfig = kubeconfig
        self.context = context

    @property
    def enabled(self) -> bool:
        return bool(self.kubeconfig)

    def parse_source(self, source: str) -> Tuple[str, str, str]:
        """Split ``[namespace/][type/]name``.

        A bare name is a secret in the provider's namespace.
        """
        if not source or not source.strip():
            raise ValueError("source cannot be empty")
        parts = source.split("/")
        if len(parts) == 1:
            return self.namespace, SECRET_TYPE, parts[0]
        if len(parts) == 2:
            return self.namespace, parts[0], parts[1]
        if len(parts) == 3:
            return parts[0], parts[1], parts[2]
        raise ValueError(
            f"invalid source format: {source} (expected: [namespace/]resource-type/resource-name)"
        )

    def validate(self, source: str) -> None:
        self.parse_source(source)

    def load(self, ctx: Context, source: str) -> Dict[str, str]:
        namespace, resource_type, resource_name = self.parse_source(source)
        raise NotImplementedError(
            f"kubernetes provider is not yet implemented "
            f"(would load {namespace}/{resource_type}/{resource_name})"
        )


def create_kubernetes_provider(config: Dict[str, Any]) -> KubernetesProvider:
    def _str(key: str) -> Optional[str]:
        value = config.get(key)
        return value if isinstance(value, str) else None

    return KubernetesProvider(
        namespace=_str("namespace") or DEFAULT_NAMESPACE,
        kubeconfig=_str("kubeconfig"),
        context=_str("context"),
    )
