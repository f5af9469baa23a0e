"""Built-in configuration providers.

This package contains the local file provider, remote key/value providers
(redis, github) and the Kubernetes/Vault stubs, plus the registration of their
factories in a ``ProviderRegistry``.
"""

from __future__ import annotations

from typing import List

from ..core.registry import HIGH_PRIORITY, DEFAULT_PRIORITY, LOW_PRIORITY, ProviderInfo, ProviderRegistry
from .github_env import GitHubEnvProvider, create_github_provider
from .kubernetes import KubernetesProvider, create_kubernetes_provider
from .local import LocalFileProvider, create_local_provider
from .redis_kv import RedisKeyValueProvider, create_redis_provider
from .vault import VaultProvider, create_vault_provider


def builtin_providers() -> List[ProviderInfo]:
    return [
        ProviderInfo(
            name="local",
            factory=create_local_provider,
            aliases=["file", "fs", "filesystem"],
            priority=HIGH_PRIORITY,
            description="Load configuration from local files (.env, JSON, YAML, INI)",
            supported_sources=[".env", "path/to/.env", "config.json", "config.yaml", "settings.ini"],
            optional_config=["base_path"],
        ),
        ProviderInfo(
            name="kubernetes",
            factory=create_kubernetes_provider,
            aliases=["k8s", "kube"],
            priority=DEFAULT_PRIORITY,
            description="Load configuration from Kubernetes Secrets and ConfigMaps (not yet implemented)",
            supported_sources=[
                "namespace/secret/secret-name",
                "namespace/configmap/config-name",
                "default/secret/app-secrets",
            ],
            optional_config=["kubeconfig", "context", "namespace"],
        ),
        ProviderInfo(
            name="vault",
            factory=create_vault_provider,
            aliases=["hcvault", "hashicorp-vault"],
            priority=DEFAULT_PRIORITY,
            description="Load secrets from HashiCorp Vault (not yet implemented)",
            supported_sources=["secret/data/app-config", "kv/production/database"],
            required_config=["token"],
            optional_config=["address", "mount_path", "version"],
        ),
        ProviderInfo(
            name="redis",
            factory=create_redis_provider,
            aliases=["redis-kv"],
            priority=LOW_PRIORITY,
            description="Load string keys under a prefix from a Redis database",
            supported_sources=["app:", "production:service:"],
            optional_config=["url", "prefix"],
        ),
        ProviderInfo(
            name="github",
            factory=create_github_provider,
            aliases=["gh"],
            priority=LOW_PRIORITY,
            description="Load GitHub environment variables for a repository",
            supported_sources=["owner/repo#production"],
            optional_config=["token", "base_url"],
        ),
    ]


def register_builtin_providers(registry: ProviderRegistry) -> None:
    """Register every built-in provider that is not registered yet."""
    for info in builtin_providers():
        if not registry.is_provider_registered(info.name):
            registry.register(info)


__all__ = [
    "GitHubEnvProvider",
    "KubernetesProvider",
    "LocalFileProvider",
    "RedisKeyValueProvider",
    "VaultProvider",
    "builtin_providers",
    "register_builtin_providers",
]
