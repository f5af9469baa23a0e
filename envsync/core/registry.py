"""Registry of provider factories.

The registry maps provider names and aliases to ``ProviderInfo`` records and
builds provider instances from declarative configuration mappings. Names and
aliases share one namespace: a string can never be both, and it can never
point at two providers.

A process-wide registry is available through ``default_registry()`` for the
CLI composition root; library code should receive a ``ProviderRegistry``
explicitly.
"""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field, replace
from typing import Any, Dict, List, Optional

from readerwriterlock import rwlock

from .errors import (
    CapacityError,
    ProviderConfigError,
    ProviderError,
    ProviderNotFoundError,
    RegistrationError,
)
from .provider import Provider, ProviderFactory

logger = logging.getLogger(__name__)

MAX_PROVIDERS = 100

HIGH_PRIORITY = 10
DEFAULT_PRIORITY = 50
LOW_PRIORITY = 90


@dataclass
class ProviderInfo:
    """Description of a registered provider.

    Attributes:
        name: Canonical provider name.
        factory: Callable building a provider from a configuration mapping.
        aliases: Alternative names resolving to ``name``.
        priority: Lower values take precedence.
        description: Human-readable description.
        supported_sources: Example source paths, for documentation.
        required_config: Keys that must be present in the factory config.
        optional_config: Keys the factory understands but does not require.
    """

    name: str
    factory: Optional[ProviderFactory]
    aliases: List[str] = field(default_factory=list)
    priority: int = DEFAULT_PRIORITY
    description: str = ""
    supported_sources: List[str] = field(default_factory=list)
    required_config: List[str] = field(default_factory=list)
    optional_config: List[str] = field(default_factory=list)

    def copy(self) -> "ProviderInfo":
        return replace(
            self,
            aliases=list(self.aliases),
            supported_sources=list(self.supported_sources),
            required_config=list(self.required_config),
            optional_config=list(self.optional_config),
        )


class ProviderRegistry:
    """Catalogue of provider factories keyed by name and alias."""

    def __init__(self, max_providers: int = MAX_PROVIDERS):
        self.max_providers = max_providers
        self._providers: Dict[str, ProviderInfo] = {}
        self._aliases: Dict[str, str] = {}
        # lookups share the lock; register/unregister take it exclusively
        self._lock = rwlock.RWLockFair()

    def register(self, info: Optional[ProviderInfo]) -> None:
        """Register a provider and its aliases.

        Either the provider and every alias are added, or nothing is.

        Raises:
            RegistrationError: On invalid info or a name/alias collision.
            CapacityError: If the registry is full.
        """
        if info is None:
            raise RegistrationError("provider info cannot be None")
        if not isinstance(info.name, str) or not info.name.strip():
            raise RegistrationError("provider name cannot be empty")
        name = info.name.strip()
        if info.factory is None or not callable(info.factory):
            raise RegistrationError(f"provider {name} has no factory")

        aliases = []
        for alias in info.aliases or []:
            if not isinstance(alias, str):
                raise RegistrationError(f"alias of provider {name} must be a string, got {alias!r}")
            if alias.strip():
                aliases.append(alias.strip())
        stored = info.copy()
        stored.name = name
        stored.aliases = aliases

        with self._lock.gen_wlock():
            if len(self._providers) >= self.max_providers:
                raise CapacityError(
                    f"registry is full (max {self.max_providers} providers)",
                    limit=self.max_providers,
                    actual=len(self._providers),
                )
            if name in self._providers:
                raise RegistrationError(f"provider {name} already registered")
            if name in self._aliases:
                raise RegistrationError(
                    f"provider name {name} conflicts with alias of {self._aliases[name]}"
                )
            seen = set()
            for alias in aliases:
                if alias == name or alias in self._providers:
                    raise RegistrationError(f"alias {alias} conflicts with existing provider")
                if alias in self._aliases or alias in seen:
                    raise RegistrationError(f"alias {alias} already registered")
                seen.add(alias)

            self._providers[name] = stored
            for alias in aliases:
                self._aliases[alias] = name

        logger.debug("registered provider %s (aliases: %s)", name, ", ".join(aliases) or "-")

    def unregister(self, name: str) -> None:
        """Remove a provider and its aliases.

        Raises:
            ProviderNotFoundError: If no provider has this canonical name.
        """
        with self._lock.gen_wlock():
            info = self._providers.pop(name, None)
            if info is None:
                raise ProviderNotFoundError(f"provider {name} not found", provider=name)
            for alias in info.aliases:
                self._aliases.pop(alias, None)
        logger.debug("unregistered provider %s", name)

    def create_provider(self, name: str, config: Optional[Dict[str, Any]] = None) -> Provider:
        """Build a provider instance by name or alias.

        Args:
            name: Provider name or alias.
            config: Factory configuration; must contain every required key.

        Raises:
            ProviderNotFoundError: If the name is unknown.
            ProviderConfigError: If a required configuration key is missing.
            ProviderError: If the factory raised.
        """
        config = dict(config or {})
        with self._lock.gen_rlock():
            info = self._providers.get(self._resolve(name))
            if info is None:
                raise ProviderNotFoundError(
                    f"provider {name} not found", provider=name, stage="create"
                )
            factory = info.factory
            missing = [key for key in info.required_config if key not in config]

        if missing:
            raise ProviderConfigError(
                f"configuration validation failed: required configuration key missing: {missing[0]}",
                provider=info.name,
                stage="create",
            )
        try:
            provider = factory(config)
        except Exception as exc:
            raise ProviderError(
                f"failed to create provider {name}: {exc}",
                provider=info.name,
                stage="create",
            ) from exc
        logger.debug("created provider %s via %s", info.name, name)
        return provider

    def get_provider(self, name: str) -> ProviderInfo:
        """Return a copy of the info for a provider name or alias."""
        with self._lock.gen_rlock():
            info = self._providers.get(self._resolve(name))
            if info is None:
                raise ProviderNotFoundError(f"provider {name} not found", provider=name)
            return info.copy()

    def list_providers(self) -> List[ProviderInfo]:
        with self._lock.gen_rlock():
            infos = [info.copy() for info in self._providers.values()]
        return sorted(infos, key=lambda i: (i.priority, i.name))

    def get_provider_names(self) -> List[str]:
        """Canonical names followed by aliases."""
        with self._lock.gen_rlock():
            return list(self._providers) + list(self._aliases)

    def is_provider_registered(self, name: str) -> bool:
        with self._lock.gen_rlock():
            return self._resolve(name) in self._providers

    def resolve_name(self, name: str) -> str:
        with self._lock.gen_rlock():
            return self._resolve(name)

    def _resolve(self, name: str) -> str:
        return self._aliases.get(name, name)

    def __len__(self) -> int:
        with self._lock.gen_rlock():
            return len(self._providers)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.is_provider_registered(name)


_default_registry: Optional[ProviderRegistry] = None
_default_lock = threading.Lock()


def default_registry() -> ProviderRegistry:
    """Return the process-wide registry, creating it on first use."""
    global _default_registry
    with _default_lock:
        if _default_registry is None:
            _default_registry = ProviderRegistry()
        return _default_registry


def reset_default_registry() -> None:
    global _default_registry
    with _default_lock:
        _default_registry = None


def register(info: ProviderInfo) -> None:
    default_registry().register(info)


def create_provider(name: str, config: Optional[Dict[str, Any]] = None) -> Provider:
    return default_registry().create_provider(name, config)


def get_provider(name: str) -> ProviderInfo:
    return default_registry().get_provider(name)


def list_providers() -> List[ProviderInfo]:
    return default_registry().list_providers()


def get_provider_names() -> List[str]:
    return default_registry().get_provider_names()


def is_provider_registered(name: str) -> bool:
    return default_registry().is_provider_registered(name)
