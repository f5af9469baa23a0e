"""Loader for envsync.yaml project files."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .core.client import Client
from .core.errors import ConfigFileError
from .core.registry import ProviderRegistry
from .core.types import DEFAULT_PROVIDER_NAME, MergeStrategy

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "envsync.yaml"


class ConfigLoader:
    """Handles loading and parsing of envsync.yaml configuration files.

    The file declares provider instances to construct (by registry name or
    alias), and optionally default sources, merge strategy and schema::

        providers:
          local: {base_path: ./config}
        sources: [local:.env]
        merge_strategy: preserve
    """

    def __init__(self, config_path: Optional[Union[str, Path]] = None):
        """Initialize config loader.

        Args:
            config_path: Path to envsync.yaml. If None, looks in the current
                directory and its parents.

        Raises:
            ConfigFileError: If an explicit path does not exist.
        """
        self.config_path = self._find_config_file(config_path)
        self._config: Optional[Dict[str, Any]] = None

    def _find_config_file(self, config_path: Optional[Union[str, Path]]) -> Optional[Path]:
        if config_path is not None:
            path = Path(config_path)
            if not path.exists():
                raise ConfigFileError(f"config file not found: {path}")
            return path

        current = Path.cwd()
        for directory in (current, *current.parents):
            candidate = directory / CONFIG_FILE_NAME
            if candidate.is_file():
                return candidate
        return None

    def load(self) -> Dict[str, Any]:
        """Load the configuration file.

        Returns:
            Parsed configuration dictionary, or empty dict if no config file.

        Raises:
            ConfigFileError: If the file is unreadable, invalid YAML, or not a mapping.
        """
        if self.config_path is None:
            return {}
        if self._config is not None:
            return self._config

        try:
            with open(self.config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise ConfigFileError(f"Invalid {CONFIG_FILE_NAME} at {self.config_path}: {e}") from e
        except OSError as e:
            raise ConfigFileError(f"Could not read {self.config_path}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigFileError(f"{self.config_path} must contain a mapping")
        self._config = data
        logger.debug("loaded project file %s", self.config_path)
        return data

    def provider_configs(self) -> Dict[str, Dict[str, Any]]:
        providers = self.load().get("providers") or {}
        if not isinstance(providers, dict):
            raise ConfigFileError("'providers' must be a mapping of name to configuration")
        result: Dict[str, Dict[str, Any]] = {}
        for name, cfg in providers.items():
            if cfg is None:
                cfg = {}
            if not isinstance(cfg, dict):
                raise ConfigFileError(f"configuration for provider {name} must be a mapping")
            result[str(name)] = cfg
        return result

    def sources(self) -> List[str]:
        sources = self.load().get("sources") or []
        if not isinstance(sources, list) or not all(isinstance(s, str) for s in sources):
            raise ConfigFileError("'sources' must be a list of source specifiers")
        return list(sources)

    def merge_strategy(self) -> Optional[MergeStrategy]:
        value = self.load().get("merge_strategy")
        if value is None:
            return None
        return MergeStrategy.parse(str(value))

    def schema(self) -> Optional[str]:
        value = self.load().get("schema")
        if value is None:
            return None
        path = Path(str(value))
        if not path.is_absolute() and self.config_path is not None:
            path = self.config_path.parent / path
        return str(path)

    def build_client(self, registry: ProviderRegistry, client: Optional[Client] = None) -> Client:
        """Construct every declared provider and bind it on a client.

        Providers are bound under the name used in the file. An entry may
        name its registry provider explicitly with a ``provider`` key, which
        allows several bindings of one provider type::

            providers:
              shared: {provider: local, base_path: ../shared}

        If a ``local`` provider is bound and ``default`` is not declared, the
        first such instance is also bound as ``default``.

        Raises:
            ProviderError: If a provider is unknown or its factory fails.
        """
        client = client or Client()
        configs = self.provider_configs()
        for name, cfg in configs.items():
            cfg = dict(cfg)
            registry_name = str(cfg.pop("provider", name))
            provider = registry.create_provider(registry_name, cfg)
            client.add_provider(name, provider)
            logger.debug("bound provider %s (%s)", name, registry_name)
            if (
                DEFAULT_PROVIDER_NAME not in configs
                and client.get_provider(DEFAULT_PROVIDER_NAME) is None
                and registry.resolve_name(registry_name) == "local"
            ):
                client.add_provider(DEFAULT_PROVIDER_NAME, provider)
        return client
