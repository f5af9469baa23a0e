"""Client and load engine.

The client holds concrete provider instances bound by name, an optional
validator and an optional exporter. ``Client.load`` fetches and merges the
requested sources strictly in order, validates the complete result once and
returns an ``Environment``; any failure aborts the whole call.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping as MappingABC
from typing import Dict, List, Optional

from .context import Context
from .environment import Environment
from .errors import (
    CapacityError,
    LoadCancelledError,
    ProviderError,
    ProviderNotFoundError,
    SourceFormatError,
    ValidationError,
)
from .merge import merge_into, parse_source
from .provider import Exporter, Provider, Validator
from .types import (
    MAX_CLIENT_PROVIDERS,
    MAX_ENVIRONMENT_KEYS,
    MAX_KEY_LENGTH,
    MAX_SOURCES,
    MAX_VALUE_LENGTH,
    LoadOptions,
    MergeStrategy,
    SourceInfo,
)

logger = logging.getLogger(__name__)


class Client:
    """Orchestrates providers, validation and export for load calls."""

    def __init__(
        self,
        *,
        max_providers: int = MAX_CLIENT_PROVIDERS,
        max_keys: int = MAX_ENVIRONMENT_KEYS,
        max_sources: int = MAX_SOURCES,
        max_key_length: int = MAX_KEY_LENGTH,
        max_value_length: int = MAX_VALUE_LENGTH,
    ):
        self.max_providers = max_providers
        self.max_keys = max_keys
        self.max_sources = max_sources
        self.max_key_length = max_key_length
        self.max_value_length = max_value_length
        self._providers: Dict[str, Provider] = {}
        self.validator: Optional[Validator] = None
        self.exporter: Optional[Exporter] = None

    def add_provider(self, name: str, provider: Provider) -> None:
        """Bind a provider instance to a name.

        Once ``max_providers`` bindings exist further calls are ignored
        without raising.
        """
        if len(self._providers) >= self.max_providers:
            logger.warning(
                "ignoring provider %s: client already holds %d providers",
                name,
                self.max_providers,
            )
            return
        self._providers[name] = provider

    def get_provider(self, name: str) -> Optional[Provider]:
        return self._providers.get(name)

    def providers(self) -> Dict[str, Provider]:
        return dict(self._providers)

    def set_validator(self, validator: Optional[Validator]) -> None:
        self.validator = validator

    def set_exporter(self, exporter: Optional[Exporter]) -> None:
        self.exporter = exporter

    def load(self, options: LoadOptions, ctx: Optional[Context] = None) -> Environment:
        """Load, merge and validate the configured sources.

        Args:
            options: Sources, schema reference and merge strategy.
            ctx: Optional cancellation/deadline context.

        Returns:
            A new Environment holding the merged data.

        Raises:
            SourceFormatError: If the options or a specifier are malformed.
            CapacityError: If a source, key-count or key-size limit is exceeded.
            ProviderError: If a provider is unknown or fails to validate/load.
            MergeConflictError: On a duplicate key with the error strategy.
            ValidationError: If the configured validator rejects the result.
            LoadCancelledError: If the context is cancelled or expires.
        """
        ctx = ctx or Context.background()
        sources = list(options.sources or [])
        strategy = options.merge_strategy
        if not sources:
            raise SourceFormatError("no sources specified")
        if len(sources) > self.max_sources:
            raise CapacityError(
                f"too many sources: {len(sources)} > {self.max_sources}",
                limit=self.max_sources,
                actual=len(sources),
            )
        if not isinstance(strategy, MergeStrategy):
            raise SourceFormatError(f"invalid merge strategy: {strategy!r}")

        data: Dict[str, str] = {}
        infos: List[SourceInfo] = []
        for source in sources:
            ctx.raise_if_done()
            infos.append(self._load_source(ctx, source, data, strategy))

        if self.validator is not None:
            ctx.raise_if_done()
            self._validate(ctx, data)

        self._check_limits(data)
        logger.debug("loaded %d keys from %d sources", len(data), len(infos))
        return Environment(data, infos, self)

    def _load_source(
        self,
        ctx: Context,
        source: str,
        data: Dict[str, str],
        strategy: MergeStrategy,
    ) -> SourceInfo:
        provider_name, path = parse_source(source)

        provider = self._providers.get(provider_name)
        if provider is None:
            raise ProviderNotFoundError(
                f"failed to load from source {source}: provider {provider_name} not found",
                source=source,
                provider=provider_name,
                stage="resolve",
            )

        try:
            provider.validate(path)
        except LoadCancelledError:
            raise
        except Exception as exc:
            raise ProviderError(
                f"failed to load from source {source}: source validation failed for {source}: {exc}",
                source=source,
                provider=provider_name,
                stage="validate",
            ) from exc

        try:
            payload = provider.load(ctx, path)
        except LoadCancelledError:
            raise
        except Exception as exc:
            raise ProviderError(
                f"failed to load from source {source}: failed to load from provider {provider_name}: {exc}",
                source=source,
                provider=provider_name,
                stage="load",
            ) from exc
        if not isinstance(payload, MappingABC):
            raise ProviderError(
                f"failed to load from source {source}: provider {provider_name} "
                f"returned {type(payload).__name__}, expected a mapping",
                source=source,
                provider=provider_name,
                stage="load",
            )

        before = len(data)
        merge_into(
            data,
            {str(k): "" if v is None else str(v) for k, v in payload.items()},
            strategy,
            source=source,
        )
        info = SourceInfo(name=source, provider=provider_name, key_count=len(data) - before)
        logger.debug(
            "merged %s via %s: %d keys loaded, %d new",
            source,
            provider_name,
            len(payload),
            info.key_count,
        )
        return info

    def _validate(self, ctx: Context, data: Dict[str, str]) -> None:
        try:
            self.validator.validate(ctx, dict(data))
        except (ValidationError, LoadCancelledError):
            raise
        except Exception as exc:
            raise ValidationError([str(exc)], prefix="validation failed") from exc

    def _check_limits(self, data: Dict[str, str]) -> None:
        if len(data) > self.max_keys:
            raise CapacityError(
                f"too many environment keys: {len(data)} > {self.max_keys}",
                limit=self.max_keys,
                actual=len(data),
            )
        for key, value in data.items():
            if len(key) > self.max_key_length:
                raise CapacityError(
                    f"key too long: {key[:32]}... ({len(key)} > {self.max_key_length})",
                    limit=self.max_key_length,
                    actual=len(key),
                )
            if len(value) > self.max_value_length:
                raise CapacityError(
                    f"value too long for key {key}: {len(value)} > {self.max_value_length}",
                    limit=self.max_value_length,
                    actual=len(value),
                )
