"""Capability protocols for providers, validators and exporters."""

from __future__ import annotations

from typing import Any, Callable, Dict, Mapping, Protocol

from .context import Context


class Provider(Protocol):
    """Protocol defining the interface for configuration providers.

    A provider validates and loads a flat mapping of configuration from one
    provider-local source path.
    """

    name: str

    def validate(self, source: str) -> None:
        """Check a source before loading.

        Args:
            source: Provider-local path (the part after ``provider:``).

        Raises:
            Exception: Any error describing why the source is unusable.
        """
        ...

    def load(self, ctx: Context, source: str) -> Dict[str, str]:
        """Load configuration values from the source.

        Args:
            ctx: Cancellation/deadline context for blocking I/O.
            source: Provider-local path.

        Returns:
            Dictionary of configuration key-value pairs.
        """
        ...


class Validator(Protocol):
    """Checks a complete merged mapping without modifying it."""

    def validate(self, ctx: Context, config: Mapping[str, str]) -> None:
        ...


class Exporter(Protocol):
    """Writes a complete mapping to a ``format:path`` destination."""

    def export(self, ctx: Context, config: Mapping[str, str], destination: str) -> None:
        ...


ProviderFactory = Callable[[Dict[str, Any]], Provider]
