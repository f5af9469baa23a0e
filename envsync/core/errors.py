"""Exception hierarchy for envsync.

Every error raised by the load pipeline derives from EnvSyncError so callers
can catch the whole family at once. Errors carry the context needed to act on
them (source specifier, provider name, stage) as attributes as well as in the
message.
"""

from __future__ import annotations

from typing import Iterable, List, Optional


class EnvSyncError(Exception):
    """Base class for all envsync errors."""


class SourceFormatError(EnvSyncError, ValueError):
    """A source specifier, destination or option string is malformed."""


class ProviderError(EnvSyncError):
    """A provider could not be resolved, validated, constructed or loaded.

    Attributes:
        source: The source specifier being processed, if any.
        provider: The provider name involved, if any.
        stage: Pipeline stage ("resolve", "validate", "load", "create").
    """

    def __init__(
        self,
        message: str,
        *,
        source: Optional[str] = None,
        provider: Optional[str] = None,
        stage: Optional[str] = None,
    ):
        super().__init__(message)
        self.source = source
        self.provider = provider
        self.stage = stage


class ProviderNotFoundError(ProviderError):
    """No provider is bound or registered under the requested name."""


class ProviderConfigError(ProviderError):
    """A provider configuration is missing a required key."""


class RegistrationError(EnvSyncError, ValueError):
    """A provider could not be added to the registry."""


class MergeConflictError(EnvSyncError):
    """Two sources define the same key under the error merge strategy."""

    def __init__(
        self,
        key: str,
        existing: str,
        incoming: str,
        source: Optional[str] = None,
    ):
        message = f"duplicate key found: {key} (existing: {existing}, new: {incoming})"
        if source is not None:
            message = f"failed to merge source {source}: {message}"
        super().__init__(message)
        self.key = key
        self.existing = existing
        self.incoming = incoming
        self.source = source


class CapacityError(EnvSyncError):
    """A registry, client, source or key limit was exceeded."""

    def __init__(self, message: str, *, limit: Optional[int] = None, actual: Optional[int] = None):
        super().__init__(message)
        self.limit = limit
        self.actual = actual


class ValidationError(EnvSyncError):
    """The merged configuration failed validation.

    The individual messages are kept in ``errors``; ``str()`` joins them.
    """

    def __init__(self, errors: Iterable[str], prefix: str = "configuration validation failed"):
        self.errors: List[str] = [str(e) for e in errors]
        self.prefix = prefix
        super().__init__(f"{prefix}: {'; '.join(self.errors)}" if self.errors else prefix)


class ExportError(EnvSyncError):
    """Serializing or writing the configuration failed."""


class LoadCancelledError(EnvSyncError):
    """The load context was cancelled."""


class LoadTimeoutError(LoadCancelledError, TimeoutError):
    """The load context deadline passed."""


class ConfigFileError(EnvSyncError, ValueError):
    """The envsync.yaml project file is invalid."""
