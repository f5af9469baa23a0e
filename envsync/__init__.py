"""envsync - configuration aggregation library.

Load configuration from several providers, merge it under an explicit
conflict policy, validate the result and export it.
"""

__version__ = "0.1.0"

from .core.client import Client
from .core.context import Context
from .core.environment import Environment
from .core.errors import (
    CapacityError,
    EnvSyncError,
    ExportError,
    MergeConflictError,
    ProviderError,
    SourceFormatError,
    ValidationError,
)
from .core.registry import ProviderInfo, ProviderRegistry
from .core.types import LoadOptions, MergeStrategy, SourceInfo

__all__ = [
    "CapacityError",
    "Client",
    "Context",
    "EnvSyncError",
    "Environment",
    "ExportError",
    "LoadOptions",
    "MergeConflictError",
    "MergeStrategy",
    "ProviderError",
    "ProviderInfo",
    "ProviderRegistry",
    "SourceFormatError",
    "SourceInfo",
    "ValidationError",
]
