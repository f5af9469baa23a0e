from .client import Client
from .context import Context
from .environment import Environment
from .provider import Exporter, Provider, Validator
from .registry import ProviderInfo, ProviderRegistry
from .types import LoadOptions, MergeStrategy, SourceInfo

__all__ = [
    "Client",
    "Context",
    "Environment",
    "Exporter",
    "LoadOptions",
    "MergeStrategy",
    "Provider",
    "ProviderInfo",
    "ProviderRegistry",
    "SourceInfo",
    "Validator",
]
