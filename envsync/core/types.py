"""Type definitions for the envsync load pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional

from .errors import SourceFormatError

DEFAULT_PROVIDER_NAME = "default"

MAX_ENVIRONMENT_KEYS = 10000
MAX_KEY_LENGTH = 256
MAX_VALUE_LENGTH = 4096
MAX_CLIENT_PROVIDERS = 50
MAX_SOURCES = 10


class MergeStrategy(Enum):
    """How to resolve a key defined by more than one source.

    Attributes:
        OVERRIDE: The later source replaces the earlier value.
        PRESERVE: The first value is kept; later values are dropped.
        ERROR: A duplicate key aborts the load.
    """

    OVERRIDE = "override"
    PRESERVE = "preserve"
    ERROR = "error"

    @classmethod
    def parse(cls, value: str) -> "MergeStrategy":
        """Parse a strategy name such as ``"preserve"``.

        Raises:
            SourceFormatError: If the name is not a known strategy.
        """
        try:
            return cls(value.strip().lower())
        except (ValueError, AttributeError):
            valid = ", ".join(s.value for s in cls)
            raise SourceFormatError(
                f"invalid merge strategy: {value} (valid: {valid})"
            ) from None


@dataclass(frozen=True)
class SourceInfo:
    """Provenance of one processed source.

    Attributes:
        name: The source specifier as given to the load call.
        provider: The provider name it resolved to.
        key_count: Growth of the merged key set after this source.
    """

    name: str
    provider: str
    key_count: int


@dataclass
class LoadOptions:
    """Options for a single load call.

    Attributes:
        sources: Ordered source specifiers; order fixes merge precedence.
        schema: Optional path of the JSON schema used by the caller's validator.
        merge_strategy: Conflict policy for keys defined by several sources.
    """

    sources: List[str] = field(default_factory=list)
    schema: Optional[str] = None
    merge_strategy: MergeStrategy = MergeStrategy.OVERRIDE
