"""Result of a successful load."""

from __future__ import annotations

from types import MappingProxyType
from typing import TYPE_CHECKING, Dict, Iterator, List, Mapping, Optional, Sequence, Tuple

from .context import Context
from .errors import CapacityError, ExportError
from .types import SourceInfo

if TYPE_CHECKING:
    from .client import Client


class Environment:
    """Merged configuration data plus per-source provenance.

    An Environment is produced once per successful ``Client.load`` call. Its
    source list is fixed; values can still be changed through ``set``, which
    applies the same key limits as the load that created it.
    """

    def __init__(self, data: Dict[str, str], sources: Sequence[SourceInfo], client: "Client"):
        """Initialize an Environment.

        Args:
            data: The merged mapping; ownership passes to the Environment.
            sources: Source provenance in processing order.
            client: The client whose exporter and limits apply.
        """
        self._data = data
        self._sources: Tuple[SourceInfo, ...] = tuple(sources)
        self._client = client

    @property
    def data(self) -> Mapping[str, str]:
        """Read-only view of the configuration data."""
        return MappingProxyType(self._data)

    @property
    def sources(self) -> Tuple[SourceInfo, ...]:
        return self._sources

    def keys(self) -> List[str]:
        return list(self._data.keys())

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        return self._data.get(key, default)

    def set(self, key: str, value: str) -> None:
        """Set a value, enforcing the client's key and value limits.

        Raises:
            CapacityError: If the key, value or resulting key count is too large.
        """
        value = str(value)
        client = self._client
        if len(key) > client.max_key_length:
            raise CapacityError(
                f"key too long: {len(key)} > {client.max_key_length}",
                limit=client.max_key_length,
                actual=len(key),
            )
        if len(value) > client.max_value_length:
            raise CapacityError(
                f"value too long for key {key}: {len(value)} > {client.max_value_length}",
                limit=client.max_value_length,
                actual=len(value),
            )
        if key not in self._data and len(self._data) >= client.max_keys:
            raise CapacityError(
                f"too many environment keys: {len(self._data) + 1} > {client.max_keys}",
                limit=client.max_keys,
                actual=len(self._data) + 1,
            )
        self._data[key] = value

    def size(self) -> int:
        return len(self._data)

    def is_empty(self) -> bool:
        return not self._data

    def export(self, destination: str, ctx: Optional[Context] = None) -> None:
        """Export the data through the client's configured exporter.

        Raises:
            ExportError: If no exporter is configured, or the export failed.
        """
        exporter = self._client.exporter
        if exporter is None:
            raise ExportError("no exporter configured")
        exporter.export(ctx or Context.background(), dict(self._data), destination)

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._data))

    def __repr__(self) -> str:
        return f"Environment(keys={len(self._data)}, sources={[s.name for s in self._sources]})"
