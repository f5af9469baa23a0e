"""Source specifier parsing and merge strategies."""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional, Tuple

from .errors import MergeConflictError, SourceFormatError
from .types import DEFAULT_PROVIDER_NAME, MergeStrategy

logger = logging.getLogger(__name__)


def parse_source(source: str) -> Tuple[str, str]:
    """Split ``[provider:]path`` on the first colon.

    A specifier without a colon is bound to the ``default`` provider.

    Args:
        source: Source specifier, e.g. ``local:.env`` or ``.env``.

    Returns:
        Tuple of (provider_name, provider_local_path).

    Raises:
        SourceFormatError: If the specifier or its provider prefix is empty.
    """
    if not isinstance(source, str) or not source.strip():
        raise SourceFormatError(f"invalid source specifier: {source!r}")
    if ":" not in source:
        return DEFAULT_PROVIDER_NAME, source
    provider_name, path = source.split(":", 1)
    if not provider_name.strip():
        raise SourceFormatError(f"missing provider name in source specifier: {source}")
    return provider_name, path


def merge_into(
    target: Dict[str, str],
    payload: Mapping[str, str],
    strategy: MergeStrategy,
    source: Optional[str] = None,
) -> None:
    """Merge ``payload`` into ``target`` in place.

    Under ``MergeStrategy.ERROR`` the first duplicate raises before the
    remaining keys of the payload are applied; the caller discards the
    accumulator in that case.

    Raises:
        MergeConflictError: On a duplicate key with the error strategy.
    """
    for key, value in payload.items():
        if key in target:
            if strategy is MergeStrategy.ERROR:
                raise MergeConflictError(key, target[key], value, source=source)
            if strategy is MergeStrategy.PRESERVE:
                logger.debug("preserving existing value for %s", key)
                continue
        target[key] = value
