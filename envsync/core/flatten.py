"""Flattening of structured documents into string key/value pairs."""

from __future__ import annotations

import json
from typing import Any, Dict, Iterator, Optional, Tuple


def iter_hierarchical(
    data: Dict[str, Any],
    parent: str = "",
    depth: Optional[int] = None,
) -> Iterator[Tuple[str, Any]]:
    """Flatten nested dictionaries using dot-notation up to optional depth.

    - Lists are emitted as-is (caller can serialize when needed).
    - Scalars are emitted directly.
    """
    if depth is not None and depth < 0:
        return

    for key, value in data.items():
        full_key = str(key) if not parent else f"{parent}.{key}"
        if isinstance(value, dict) and value and (depth is None or depth > 0):
            next_depth = None if depth is None else depth - 1
            yield from iter_hierarchical(value, full_key, next_depth)
        else:
            yield full_key, value


def to_env_value(value: Any) -> str:
    """Render a leaf value the way it would appear in a .env file."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        # serialize lists and dict leaves to JSON strings for stability
        return json.dumps(value, separators=(",", ":"), sort_keys=True, default=str)
    return str(value)


def flatten(data: Dict[str, Any], depth: Optional[int] = None) -> Dict[str, str]:
    return {k: to_env_value(v) for k, v in iter_hierarchical(data, depth=depth)}
