from __future__ import annotations

from typing import Dict, List, Optional

import pytest

from envsync.core.client import Client
from envsync.core.registry import ProviderRegistry


class StaticProvider:
    """In-memory provider serving fixed mappings by source path."""

    def __init__(self, name: str = "static", data: Optional[Dict[str, Dict[str, str]]] = None):
        self.name = name
        self.data = data or {}
        self.calls: List[str] = []
        self.validate_error: Optional[Exception] = None
        self.load_error: Optional[Exception] = None

    def validate(self, source: str) -> None:
        self.calls.append(f"validate:{source}")
        if self.validate_error is not None:
            raise self.validate_error
        if source not in self.data:
            raise ValueError(f"unknown source {source}")

    def load(self, ctx, source: str) -> Dict[str, str]:
        self.calls.append(f"load:{source}")
        if self.load_error is not None:
            raise self.load_error
        return dict(self.data[source])


@pytest.fixture
def static_provider() -> StaticProvider:
    return StaticProvider(
        data={
            "a": {"K": "1"},
            "b": {"K": "2"},
            "c": {"X": "x", "Y": "y"},
        }
    )


@pytest.fixture
def client(static_provider: StaticProvider) -> Client:
    c = Client()
    c.add_provider("static", static_provider)
    c.add_provider("default", static_provider)
    return c


@pytest.fixture
def registry() -> ProviderRegistry:
    return ProviderRegistry()
