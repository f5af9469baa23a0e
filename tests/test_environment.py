from __future__ import annotations

import json

import pytest

from envsync.core.client import Client
from envsync.core.environment import Environment
from envsync.core.errors import CapacityError, ExportError
from envsync.core.types import LoadOptions, SourceInfo
from envsync.exporter import MultiFormatExporter


def _env(data=None, client=None):
    return Environment(dict(data or {}), [SourceInfo("s", "default", len(data or {}))], client or Client())


class TestEnvironment:
    def test_accessors(self):
        env = _env({"A": "1", "B": "2"})
        assert env.get("A") == "1"
        assert env.get("missing") is None
        assert env.get("missing", "x") == "x"
        assert sorted(env.keys()) == ["A", "B"]
        assert env.size() == 2 == len(env)
        assert not env.is_empty()
        assert "A" in env
        assert sorted(env) == ["A", "B"]

    def test_empty(self):
        assert _env().is_empty()

    def test_data_is_read_only(self):
        env = _env({"A": "1"})
        with pytest.raises(TypeError):
            env.data["A"] = "2"

    def test_set_overwrites_and_adds(self):
        env = _env({"A": "1"})
        env.set("A", "2")
        env.set("B", 3)
        assert env.get("A") == "2"
        assert env.get("B") == "3"

    def test_set_enforces_key_length(self):
        env = _env(client=Client(max_key_length=4))
        with pytest.raises(CapacityError, match="key too long"):
            env.set("TOOLONG", "v")
        assert env.is_empty()

    def test_set_enforces_value_length(self):
        env = _env(client=Client(max_value_length=2))
        with pytest.raises(CapacityError, match="value too long"):
            env.set("K", "abc")

    def test_set_enforces_key_count(self):
        env = _env({"A": "1"}, client=Client(max_keys=1))
        env.set("A", "overwrite is fine")
        with pytest.raises(CapacityError):
            env.set("B", "2")

    def test_export_without_exporter(self):
        with pytest.raises(ExportError, match="no exporter configured"):
            _env({"A": "1"}).export("json:out.json")

    def test_export_through_client_exporter(self, client, tmp_path):
        client.set_exporter(MultiFormatExporter(str(tmp_path)))
        env = client.load(LoadOptions(sources=["static:c"]))
        env.export("json:out.json")
        written = json.loads((tmp_path / "out.json").read_text())
        assert written["config"] == {"X": "x", "Y": "y"}

    def test_repr(self):
        assert "keys=1" in repr(_env({"A": "1"}))
