"""Tests for the client load engine."""

from __future__ import annotations

import pytest

from conftest import StaticProvider
from envsync.core.client import Client
from envsync.core.context import Context
from envsync.core.errors import (
    CapacityError,
    LoadCancelledError,
    LoadTimeoutError,
    MergeConflictError,
    ProviderError,
    ProviderNotFoundError,
    SourceFormatError,
    ValidationError,
)
from envsync.core.merge import merge_into, parse_source
from envsync.core.types import LoadOptions, MergeStrategy, SourceInfo


class TestParseSource:
    def test_prefixed(self):
        assert parse_source("local:.env") == ("local", ".env")

    def test_splits_on_first_colon_only(self):
        assert parse_source("redis:app:db:") == ("redis", "app:db:")

    def test_bare_specifier_uses_default(self):
        assert parse_source(".env") == ("default", ".env")

    def test_empty_path_kept(self):
        assert parse_source("local:") == ("local", "")

    @pytest.mark.parametrize("bad", ["", "   ", ":path"])
    def test_malformed(self, bad):
        with pytest.raises(SourceFormatError):
            parse_source(bad)


class TestMergeInto:
    def test_error_strategy_stops_at_first_duplicate(self):
        target = {"A": "1"}
        with pytest.raises(MergeConflictError) as exc_info:
            merge_into(target, {"A": "2"}, MergeStrategy.ERROR, source="s")
        err = exc_info.value
        assert (err.key, err.existing, err.incoming, err.source) == ("A", "1", "2", "s")
        assert target == {"A": "1"}

    def test_preserve_adds_new_keys(self):
        target = {"A": "1"}
        merge_into(target, {"A": "2", "B": "3"}, MergeStrategy.PRESERVE)
        assert target == {"A": "1", "B": "3"}


class TestLoadStrategies:
    """Two sources defining K=1 then K=2."""

    def test_override_last_wins(self, client):
        env = client.load(LoadOptions(sources=["static:a", "static:b"]))
        assert env.get("K") == "2"

    def test_preserve_first_wins(self, client):
        env = client.load(
            LoadOptions(sources=["static:a", "static:b"], merge_strategy=MergeStrategy.PRESERVE)
        )
        assert env.get("K") == "1"

    def test_error_strategy_names_key_and_values(self, client, static_provider):
        with pytest.raises(MergeConflictError) as exc_info:
            client.load(
                LoadOptions(
                    sources=["static:a", "static:b", "static:c"],
                    merge_strategy=MergeStrategy.ERROR,
                )
            )
        message = str(exc_info.value)
        assert "K" in message and "1" in message and "2" in message
        assert exc_info.value.source == "static:b"
        # the third source is never touched
        assert "validate:c" not in static_provider.calls

    def test_order_of_calls(self, client, static_provider):
        client.load(LoadOptions(sources=["static:c", "a"]))
        assert static_provider.calls == ["validate:c", "load:c", "validate:a", "load:a"]


class TestLoadFailures:
    def test_no_sources(self, client):
        with pytest.raises(SourceFormatError, match="no sources"):
            client.load(LoadOptions(sources=[]))

    def test_too_many_sources(self, static_provider):
        c = Client(max_sources=2)
        c.add_provider("static", static_provider)
        with pytest.raises(CapacityError) as exc_info:
            c.load(LoadOptions(sources=["static:a", "static:b", "static:c"]))
        assert exc_info.value.limit == 2
        assert static_provider.calls == []

    def test_unknown_provider(self, client, static_provider):
        with pytest.raises(ProviderNotFoundError) as exc_info:
            client.load(LoadOptions(sources=["static:a", "ghost:path"]))
        err = exc_info.value
        assert isinstance(err, ProviderError)
        assert err.provider == "ghost"
        assert err.source == "ghost:path"
        assert err.stage == "resolve"

    def test_provider_lookup_is_client_local(self, registry):
        from envsync.providers import register_builtin_providers

        register_builtin_providers(registry)
        c = Client()
        with pytest.raises(ProviderNotFoundError):
            c.load(LoadOptions(sources=["local:.env"]))

    def test_validate_failure(self, client, static_provider):
        static_provider.validate_error = PermissionError("denied")
        with pytest.raises(ProviderError) as exc_info:
            client.load(LoadOptions(sources=["static:a"]))
        assert exc_info.value.stage == "validate"
        assert "denied" in str(exc_info.value)
        assert isinstance(exc_info.value.__cause__, PermissionError)
        assert "load:a" not in static_provider.calls

    def test_load_failure(self, client, static_provider):
        static_provider.load_error = ConnectionError("unreachable")
        with pytest.raises(ProviderError) as exc_info:
            client.load(LoadOptions(sources=["static:a"]))
        assert exc_info.value.stage == "load"
        assert exc_info.value.provider == "static"
        assert "unreachable" in str(exc_info.value)

    def test_non_mapping_payload(self, client, static_provider):
        static_provider.load = lambda ctx, source: ["K=1"]
        with pytest.raises(ProviderError, match="expected a mapping"):
            client.load(LoadOptions(sources=["static:a"]))

    def test_invalid_strategy_type(self, client):
        with pytest.raises(SourceFormatError):
            client.load(LoadOptions(sources=["static:a"], merge_strategy="override"))


class TestCapacity:
    def test_combined_key_count_over_limit(self, static_provider):
        c = Client(max_keys=2)
        c.add_provider("static", static_provider)
        # each source alone is within bounds
        c.load(LoadOptions(sources=["static:c"]))
        with pytest.raises(CapacityError) as exc_info:
            c.load(LoadOptions(sources=["static:a", "static:c"]))
        assert exc_info.value.actual == 3

    def test_value_length_limit(self):
        c = Client(max_value_length=3)
        c.add_provider("default", StaticProvider(data={"s": {"K": "long"}}))
        with pytest.raises(CapacityError, match="value too long"):
            c.load(LoadOptions(sources=["s"]))

    def test_key_length_limit(self):
        c = Client(max_key_length=3)
        c.add_provider("default", StaticProvider(data={"s": {"LONGKEY": "v"}}))
        with pytest.raises(CapacityError, match="key too long"):
            c.load(LoadOptions(sources=["s"]))

    def test_add_provider_ignored_past_cap(self, static_provider):
        c = Client(max_providers=1)
        c.add_provider("one", static_provider)
        c.add_provider("two", static_provider)
        assert list(c.providers()) == ["one"]


class TestValidationStage:
    class Recorder:
        def __init__(self, error=None):
            self.seen = []
            self.error = error

        def validate(self, ctx, config):
            self.seen.append(dict(config))
            if self.error:
                raise self.error

    def test_runs_once_on_merged_mapping(self, client):
        recorder = self.Recorder()
        client.set_validator(recorder)
        client.load(LoadOptions(sources=["static:a", "static:b", "static:c"]))
        assert recorder.seen == [{"K": "2", "X": "x", "Y": "y"}]

    def test_failure_produces_no_environment(self, client):
        client.set_validator(self.Recorder(ValidationError(["K is bad"])))
        with pytest.raises(ValidationError, match="K is bad"):
            client.load(LoadOptions(sources=["static:a"]))

    def test_foreign_exception_wrapped(self, client):
        client.set_validator(self.Recorder(RuntimeError("boom")))
        with pytest.raises(ValidationError) as exc_info:
            client.load(LoadOptions(sources=["static:a"]))
        assert exc_info.value.errors == ["boom"]

    def test_validator_cannot_mutate_result(self, client):
        class Mutating:
            def validate(self, ctx, config):
                config["INJECTED"] = "1"

        client.set_validator(Mutating())
        env = client.load(LoadOptions(sources=["static:a"]))
        assert "INJECTED" not in env


class TestSourceInfo:
    def test_records_in_order(self, client):
        env = client.load(LoadOptions(sources=["static:c", "static:a"]))
        assert env.sources == (
            SourceInfo(name="static:c", provider="static", key_count=2),
            SourceInfo(name="static:a", provider="static", key_count=1),
        )

    def test_key_count_is_net_growth(self, client):
        env = client.load(LoadOptions(sources=["static:a", "static:b"]))
        # b overwrote K but added no key
        assert [s.key_count for s in env.sources] == [1, 0]

    def test_default_provider_name_recorded(self, client):
        env = client.load(LoadOptions(sources=["a"]))
        assert env.sources[0].provider == "default"


class TestDeterminism:
    def test_identical_loads_identical_data(self, client):
        options = LoadOptions(sources=["static:c", "static:a", "static:b"])
        first = client.load(options)
        second = client.load(options)
        assert dict(first.data) == dict(second.data)
        assert list(first.data.items()) == list(second.data.items())
        assert first is not second


class TestContext:
    def test_cancelled_before_first_source(self, client, static_provider):
        ctx = Context()
        ctx.cancel()
        with pytest.raises(LoadCancelledError):
            client.load(LoadOptions(sources=["static:a"]), ctx=ctx)
        assert static_provider.calls == []

    def test_cancel_between_sources(self, client, static_provider):
        ctx = Context()
        original = static_provider.load

        def load_then_cancel(c, source):
            c.cancel()
            return original(c, source)

        static_provider.load = load_then_cancel
        with pytest.raises(LoadCancelledError):
            client.load(LoadOptions(sources=["static:a", "static:c"]), ctx=ctx)
        assert "validate:c" not in static_provider.calls

    def test_expired_deadline(self, client):
        with pytest.raises(LoadTimeoutError):
            client.load(LoadOptions(sources=["static:a"]), ctx=Context.with_timeout(0))

    def test_remaining(self):
        assert Context().remaining() is None
        assert 0 < Context.with_timeout(60).remaining() <= 60


class TestMergeStrategyParse:
    @pytest.mark.parametrize("name, expected", [
        ("override", MergeStrategy.OVERRIDE),
        ("Preserve", MergeStrategy.PRESERVE),
        (" error ", MergeStrategy.ERROR),
    ])
    def test_valid(self, name, expected):
        assert MergeStrategy.parse(name) is expected

    def test_invalid(self):
        with pytest.raises(SourceFormatError, match="invalid merge strategy"):
            MergeStrategy.parse("merge")
