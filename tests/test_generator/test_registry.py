"""Tests for apitree.generator.registry."""

from __future__ import annotations

from typing import Any

import pytest

from apitree.exceptions import ArgumentError, EndpointLoadError, FrozenEndpointError
from apitree.generator.endpoint import Endpoint, make_endpoint_type
from apitree.generator.registry import ApiRegistry, VersionSelector
from apitree.models import DirectoryEntry


def _record(calls: list[Any]):
    def executor(descriptor: Any) -> Any:
        calls.append(descriptor)
        return "sent"

    return executor


def _entry(name: str, version: str, document: dict[str, Any], executor: Any = None) -> DirectoryEntry:
    entry = DirectoryEntry(
        name=name,
        version=version,
        discovery_rest_url=f"https://discovery.example.com/{name}/{version}/rest",
    )
    entry.api = make_endpoint_type(document, executor)
    return entry


# ---------------------------------------------------------------------------
# VersionSelector
# ---------------------------------------------------------------------------


class TestVersionSelector:
    @pytest.fixture
    def selector(self, make_ping_document) -> VersionSelector:
        selector = VersionSelector("x")
        selector.register("v1", make_endpoint_type(make_ping_document("x", "v1"), _record([])))
        selector.register("v2", make_endpoint_type(make_ping_document("x", "v2"), _record([])))
        return selector

    def test_string_selector(self, selector: VersionSelector) -> None:
        endpoint = selector("v1")
        assert isinstance(endpoint, Endpoint)
        assert endpoint._options == {}
        assert callable(endpoint.ping)

    def test_mapping_selector_forwards_remaining_keys(self, selector: VersionSelector) -> None:
        endpoint = selector({"version": "v1", "foo": 1})
        assert endpoint._options == {"foo": 1}

    def test_mapping_selector_is_not_modified(self, selector: VersionSelector) -> None:
        request = {"version": "v2", "params": {"key": "k"}}
        selector(request)
        assert request == {"version": "v2", "params": {"key": "k"}}

    def test_endpoint_is_frozen(self, selector: VersionSelector) -> None:
        endpoint = selector("v1")
        with pytest.raises(FrozenEndpointError):
            endpoint.extra = True
        with pytest.raises(FrozenEndpointError):
            endpoint.ping.extra = True

    def test_each_call_builds_distinct_endpoint(self, selector: VersionSelector) -> None:
        first = selector("v1")
        second = selector("v1")
        assert first is not second
        assert first.ping is not second.ping

    @pytest.mark.parametrize("bad", [1, None, ["v1"], 1.5])
    def test_rejects_other_types(self, selector: VersionSelector, bad: Any) -> None:
        with pytest.raises(ArgumentError, match="Accepts only string or object"):
            selector(bad)

    def test_unknown_version(self, selector: VersionSelector) -> None:
        with pytest.raises(EndpointLoadError) as exc_info:
            selector("v9")
        message = str(exc_info.value)
        assert 'x("v9")' in message
        assert "v1, v2" in message

    def test_mapping_without_version(self, selector: VersionSelector) -> None:
        with pytest.raises(EndpointLoadError):
            selector({"foo": 1})

    def test_versions_in_registration_order(self, selector: VersionSelector) -> None:
        assert selector.versions == ["v1", "v2"]
        assert selector.name == "x"

    def test_discovery_attached_to_endpoints(self, make_ping_document) -> None:
        owner = object()
        selector = VersionSelector("x", discovery=owner)
        selector.register("v1", make_endpoint_type(make_ping_document()))
        assert selector("v1")._discovery is owner

    def test_construction_failure_is_wrapped(self, make_ping_document) -> None:
        class Broken:
            def instantiate(self, options: Any, discovery: Any = None) -> Any:
                raise RuntimeError("boom")

        selector = VersionSelector("x")
        selector.register("v1", Broken())  # type: ignore[arg-type]
        with pytest.raises(EndpointLoadError, match="boom"):
            selector("v1")

    def test_ping_descriptor(self, make_ping_document) -> None:
        calls: list[Any] = []
        selector = VersionSelector("x")
        selector.register("v1", make_endpoint_type(make_ping_document("x", "v1"), _record(calls)))

        endpoint = selector("v1")
        endpoint.ping()

        assert calls[0].url.endswith("/ping")
        assert calls[0].url == "http://h/x/v1/ping"
        assert calls[0].http_method == "GET"
        assert calls[0].context is endpoint


# ---------------------------------------------------------------------------
# ApiRegistry
# ---------------------------------------------------------------------------


class TestApiRegistry:
    def test_groups_entries_by_name(self, make_ping_document) -> None:
        registry = ApiRegistry.from_entries([
            _entry("drive", "v2", make_ping_document("drive", "v2")),
            _entry("urlshortener", "v1", make_ping_document("urlshortener", "v1")),
            _entry("drive", "v3", make_ping_document("drive", "v3")),
        ])

        assert list(registry) == ["drive", "urlshortener"]
        assert len(registry) == 2
        assert registry["drive"].versions == ["v2", "v3"]
        assert registry.urlshortener.versions == ["v1"]

    def test_set_of_entries_decides_content(self, make_ping_document) -> None:
        entries = [
            _entry("a", "v1", make_ping_document("a", "v1")),
            _entry("b", "v1", make_ping_document("b", "v1")),
            _entry("a", "v2", make_ping_document("a", "v2")),
        ]
        forward = ApiRegistry.from_entries(entries)
        backward = ApiRegistry.from_entries(list(reversed(entries)))

        assert set(forward) == set(backward)
        for name in forward:
            assert sorted(forward[name].versions) == sorted(backward[name].versions)

    def test_empty(self) -> None:
        registry = ApiRegistry.from_entries([])
        assert len(registry) == 0
        assert dict(registry) == {}

    def test_unknown_name(self) -> None:
        registry = ApiRegistry.from_entries([])
        with pytest.raises(KeyError):
            registry["nope"]
        with pytest.raises(AttributeError, match="No API named 'nope'"):
            registry.nope

    def test_mapping_method_names_need_item_access(self) -> None:
        selector = VersionSelector("get")
        registry = ApiRegistry({"get": selector, "drive": VersionSelector("drive")})

        assert registry["get"] is selector
        assert registry.get("get") is selector
        assert registry.get("missing") is None
        assert registry.drive is registry["drive"]
        assert dict(registry) == {"get": selector, "drive": registry["drive"]}

    def test_selectors_share_discovery(self, make_ping_document) -> None:
        owner = object()
        registry = ApiRegistry.from_entries(
            [_entry("x", "v1", make_ping_document())], discovery=owner
        )
        assert registry.x("v1")._discovery is owner
