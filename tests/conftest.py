"""Shared test fixtures for apitree.

Provides discovery document fixtures, an httpx ``MockTransport`` factory,
isolated config environments, and output state reset. These fixtures
are automatically discovered by pytest and available to all test modules.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable, Optional

import httpx
import pytest

from apitree.client.transport import Transport
from apitree.output import reset_output


FIXTURES_DIR = Path(__file__).parent / "fixtures"


# ---------------------------------------------------------------------------
# Auto-reset global output state between tests
# ---------------------------------------------------------------------------


@pytest.fixture(autouse=True)
def _reset_output_between_tests() -> None:
    """Reset the global OutputManager after every test.

    The OutputManager caches references to sys.stdout/sys.stderr at
    creation time; CliRunner swaps those streams, so a stale manager would
    write to closed files.
    """
    yield
    reset_output()


# ---------------------------------------------------------------------------
# Discovery document fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def drive_document() -> dict[str, Any]:
    """A trimmed Drive v3 discovery document (fresh copy per test)."""
    with open(FIXTURES_DIR / "drive_v3.json") as f:
        return json.load(f)


@pytest.fixture
def directory_document() -> dict[str, Any]:
    """A three-entry discovery directory."""
    with open(FIXTURES_DIR / "directory.json") as f:
        return json.load(f)


@pytest.fixture
def drive_path() -> Path:
    """Path of the Drive v3 fixture on disk."""
    return FIXTURES_DIR / "drive_v3.json"


def ping_document(name: str = "x", version: str = "v1") -> dict[str, Any]:
    """Minimal document with a single top-level ``ping`` method."""
    return {
        "name": name,
        "version": version,
        "rootUrl": "http://h/",
        "servicePath": f"{name}/{version}",
        "resources": {},
        "methods": {
            "ping": {"path": "/ping", "httpMethod": "GET", "parameters": {}},
        },
    }


@pytest.fixture
def make_ping_document() -> Callable[..., dict[str, Any]]:
    return ping_document


# ---------------------------------------------------------------------------
# Mock HTTP
# ---------------------------------------------------------------------------


Route = Any  # dict/list -> JSON 200, httpx.Response as-is, Exception raised


def _route_key(request: httpx.Request) -> str:
    return f"{request.url.scheme}://{request.url.host}{request.url.path}"


@pytest.fixture
def make_transport() -> Callable[..., Transport]:
    """Factory for a :class:`Transport` backed by ``httpx.MockTransport``.

    ``routes`` maps ``scheme://host/path`` (query ignored) to a route:
    a JSON-serialisable body served with 200, a ready :class:`httpx.Response`,
    or an exception to raise. Unknown URLs get a 404. Every request is
    appended to ``seen`` when given.
    """

    def _factory(
        routes: dict[str, Route],
        seen: Optional[list[httpx.Request]] = None,
    ) -> Transport:
        def handler(request: httpx.Request) -> httpx.Response:
            if seen is not None:
                seen.append(request)
            route = routes.get(_route_key(request))
            if route is None:
                return httpx.Response(404, json={"error": {"message": "Not Found"}})
            if isinstance(route, Exception):
                raise route
            if isinstance(route, httpx.Response):
                return route
            return httpx.Response(200, json=route)

        return Transport(transport=httpx.MockTransport(handler))

    return _factory


# ---------------------------------------------------------------------------
# Config isolation fixture
# ---------------------------------------------------------------------------


@pytest.fixture
def isolated_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Isolate configuration to a temporary directory.

    Points XDG_CONFIG_HOME at ``tmp_path / "config"`` and clears all
    APITREE_* environment variables.

    Returns:
        The ``apitree`` config directory (not yet created).
    """
    config_home = tmp_path / "config"
    monkeypatch.setenv("XDG_CONFIG_HOME", str(config_home))
    monkeypatch.setattr("apitree.config._is_xdg_platform", lambda: True)
    for var in [
        "APITREE_DIRECTORY_URL",
        "APITREE_INCLUDE_PRIVATE",
        "APITREE_DEBUG",
    ]:
        monkeypatch.delenv(var, raising=False)
    return config_home / "apitree"

