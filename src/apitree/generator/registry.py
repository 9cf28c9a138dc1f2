"""Two-level ``name -> version -> EndpointType`` registry.

:meth:`~apitree.discovery.Discovery.discover_all_apis` folds every
discovered directory entry into an :class:`ApiRegistry`. Each API name
maps to a :class:`VersionSelector`; calling the selector builds a fresh,
frozen :class:`~apitree.generator.endpoint.Endpoint`::

    registry = await discovery.discover_all_apis()
    drive = registry["drive"]("v3")
    drive = registry.drive({"version": "v3", "params": {"key": API_KEY}})

Selector misuse is reported synchronously with
:class:`~apitree.exceptions.ArgumentError` or
:class:`~apitree.exceptions.EndpointLoadError`.
"""

from __future__ import annotations

from typing import Any, Iterable, Iterator, Mapping, Optional

from apitree.exceptions import ArgumentError, EndpointLoadError
from apitree.generator.endpoint import Endpoint, EndpointType, freeze
from apitree.models import DirectoryEntry


class VersionSelector:
    """Builds endpoints for one API name, keyed by version string.

    Args:
        name: The API name (``drive``, ``storage``, ...).
        discovery: Lookup-only reference attached to every endpoint built.
    """

    def __init__(self, name: str, discovery: Any = None) -> None:
        self._name = name
        self._discovery = discovery
        self._versions: dict[str, EndpointType] = {}

    @property
    def name(self) -> str:
        return self._name

    @property
    def versions(self) -> list[str]:
        """Registered version strings, in registration order."""
        return list(self._versions)

    def register(self, version: str, endpoint_type: EndpointType) -> None:
        self._versions[version] = endpoint_type

    def __call__(self, selector: str | Mapping[str, Any]) -> Endpoint:
        """Instantiate the endpoint for a version.

        Args:
            selector: A version string, or a mapping with a ``version`` key;
                the remaining keys become the endpoint's construction
                options. The caller's mapping is not modified.

        Returns:
            A new frozen :class:`~apitree.generator.endpoint.Endpoint`.

        Raises:
            ArgumentError: If *selector* is neither a string nor a mapping.
            EndpointLoadError: If the version is unknown or construction
                fails.
        """
        if isinstance(selector, str):
            version: Any = selector
            options: dict[str, Any] = {}
        elif isinstance(selector, Mapping):
            options = dict(selector)
            version = options.pop("version", None)
        else:
            raise ArgumentError("Argument error: Accepts only string or object")

        endpoint_type = self._versions.get(version) if isinstance(version, str) else None
        if endpoint_type is None:
            available = ", ".join(self._versions) or "none"
            raise EndpointLoadError(
                f'Unable to load endpoint {self._name}("{version}"): '
                f"unknown version (available: {available})"
            )

        try:
            endpoint = endpoint_type.instantiate(options, discovery=self._discovery)
        except Exception as exc:
            raise EndpointLoadError(
                f'Unable to load endpoint {self._name}("{version}"): {exc}'
            ) from exc
        return freeze(endpoint)

    def __repr__(self) -> str:
        return f"<VersionSelector {self._name}: {', '.join(self._versions)}>"


class ApiRegistry(Mapping[str, VersionSelector]):
    """Mapping of API name to :class:`VersionSelector`.

    Selectors are reachable by item (``registry["drive"]``) or attribute
    (``registry.drive``). Attribute access falls back to the selectors only
    after normal lookup fails, so an API named after a mapping method
    (``get``, ``keys``, ``items``, ``values``) is reachable by item alone:
    ``registry.get`` stays :meth:`Mapping.get`.
    """

    def __init__(self, selectors: Optional[Mapping[str, VersionSelector]] = None) -> None:
        self._selectors: dict[str, VersionSelector] = dict(selectors or {})

    @classmethod
    def from_entries(
        cls,
        entries: Iterable[DirectoryEntry],
        discovery: Any = None,
    ) -> ApiRegistry:
        """Group discovered entries by name, then by version.

        Only the set of entries matters; their order decides nothing but
        the listing order of names and versions.
        """
        registry = cls()
        for entry in entries:
            selector = registry._selectors.get(entry.name)
            if selector is None:
                selector = VersionSelector(entry.name, discovery)
                registry._selectors[entry.name] = selector
            selector.register(entry.version, entry.api)
        return registry

    def __getitem__(self, name: str) -> VersionSelector:
        return self._selectors[name]

    def __iter__(self) -> Iterator[str]:
        return iter(self._selectors)

    def __len__(self) -> int:
        return len(self._selectors)

    def __getattr__(self, name: str) -> VersionSelector:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self._selectors[name]
        except KeyError:
            raise AttributeError(f"No API named {name!r}") from None

    def __repr__(self) -> str:
        return f"<ApiRegistry {', '.join(self._selectors)}>"
