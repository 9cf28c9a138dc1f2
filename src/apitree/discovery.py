"""Discover APIs and compile them into callable clients.

:class:`Discovery` is the top-level entry point. It exposes two
coroutines:

* :meth:`Discovery.discover_api` -- compile one discovery document (file
  path, URL, or request options) into an
  :class:`~apitree.generator.endpoint.EndpointType`.
* :meth:`Discovery.discover_all_apis` -- fetch a discovery directory,
  compile every listed API concurrently, and return an
  :class:`~apitree.generator.registry.ApiRegistry`.

Failures propagate as exceptions out of the coroutines: transport errors
from :mod:`apitree.client.transport`, :class:`DocumentParseError` for
unreadable documents. Directory discovery is fail-fast: the first failing
API aborts the whole operation and the remaining fetches are cancelled.

Example::

    async with Discovery({"debug": True}) as discovery:
        registry = await discovery.discover_all_apis()
        drive = registry.drive("v3")
        files = await drive.files.list({"pageSize": 10})
"""

from __future__ import annotations

import asyncio
from typing import Any, Mapping, Optional

from pydantic import ValidationError

from apitree.client.apirequest import RequestContext, RequestDescriptor, create_api_request
from apitree.client.transport import Transport
from apitree.exceptions import ArgumentError, DocumentParseError
from apitree.generator.endpoint import Executor, EndpointType, make_endpoint_type
from apitree.generator.registry import ApiRegistry
from apitree.models import DEFAULT_DIRECTORY_URL, DirectoryEntry, DiscoveryDirectory, DiscoveryOptions
from apitree.output import info
from apitree.parser.loader import load_document
from apitree.urls import has_url_scheme, is_file_url

_PUBLIC_ONLY_HEADERS = {"X-User-Ip": "0.0.0.0"}


class Discovery:
    """Builds endpoint types and registries from discovery documents.

    Args:
        options: :class:`~apitree.models.DiscoveryOptions` or an equivalent
            mapping (``include_private``, ``debug``, ``request``). Fixed for
            the lifetime of the instance.
        transport: Shared transport; created from ``options.request`` when
            omitted. Every document fetch and every endpoint built by this
            instance uses it.
        executor: Request executor handed to generated methods; defaults to
            :func:`~apitree.client.apirequest.create_api_request`.
    """

    def __init__(
        self,
        options: Optional[DiscoveryOptions | Mapping[str, Any]] = None,
        transport: Optional[Transport] = None,
        executor: Optional[Executor] = None,
    ) -> None:
        if isinstance(options, Mapping):
            options = DiscoveryOptions.model_validate(options)
        self._options = options or DiscoveryOptions()
        self.transport = transport or Transport(self._options.request)
        self._executor = executor or create_api_request

    @property
    def options(self) -> DiscoveryOptions:
        return self._options

    async def __aenter__(self) -> Discovery:
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the shared transport."""
        await self.transport.aclose()

    def _log(self, message: str) -> None:
        if self._options.debug:
            info(message)

    # ------------------------------------------------------------------ #
    # Single API
    # ------------------------------------------------------------------ #

    async def discover_api(self, source: str | Mapping[str, Any]) -> EndpointType:
        """Compile one discovery document into an endpoint type.

        Args:
            source: One of

                * a file path (no URL scheme) or ``file:`` URL -- read as
                  UTF-8 and parsed;
                * an ``http(s)`` URL -- fetched with ``GET``;
                * a mapping with ``url`` -- fetched through
                  :func:`~apitree.client.apirequest.create_api_request`
                  with the remaining keys sent as query parameters and no
                  instance options. The mapping is not modified.

        Returns:
            The compiled :class:`~apitree.generator.endpoint.EndpointType`.

        Raises:
            DocumentParseError: If the document cannot be read or is not
                an object.
            ArgumentError: If *source* has an unsupported type or the
                mapping has no ``url``.
            ApitreeError: Any transport error while fetching.
        """
        if isinstance(source, str):
            if source and has_url_scheme(source) and not is_file_url(source):
                self._log(f"Requesting {source}")
            else:
                self._log(f"Reading from file {source}")
            document = await load_document(source, self.transport)

        elif isinstance(source, Mapping):
            params = dict(source)
            url = params.pop("url", None)
            if not url:
                raise ArgumentError("Discovery options must include a 'url'")
            self._log(f"Requesting {url}")
            descriptor = RequestDescriptor(
                url=url,
                http_method="GET",
                params=params,
                required_params=[],
                path_params=[],
                context=RequestContext(discovery=self),
            )
            document = await create_api_request(descriptor)
            if not isinstance(document, dict):
                raise DocumentParseError(
                    f"Discovery document at {url} must be a JSON object "
                    f"(got {type(document).__name__})"
                )

        else:
            raise ArgumentError(
                "Argument error: discover_api accepts a path, URL, or options mapping"
            )

        return make_endpoint_type(document, self._executor)

    # ------------------------------------------------------------------ #
    # Directory
    # ------------------------------------------------------------------ #

    async def discover_all_apis(self, directory_url: str = DEFAULT_DIRECTORY_URL) -> ApiRegistry:
        """Discover every API listed in a discovery directory.

        The directory is requested with ``X-User-Ip: 0.0.0.0`` unless
        ``include_private`` is set. All listed documents are fetched
        concurrently without a cap.

        Args:
            directory_url: URL of the directory document.

        Returns:
            An :class:`~apitree.generator.registry.ApiRegistry` keyed by API
            name, then version.

        Raises:
            DocumentParseError: If the directory or any listed document is
                malformed.
            ApitreeError: The first failure among the listed APIs; no
                partial registry is returned.
        """
        headers = {} if self._options.include_private else dict(_PUBLIC_ONLY_HEADERS)
        self._log(f"Requesting {directory_url}")
        raw = await self.transport.get_document(directory_url, headers=headers)
        try:
            directory = DiscoveryDirectory.model_validate(raw)
        except ValidationError as exc:
            raise DocumentParseError(
                f"Invalid discovery directory at {directory_url}: {exc}"
            ) from exc

        entries = await self._discover_entries(directory.items)
        return ApiRegistry.from_entries(entries, discovery=self)

    async def _discover_entries(self, entries: list[DirectoryEntry]) -> list[DirectoryEntry]:
        """Discover all *entries* concurrently, failing fast.

        On the first failure every unfinished sibling is cancelled and
        awaited before the failure is raised. Among failures observed
        together, the one listed first in the directory wins.
        """
        if not entries:
            return []

        tasks = [asyncio.create_task(self._discover_entry(entry)) for entry in entries]
        try:
            done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        finally:
            pending = [task for task in tasks if not task.done()]
            for task in pending:
                task.cancel()
            if pending:
                await asyncio.gather(*pending, return_exceptions=True)

        for task in tasks:
            if task in done and not task.cancelled() and task.exception() is not None:
                raise task.exception()  # type: ignore[misc]
        return [task.result() for task in tasks]

    async def _discover_entry(self, entry: DirectoryEntry) -> DirectoryEntry:
        entry.api = await self.discover_api(entry.discovery_rest_url)
        return entry
