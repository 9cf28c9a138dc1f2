"""Shared asynchronous HTTP transport.

:class:`Transport` wraps a single :class:`httpx.AsyncClient` that is
shared by a :class:`~apitree.discovery.Discovery`, every document fetch it
launches, and every endpoint instance it builds. httpx clients are safe
for concurrent use within one event loop, so the transport keeps no
per-request state.

Error statuses and network failures are mapped onto the
:mod:`apitree.exceptions` hierarchy; retries are deliberately not
performed here.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from apitree.exceptions import AuthError, ConnectionError_, NotFoundError, ServerError
from apitree.models import RequestConfig
from apitree.output import get_output


class Transport:
    """Asynchronous HTTP transport for discovery and API calls.

    The underlying :class:`httpx.AsyncClient` is created lazily on first
    use and recreated if a request arrives after :meth:`aclose`.

    Args:
        config: Timeout and TLS settings.
        transport: Optional httpx transport (e.g. :class:`httpx.MockTransport`
            in tests) passed straight to the client.

    Example::

        async with Transport() as transport:
            document = await transport.get_document(url)
    """

    def __init__(
        self,
        config: Optional[RequestConfig] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self._config = config or RequestConfig()
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None

    # ------------------------------------------------------------------ #
    # Async context manager
    # ------------------------------------------------------------------ #

    async def __aenter__(self) -> Transport:
        self._ensure_client()
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying client, if one was opened."""
        if self._client:
            await self._client.aclose()
            self._client = None

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            kwargs: dict[str, Any] = {
                "timeout": self._config.timeout,
                "verify": self._config.verify_ssl,
                "follow_redirects": True,
            }
            if self._transport is not None:
                kwargs["transport"] = self._transport
            self._client = httpx.AsyncClient(**kwargs)
        return self._client

    # ------------------------------------------------------------------ #
    # Public request methods
    # ------------------------------------------------------------------ #

    async def request(
        self,
        method: str,
        url: str,
        params: Optional[dict[str, Any]] = None,
        headers: Optional[dict[str, str]] = None,
        json_body: Optional[Any] = None,
        content: Optional[bytes | str] = None,
        timeout: Optional[float] = None,
    ) -> httpx.Response:
        """Send one HTTP request and map error statuses to exceptions.

        Args:
            method: HTTP method (GET, POST, PUT, PATCH, DELETE).
            url: Absolute request URL.
            params: Query parameters.
            headers: Request headers.
            json_body: JSON-serialisable body.
            content: Raw body; takes precedence over *json_body*.
            timeout: Per-request timeout override in seconds.

        Returns:
            The :class:`httpx.Response` from the server.

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On any other status >= 400.
            ConnectionError_: On network / timeout errors.
        """
        client = self._ensure_client()
        kwargs: dict[str, Any] = {
            "method": method.upper(),
            "url": url,
            "headers": headers or {},
            "params": params or {},
        }
        if content is not None:
            kwargs["content"] = content
        elif json_body is not None:
            kwargs["json"] = json_body
        if timeout is not None:
            kwargs["timeout"] = timeout

        get_output().debug(f"{method.upper()} {url}")
        try:
            response = await client.request(**kwargs)
        except (httpx.TimeoutException, httpx.NetworkError) as exc:
            raise ConnectionError_(f"Request to {url} failed: {exc}") from exc

        _map_response_error(response)
        return response

    async def get_document(
        self,
        url: str,
        headers: Optional[dict[str, str]] = None,
    ) -> dict[str, Any]:
        """Fetch a discovery document or directory and parse it.

        Uses the response content type as a format hint.

        Raises:
            DocumentParseError: If the body is not a JSON/YAML object.
        """
        from apitree.parser.loader import parse_content

        response = await self.request("GET", url, headers=headers)
        content_type = response.headers.get("content-type", "")
        hint = ""
        if "json" in content_type:
            hint = "json"
        elif "yaml" in content_type or "yml" in content_type:
            hint = "yaml"
        return parse_content(response.text, hint=hint)


def extract_response_data(response: httpx.Response) -> Any:
    """Extract the body from an HTTP response.

    Attempts to parse the body as JSON first. If that fails (e.g. the
    response is HTML or plain text), returns the raw text. Returns
    ``None`` for responses with no content.
    """
    if not response.content:
        return None

    try:
        return response.json()
    except ValueError:
        pass

    return response.text


def _map_response_error(response: httpx.Response) -> None:
    """Raise a typed exception for error HTTP status codes."""
    status = response.status_code
    if status < 400:
        return

    try:
        detail = response.json()
        if isinstance(detail, dict):
            inner = detail.get("error")
            if isinstance(inner, dict):
                msg = inner.get("message") or ""
            else:
                msg = detail.get("message") or inner or detail.get("detail") or ""
        else:
            msg = str(detail)
    except ValueError:
        msg = response.text[:200] if response.text else ""

    prefix = f"HTTP {status}"
    full_msg = f"{prefix}: {msg}" if msg else prefix

    if status in (401, 403):
        raise AuthError(full_msg)
    if status == 404:
        raise NotFoundError(full_msg)
    raise ServerError(full_msg)
