"""Turn a :class:`RequestDescriptor` into one HTTP call.

Every generated endpoint method builds a :class:`RequestDescriptor` and
hands it to an *executor*. :func:`create_api_request` is the default
executor: it validates required parameters, expands the URL template,
separates query parameters from the request body and media payload, and
sends the request through the transport of the owning
:class:`~apitree.discovery.Discovery`.

Reserved keys in a call's parameter bag::

    options   per-call overrides: {"params": {...}, "headers": {...}, "timeout": 10}
    headers   extra request headers
    resource  JSON request body
    media     {"body": bytes | str | file-like, "mimeType": "image/png"}

Everything else is a path or query parameter.
"""

from __future__ import annotations

import json
import uuid
from dataclasses import dataclass, field
from typing import Any, Mapping, Optional

from apitree.client.transport import Transport, extract_response_data
from apitree.exceptions import MissingParametersError
from apitree.urls import expand_template


@dataclass
class RequestDescriptor:
    """The resolved, not-yet-executed representation of one API call.

    Attributes:
        url: URL template with ``{name}`` placeholders still in place.
        http_method: HTTP verb from the method schema.
        params: Caller-supplied parameter bag (a private copy).
        required_params: Names from the method's ``parameterOrder``.
        path_params: Names of parameters substituted into the URL.
        context: The endpoint instance (or a :class:`RequestContext`) that
            owns the call; read for default options and the transport.
        media_url: URL template for simple media uploads, if the method
            supports them.
    """

    url: str
    http_method: Optional[str] = None
    params: dict[str, Any] = field(default_factory=dict)
    required_params: list[str] = field(default_factory=list)
    path_params: list[str] = field(default_factory=list)
    context: Any = None
    media_url: Optional[str] = None


class RequestContext:
    """Context for requests that are not issued by an endpoint instance.

    Mirrors the two attributes an :class:`~apitree.generator.endpoint.Endpoint`
    exposes to the request layer: ``_options`` (instance defaults) and
    ``_discovery`` (lookup-only reference used to reach the shared
    transport).
    """

    def __init__(
        self,
        options: Optional[Mapping[str, Any]] = None,
        discovery: Any = None,
    ) -> None:
        self._options = dict(options or {})
        self._discovery = discovery


def _discovery_transport(context: Any) -> Optional[Transport]:
    discovery = getattr(context, "_discovery", None)
    return getattr(discovery, "transport", None)


async def create_api_request(descriptor: RequestDescriptor) -> Any:
    """Execute the HTTP call described by *descriptor*.

    Args:
        descriptor: The request built by a generated endpoint method.

    Returns:
        The decoded response body: parsed JSON, raw text, or ``None`` for
        an empty body.

    Raises:
        MissingParametersError: If any of ``required_params`` is absent.
        ApitreeError: Any transport error from
            :meth:`~apitree.client.transport.Transport.request`.
    """
    params = dict(descriptor.params or {})
    call_options = dict(params.pop("options", None) or {})
    media = params.pop("media", None) or {}
    resource = params.pop("resource", None)
    call_headers = params.pop("headers", None) or {}

    context_options = getattr(descriptor.context, "_options", None) or {}

    # Instance defaults < per-call options < explicit call parameters.
    query: dict[str, Any] = {}
    query.update(context_options.get("params") or {})
    query.update(call_options.get("params") or {})
    query.update({key: value for key, value in params.items() if value is not None})

    missing = [name for name in descriptor.required_params if query.get(name) is None]
    if missing:
        raise MissingParametersError(
            "Missing required parameters: " + ", ".join(missing)
        )

    url = expand_template(descriptor.url, query)
    media_url = expand_template(descriptor.media_url, query) if descriptor.media_url else None
    for name in descriptor.path_params:
        query.pop(name, None)

    headers: dict[str, str] = {}
    headers.update(context_options.get("headers") or {})
    headers.update(call_options.get("headers") or {})
    headers.update(call_headers)
    timeout = call_options.get("timeout", context_options.get("timeout"))

    json_body = resource
    content: Optional[bytes] = None
    media_body = media.get("body") if isinstance(media, Mapping) else None
    if media_url and media_body is not None:
        url = media_url
        mime_type = media.get("mimeType") or "application/octet-stream"
        payload = _read_media(media_body)
        if resource is not None:
            boundary = uuid.uuid4().hex
            query["uploadType"] = "multipart"
            headers["Content-Type"] = f"multipart/related; boundary={boundary}"
            content = _multipart_related(resource, payload, mime_type, boundary)
        else:
            query["uploadType"] = "media"
            headers["Content-Type"] = mime_type
            content = payload
        json_body = None

    send = dict(
        params=query,
        headers=headers,
        json_body=json_body,
        content=content,
        timeout=timeout,
    )
    method = descriptor.http_method or "GET"
    transport = _discovery_transport(descriptor.context)
    if transport is not None:
        response = await transport.request(method, url, **send)
    else:
        # Detached contexts get a transport scoped to this one call.
        async with Transport() as own_transport:
            response = await own_transport.request(method, url, **send)
    return extract_response_data(response)


def _read_media(body: Any) -> bytes:
    """Normalise a media body (bytes, str, or readable object) to bytes."""
    if hasattr(body, "read"):
        body = body.read()
    if isinstance(body, str):
        return body.encode("utf-8")
    return bytes(body)


def _multipart_related(
    resource: Any,
    payload: bytes,
    mime_type: str,
    boundary: str,
) -> bytes:
    """Build a ``multipart/related`` body: JSON metadata part, then the media part."""
    return b"".join([
        f"--{boundary}\r\nContent-Type: application/json; charset=UTF-8\r\n\r\n".encode(),
        json.dumps(resource).encode("utf-8"),
        f"\r\n--{boundary}\r\nContent-Type: {mime_type}\r\n\r\n".encode(),
        payload,
        f"\r\n--{boundary}--\r\n".encode(),
    ])
