"""HTTP layer for apitree.

Classes and functions:
    :class:`Transport` -- shared :class:`httpx.AsyncClient` wrapper with
    error mapping.
    :class:`RequestDescriptor` -- one not-yet-executed API call.
    :func:`create_api_request` -- default executor for generated methods.

Example::

    from apitree.client import Transport

    async with Transport() as transport:
        document = await transport.get_document(url)
"""

from apitree.client.apirequest import RequestContext, RequestDescriptor, create_api_request
from apitree.client.transport import Transport

__all__ = ["Transport", "RequestDescriptor", "RequestContext", "create_api_request"]
