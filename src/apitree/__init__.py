"""apitree -- Build callable API clients from discovery documents.

A discovery document describes an HTTP API as a tree of resources and
methods. apitree compiles such a document into an object tree whose leaves
are callables issuing correctly-shaped requests, and can compile every API
listed in a discovery directory into a ``name -> version`` registry.

Typical usage::

    from apitree import Discovery

    async with Discovery() as discovery:
        registry = await discovery.discover_all_apis()
        drive = registry.drive("v3")
        result = await drive.files.list({"pageSize": 10})

Modules:
    discovery: :class:`Discovery`, the top-level orchestrator.
    generator: Endpoint synthesis and the API registry.
    client: Shared httpx transport and the default request executor.
    parser: Discovery document loading.
    app: Typer CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    output: stdout/stderr formatting system with Rich support.
"""

from apitree.discovery import Discovery

__version__ = "0.1.0"

__all__ = ["Discovery", "__version__"]
