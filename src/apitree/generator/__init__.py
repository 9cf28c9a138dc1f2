"""Endpoint generation -- compile discovery documents into callable clients.

Sub-modules:

* :mod:`~apitree.generator.endpoint` -- path-parameter extraction, method
  synthesis, schema application, and :class:`EndpointType`.
* :mod:`~apitree.generator.registry` -- the ``name -> version`` registry
  returned by directory discovery.
"""

from apitree.generator.endpoint import (
    Endpoint,
    EndpointType,
    MethodNode,
    ResourceNode,
    apply_schema,
    extract_path_params,
    freeze,
    make_endpoint_type,
    make_method,
)
from apitree.generator.registry import ApiRegistry, VersionSelector

__all__ = [
    "ApiRegistry",
    "Endpoint",
    "EndpointType",
    "MethodNode",
    "ResourceNode",
    "VersionSelector",
    "apply_schema",
    "extract_path_params",
    "freeze",
    "make_endpoint_type",
    "make_method",
]
