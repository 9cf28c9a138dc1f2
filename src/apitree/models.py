"""Canonical Pydantic models shared across apitree modules.

The models fall into two groups:

**Configuration models** -- user settings and per-client options:
    :class:`RequestConfig`, :class:`DiscoveryOptions`, and
    :class:`GlobalConfig`.

**Directory models** -- the shape of a discovery directory listing:
    :class:`DirectoryEntry` and :class:`DiscoveryDirectory`.

Discovery documents themselves stay plain ``dict`` trees; the generator
walks them directly so that unknown or malformed fields never abort
client generation.
"""

from __future__ import annotations

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_DIRECTORY_URL = "https://www.googleapis.com/discovery/v1/apis"


# --- Configuration ---


class RequestConfig(BaseModel):
    """HTTP settings applied to the shared transport of a :class:`~apitree.discovery.Discovery`."""

    timeout: float = Field(default=30.0, description="Request timeout in seconds")
    verify_ssl: bool = Field(default=True, description="Verify SSL certificates")


class DiscoveryOptions(BaseModel):
    """Options fixed when a :class:`~apitree.discovery.Discovery` is created.

    Example::

        DiscoveryOptions(include_private=True, debug=True)
    """

    include_private: bool = Field(
        default=False,
        description="Include private APIs (omit the X-User-Ip directory header)",
    )
    debug: bool = Field(
        default=False, description="Log every document read or request"
    )
    request: RequestConfig = Field(default_factory=RequestConfig)


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/apitree/config.json``.

    Loaded by :func:`~apitree.config.load_global_config`. Environment
    variables and CLI flags take precedence; see
    :func:`~apitree.config.resolve_config`.
    """

    directory_url: str = DEFAULT_DIRECTORY_URL
    include_private: bool = False
    debug: bool = False
    request: RequestConfig = Field(default_factory=RequestConfig)

    def discovery_options(self) -> DiscoveryOptions:
        """Project the settings a :class:`~apitree.discovery.Discovery` needs."""
        return DiscoveryOptions(
            include_private=self.include_private,
            debug=self.debug,
            request=self.request,
        )


# --- Discovery directory ---


class DirectoryEntry(BaseModel):
    """One row of a discovery directory.

    Unknown keys (``title``, ``preferred``, ``icons`` ...) are preserved in
    ``model_extra``. ``api`` is filled with the compiled
    :class:`~apitree.generator.endpoint.EndpointType` once the entry's own
    document has been discovered.
    """

    model_config = ConfigDict(
        extra="allow", populate_by_name=True, arbitrary_types_allowed=True
    )

    name: str
    version: str
    discovery_rest_url: str = Field(alias="discoveryRestUrl")
    api: Optional[Any] = Field(default=None, exclude=True)


class DiscoveryDirectory(BaseModel):
    """A discovery directory document (``{"items": [...]}``)."""

    model_config = ConfigDict(extra="allow")

    items: list[DirectoryEntry] = Field(default_factory=list)
