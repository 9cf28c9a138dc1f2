"""URL template helpers for generated endpoints.

Discovery documents describe method URLs as RFC 6570 templates such as
``projects/{+name}/files/{fileId}``. apitree only supports simple
``{name}`` substitution, so :func:`build_url` strips the ``+`` and ``*``
operators and wraps the result in single quotes; callers remove the
quotes with :func:`trim_delimiters`. :func:`expand_template` performs the
substitution at request time.
"""

from __future__ import annotations

import re
from typing import Any, Mapping
from urllib.parse import quote, unquote, urlsplit

_PLACEHOLDER_RE = re.compile(r"\{\s*([^{}\s]+)\s*\}")


def build_url(template: str | None) -> str:
    """Normalise a URL template and wrap it in single-quote delimiters.

    Returns an empty string for empty input.

    Example::

        >>> build_url("https://api.example.com/v1/{+name}")
        "'https://api.example.com/v1/{name}'"
    """
    if not template:
        return ""
    return "'" + template.replace("*", "").replace("+", "") + "'"


def trim_delimiters(built: str) -> str:
    """Remove exactly one leading and one trailing character."""
    return built[1:-1]


def expand_template(template: str, params: Mapping[str, Any]) -> str:
    """Substitute ``{name}`` placeholders with percent-encoded values.

    Slashes in values are preserved so that reserved-expansion parameters
    (``{+name}`` in the original template) keep their path segments.
    Placeholders without a matching parameter are left as-is.
    """

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in params or params[key] is None:
            return match.group(0)
        return quote(str(params[key]), safe="/")

    return _PLACEHOLDER_RE.sub(_replace, template)


def has_url_scheme(source: str) -> bool:
    """Return True if *source* looks like a URL rather than a file path.

    Single-letter schemes are treated as Windows drive letters.
    """
    scheme = urlsplit(source).scheme
    return len(scheme) > 1


def is_file_url(source: str) -> bool:
    """Return True for ``file:`` URLs."""
    return urlsplit(source).scheme == "file"


def file_url_to_path(source: str) -> str:
    """Return the filesystem path of a ``file:`` URL.

    ``file://localhost/...`` maps to a local path; any other host is kept
    as a UNC-style ``//host/...`` prefix.
    """
    parts = urlsplit(source)
    path = unquote(parts.path)
    if parts.netloc and parts.netloc != "localhost":
        return f"//{parts.netloc}{path}"
    return path
