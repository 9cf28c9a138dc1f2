"""Load discovery documents from a local file or a remote URL.

This module handles all I/O for obtaining raw discovery documents and
converting them into Python dictionaries. Documents are normally JSON, but
YAML is accepted too (useful for hand-written fixtures).

The public functions are:

* :func:`load_document` -- Load and parse a document from a file path,
  ``file:`` URL, or HTTP(S) URL.
* :func:`read_document_file` -- Read and parse a local file.
* :func:`parse_content` -- Decode text as JSON, falling back to YAML.

After loading, the dict is handed to
:func:`~apitree.generator.endpoint.make_endpoint_type`.
"""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from apitree.exceptions import DocumentParseError
from apitree.urls import file_url_to_path, has_url_scheme, is_file_url

if TYPE_CHECKING:
    from apitree.client.transport import Transport

_TOO_DEEP = "Discovery document is nested too deeply to parse"


async def load_document(source: str, transport: Transport) -> dict[str, Any]:
    """Load a discovery document from a file path or URL.

    Sources without a URL scheme, and ``file:`` URLs, are read from disk in
    a worker thread. Anything else is fetched with ``GET`` through
    *transport*.

    Args:
        source: File path or URL of the discovery document.
        transport: Shared transport used for remote documents.

    Returns:
        The parsed document.

    Raises:
        DocumentParseError: If the file cannot be read or the content cannot
            be parsed.
        ApitreeError: Any transport error for remote documents.
    """
    if is_file_url(source):
        return await asyncio.to_thread(read_document_file, file_url_to_path(source))
    if source and has_url_scheme(source):
        return await transport.get_document(source)
    return await asyncio.to_thread(read_document_file, source)


def read_document_file(path: str) -> dict[str, Any]:
    """Load a discovery document from a local file.

    Args:
        path: Path to the local file.

    Returns:
        The parsed document dictionary.

    Raises:
        DocumentParseError: If the file cannot be read or content cannot be parsed.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise DocumentParseError(f"Discovery document not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise DocumentParseError(f"Failed to read discovery document {path}: {exc}") from exc

    if not content.strip():
        raise DocumentParseError(f"Discovery document is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return parse_content(content, hint=hint)


def parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is ``'yaml'``), then falls back to YAML.

    Args:
        content: The raw string content.
        hint: Optional format hint (``'json'`` or ``'yaml'``).

    Returns:
        The parsed dictionary.

    Raises:
        DocumentParseError: If the content cannot be parsed as either format,
            or is not a mapping.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
            if not isinstance(result, dict):
                raise DocumentParseError(
                    "Discovery document must be a JSON/YAML object (got "
                    f"{type(result).__name__})"
                )
            return result
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise DocumentParseError(f"Invalid JSON: {exc}") from exc
        except RecursionError as exc:
            raise DocumentParseError(_TOO_DEEP) from exc

    try:
        result = yaml.safe_load(content)
        if not isinstance(result, dict):
            raise DocumentParseError(
                "Discovery document must be a JSON/YAML object (got "
                f"{type(result).__name__ if result is not None else 'empty document'})"
            )
        return result
    except yaml.YAMLError as exc:
        yaml_error = exc
    except RecursionError as exc:
        raise DocumentParseError(_TOO_DEEP) from exc

    msg = "Failed to parse discovery document as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise DocumentParseError(msg)
