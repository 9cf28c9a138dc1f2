"""Discovery document loading.

Typical usage::

    from apitree.parser import load_document

    document = await load_document("./drive-v3.json", transport)

Sub-modules:

* :mod:`~apitree.parser.loader` -- I/O layer (file, ``file:`` URL, HTTP)
  plus JSON/YAML decoding.
"""

from apitree.parser.loader import load_document, parse_content, read_document_file

__all__ = ["load_document", "parse_content", "read_document_file"]
