"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apitree.exceptions.ApitreeError` subclass.
Shell wrappers can inspect the exit code of ``apitree`` to tell a bad
discovery document apart from an unreachable host without parsing stderr.

Example::

    $ apitree inspect ./missing.json
    $ echo $?
    7   # EXIT_DOCUMENT_PARSE_ERROR -- the document could not be read
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""Invalid arguments, unknown API version, or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""The remote API rejected the request (HTTP 401 / 403)."""

EXIT_NOT_FOUND = 4
"""The requested resource or document was not found (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The remote API returned an error status (HTTP 5xx or unmapped 4xx)."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_DOCUMENT_PARSE_ERROR = 7
"""A discovery document could not be read or parsed."""
