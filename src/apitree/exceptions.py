"""Exception hierarchy for apitree.

All exceptions inherit from :class:`ApitreeError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apitree.exit_codes`.
The CLI entry point in :func:`apitree.app.main` catches ``ApitreeError`` and
exits with the appropriate code.

Errors fall into three groups:

* **Transport errors** (:class:`AuthError`, :class:`NotFoundError`,
  :class:`ServerError`, :class:`ConnectionError_`) raised by
  :class:`~apitree.client.transport.Transport`.
* **Parse errors** (:class:`DocumentParseError`) raised while reading or
  decoding a discovery document.
* **Usage errors** (:class:`ArgumentError`, :class:`EndpointLoadError`,
  :class:`MissingParametersError`, :class:`FrozenEndpointError`) raised
  synchronously by application code misusing a registry or endpoint.

Subclass hierarchy::

    ApitreeError (exit 1)
    +-- ArgumentError           (exit 2)
    +-- EndpointLoadError       (exit 2)
    +-- MissingParametersError  (exit 2)
    +-- FrozenEndpointError     (exit 1)
    +-- AuthError               (exit 3)
    +-- NotFoundError           (exit 4)
    +-- ServerError             (exit 5)
    +-- ConnectionError_        (exit 6)
    +-- DocumentParseError      (exit 7)
    +-- ConfigError             (exit 1)
"""

from apitree.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_DOCUMENT_PARSE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class ApitreeError(Exception):
    """Base exception for all apitree errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ArgumentError(ApitreeError):
    """Raised when a version selector is called with an unsupported argument type."""

    exit_code = EXIT_INVALID_USAGE


class EndpointLoadError(ApitreeError):
    """Raised when a registry cannot build an endpoint for an API name and version."""

    exit_code = EXIT_INVALID_USAGE


class MissingParametersError(ApitreeError):
    """Raised before sending a request that lacks required parameters."""

    exit_code = EXIT_INVALID_USAGE


class FrozenEndpointError(ApitreeError, AttributeError):
    """Raised on any attempt to modify a frozen endpoint instance.

    Also an :class:`AttributeError` so that code probing attributes with
    ``setattr`` sees the usual failure type.
    """

    exit_code = EXIT_GENERIC_FAILURE


class AuthError(ApitreeError):
    """Raised when the API returns HTTP 401 or 403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(ApitreeError):
    """Raised when the API returns HTTP 404."""

    exit_code = EXIT_NOT_FOUND


class ServerError(ApitreeError):
    """Raised for HTTP 5xx responses and any other unmapped error status."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(ApitreeError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class DocumentParseError(ApitreeError):
    """Raised when a discovery document cannot be read or decoded."""

    exit_code = EXIT_DOCUMENT_PARSE_ERROR


class ConfigError(ApitreeError):
    """Raised for configuration problems (invalid JSON, failed validation)."""

    exit_code = EXIT_GENERIC_FAILURE
