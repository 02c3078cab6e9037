"""Exception hierarchy for apicatalog.

All exceptions inherit from :class:`ApicatalogError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`apicatalog.exit_codes`.
The top-level error handler in :func:`apicatalog.app.main` catches
``ApicatalogError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    ApicatalogError (exit 1)
    +-- InvalidUsageError   (exit 2)
    +-- AuthError           (exit 3)
    +-- NotFoundError       (exit 4)
    +-- ServerError         (exit 5)
    +-- ConnectionError_    (exit 6)
    +-- SpecParseError      (exit 7)
    +-- ShapeError          (exit 8)
    +-- ConfigError         (exit 1)

Store and transport failures (``AuthError``, ``NotFoundError``,
``ServerError``, ``ConnectionError_``) are never retried and abort the
current top-level operation. ``ShapeError`` aborts the construct being
imported; siblings that were already written stay in the catalog.
"""

from apicatalog.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
    EXIT_SHAPE_ERROR,
    EXIT_SPEC_PARSE_ERROR,
)


class ApicatalogError(Exception):
    """Base exception for all apicatalog errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`apicatalog.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(ApicatalogError):
    """Raised for invalid CLI arguments or unsupported option values."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(ApicatalogError):
    """Raised when the catalog returns HTTP 401/403."""

    exit_code = EXIT_AUTH_FAILURE


class NotFoundError(ApicatalogError):
    """Raised when an asset or data type does not exist in the catalog."""

    exit_code = EXIT_NOT_FOUND


class ServerError(ApicatalogError):
    """Raised on catalog error statuses and malformed catalog responses."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(ApicatalogError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class SpecParseError(ApicatalogError):
    """Raised when an API spec cannot be loaded, parsed, or validated."""

    exit_code = EXIT_SPEC_PARSE_ERROR


class ShapeError(ApicatalogError):
    """Raised when a document field has an unexpected type.

    For example a ``components`` value that is a list instead of a keyed
    map. Carries the JSON pointer of the offending node in ``path``.
    """

    exit_code = EXIT_SHAPE_ERROR

    def __init__(self, message: str, path: str = "#"):
        super().__init__(f"{message} (at {path})")
        self.path = path


class ConfigError(ApicatalogError):
    """Raised for configuration problems (invalid JSON, bad credential sources)."""

    exit_code = EXIT_GENERIC_FAILURE
