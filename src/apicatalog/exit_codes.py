"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~apicatalog.exceptions.ApicatalogError` subclass.

Example::

    $ apicatalog export -r missing_root
    $ echo $?
    4   # EXIT_NOT_FOUND -- no root asset with that name
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""The catalog rejected the configured credentials."""

EXIT_NOT_FOUND = 4
"""The requested asset or data type was not found."""

EXIT_SERVER_ERROR = 5
"""The catalog returned an error status or a malformed response."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_SPEC_PARSE_ERROR = 7
"""The API specification could not be loaded, parsed, or validated."""

EXIT_SHAPE_ERROR = 8
"""A document field had an unexpected shape (e.g. ``components`` is not a map)."""
