"""OpenAPI documents: listing only.

Importing OpenAPI into the catalog is not implemented. The import path
reports the paths and operations it would handle so the document can be
checked; cleanup reports that there is nothing to do.
"""

from __future__ import annotations

from typing import Any

from apicatalog.exceptions import SpecParseError
from apicatalog.output import info, warning

HTTP_METHODS = ("get", "put", "post", "delete", "options", "head", "patch", "trace")


def import_openapi_spec(document: dict[str, Any]) -> list[tuple[str, list[str]]]:
    """List the paths of an OpenAPI document and the operations under each.

    Returns:
        ``(path, methods)`` pairs, sorted by path.

    Raises:
        SpecParseError: If the document has no ``paths`` map.
    """
    paths = document.get("paths")
    if not isinstance(paths, dict):
        raise SpecParseError("paths are not defined in the OpenAPI document")

    listing: list[tuple[str, list[str]]] = []
    for path in sorted(paths):
        item = paths[path]
        methods = sorted(
            key for key in (item if isinstance(item, dict) else {}) if key in HTTP_METHODS
        )
        info(f"import path {path} - {' '.join(methods)}")
        listing.append((path, methods))
    warning("OpenAPI import is not implemented; nothing was written to the catalog")
    return listing


def clean_openapi_spec(document: dict[str, Any]) -> None:
    """Cleanup of OpenAPI imports is not implemented."""
    warning("Cleaning an OpenAPI document is not implemented")
