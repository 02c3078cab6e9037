"""Load API specification documents from a URL, local file, or stdin.

This module handles all I/O for fetching raw AsyncAPI/OpenAPI documents and
converting them into Python dictionaries. It supports both JSON and YAML
formats with automatic format detection.

Public functions:

* :func:`load_document` -- Load and parse a document from any supported source.
* :func:`detect_spec_kind` -- Tell an AsyncAPI document from an OpenAPI one.
* :func:`validate_asyncapi_version` -- Check and return the ``asyncapi``
  version string, rejecting versions the walkers do not understand.
* :func:`default_root_name` -- Root asset name derived from a file name.
"""

from __future__ import annotations

import json
import sys
from pathlib import Path
from typing import Any

import httpx
import yaml

from apicatalog.exceptions import SpecParseError


def load_document(source: str) -> dict[str, Any]:
    """Load an API spec from URL, file path, or stdin ('-').

    Supports JSON and YAML formats.
    Auto-detects format from content/extension.

    Args:
        source: A URL (http/https), file path, or '-' for stdin.

    Returns:
        The parsed document as a dictionary.

    Raises:
        SpecParseError: If the source cannot be loaded or parsed.
    """
    if source == "-":
        return _load_from_stdin()
    elif source.startswith(("http://", "https://")):
        return _load_from_url(source)
    else:
        return _load_from_file(source)


def _load_from_stdin() -> dict[str, Any]:
    try:
        content = sys.stdin.read()
    except OSError as exc:
        raise SpecParseError(f"Failed to read from stdin: {exc}") from exc

    if not content.strip():
        raise SpecParseError("No input received from stdin")

    return parse_content(content, hint="stdin")


def _load_from_url(url: str) -> dict[str, Any]:
    """Fetch a document from URL. Supports JSON and YAML responses."""
    try:
        response = httpx.get(url, timeout=30.0, follow_redirects=True)
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise SpecParseError(
            f"HTTP {exc.response.status_code} fetching spec from {url}"
        ) from exc
    except httpx.RequestError as exc:
        raise SpecParseError(f"Failed to fetch spec from {url}: {exc}") from exc

    content_type = response.headers.get("content-type", "")
    hint = ""
    if "json" in content_type:
        hint = "json"
    elif "yaml" in content_type or "yml" in content_type:
        hint = "yaml"

    return parse_content(response.text, hint=hint)


def _load_from_file(path: str) -> dict[str, Any]:
    """Load a document from a local file.

    Supports .json, .yaml, and .yml extensions. Falls back to content-based
    detection if the extension is not recognized.
    """
    file_path = Path(path)
    if not file_path.is_file():
        raise SpecParseError(f"Spec file not found: {path}")

    try:
        content = file_path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SpecParseError(f"Failed to read spec file {path}: {exc}") from exc

    if not content.strip():
        raise SpecParseError(f"Spec file is empty: {path}")

    suffix = file_path.suffix.lower()
    hint = ""
    if suffix == ".json":
        hint = "json"
    elif suffix in (".yaml", ".yml"):
        hint = "yaml"

    return parse_content(content, hint=hint)


def parse_content(content: str, hint: str = "") -> dict[str, Any]:
    """Parse content as JSON or YAML.

    Tries JSON first (unless hint is 'yaml'), then falls back to YAML.
    Valid JSON is also valid YAML, but JSON parsing is stricter and faster.

    Args:
        content: The raw string content.
        hint: Optional format hint ('json' or 'yaml').

    Raises:
        SpecParseError: If the content cannot be parsed as either format, or
            does not hold a mapping at the top level.
    """
    json_error: Exception | None = None
    yaml_error: Exception | None = None

    if hint != "yaml":
        try:
            result = json.loads(content)
        except json.JSONDecodeError as exc:
            json_error = exc
            if hint == "json":
                raise SpecParseError(f"Invalid JSON: {exc}") from exc
        else:
            return _require_mapping(result)

    try:
        result = yaml.safe_load(content)
    except yaml.YAMLError as exc:
        yaml_error = exc
    else:
        return _require_mapping(result)

    msg = "Failed to parse spec as JSON or YAML"
    if json_error:
        msg += f"\n  JSON error: {json_error}"
    if yaml_error:
        msg += f"\n  YAML error: {yaml_error}"
    raise SpecParseError(msg)


def _require_mapping(result: Any) -> dict[str, Any]:
    if not isinstance(result, dict):
        raise SpecParseError(
            "Spec must be a JSON/YAML object (got "
            f"{type(result).__name__ if result is not None else 'empty document'})"
        )
    return result


def detect_spec_kind(document: dict[str, Any]) -> str:
    """Return ``"asyncapi"`` or ``"openapi"`` depending on the version field.

    Raises:
        SpecParseError: If the document declares neither.
    """
    if document.get("asyncapi") is not None:
        return "asyncapi"
    if document.get("openapi") is not None:
        return "openapi"
    raise SpecParseError(
        "Missing 'asyncapi' or 'openapi' field. Is this an API specification?"
    )


def validate_asyncapi_version(document: dict[str, Any]) -> str:
    """Validate and return the AsyncAPI version string.

    Supports AsyncAPI 2.x, whose channel/operation layout the walkers
    mirror.

    Raises:
        SpecParseError: If the version is missing or not a 2.x version.
    """
    version = document.get("asyncapi")
    if version is None:
        raise SpecParseError(
            "Missing 'asyncapi' field. Is this an AsyncAPI 2.x document?"
        )

    version_str = str(version)
    if version_str.startswith("2."):
        return version_str

    raise SpecParseError(
        f"Unsupported AsyncAPI version: {version_str}. "
        "Only AsyncAPI 2.x documents are supported."
    )


def default_root_name(source: str) -> str:
    """Root asset name for *source*: its file name up to the first dot.

    ``specs/slack_events_api.json`` gives ``slack_events_api``.

    Raises:
        SpecParseError: When *source* is stdin and no name can be derived.
    """
    if source == "-":
        raise SpecParseError("A root name (--root) is required when reading stdin")
    name = Path(source.rstrip("/")).name
    stem = name.split(".", 1)[0]
    if not stem:
        raise SpecParseError(f"Cannot derive a root name from {source!r}")
    return stem
