"""Encode exported documents as JSON or YAML.

JSON uses a four-space indent; YAML keeps the key order produced by the
export walker and emits block style with unicode preserved.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from apicatalog.exceptions import InvalidUsageError

FORMATS = ("json", "yaml")


def encode_document(data: Any, fmt: str = "json") -> str:
    """Serialise *data* in the requested format.

    Raises:
        InvalidUsageError: For formats other than ``json`` and ``yaml``.
    """
    fmt = fmt.lower()
    if fmt == "json":
        return json.dumps(data, indent=4, ensure_ascii=False) + "\n"
    if fmt in ("yaml", "yml"):
        return yaml.safe_dump(
            data,
            sort_keys=False,
            allow_unicode=True,
            default_flow_style=False,
        )
    raise InvalidUsageError(
        f"Unsupported output format: {fmt}. Use one of: {', '.join(FORMATS)}"
    )


def write_document(data: Any, path: str | Path, fmt: str = "json") -> Path:
    """Encode *data* and write it to *path*, returning the path written."""
    target = Path(path)
    target.write_text(encode_document(data, fmt), encoding="utf-8")
    return target
