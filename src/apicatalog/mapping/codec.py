"""Side-channel codec for document fields an asset does not model.

Every asset carries a ``comment`` string. For structured constructs it holds
a canonical JSON object of the leftover fields (sorted keys, four-space
indent, non-ASCII kept); for simple leaves it holds the scalar value itself.
Callers must know which form they hold: :func:`decode_extra` treats a bare
scalar as "no fields", and :func:`decode_value` turns it back into a value.
"""

from __future__ import annotations

import json
from collections.abc import Iterable, Mapping
from typing import Any, Union

from apicatalog.document.nodes import ObjectNode


def _canonical(value: Any) -> str:
    return json.dumps(value, indent=4, sort_keys=True, ensure_ascii=False)


def encode_extra(
    fields: Union[ObjectNode, Mapping[str, Any]],
    exclude: Iterable[str] = (),
) -> str:
    """Encode every entry of *fields* whose key is not in *exclude*.

    Args:
        fields: A decoded :class:`ObjectNode` or a plain mapping.
        exclude: Keys the asset models explicitly.

    Returns:
        Canonical JSON text, or ``""`` when nothing is left over.
    """
    if isinstance(fields, ObjectNode):
        fields = fields.to_python()
    skip = set(exclude)
    extra = {key: value for key, value in fields.items() if key not in skip}
    if not extra:
        return ""
    return _canonical(extra)


def decode_extra(text: str) -> dict[str, Any]:
    """Decode a structured side channel back into document fields.

    Empty text, text that is not JSON, and JSON that is not an object all
    decode to ``{}``.
    """
    if not text:
        return {}
    try:
        value = json.loads(text)
    except ValueError:
        return {}
    return value if isinstance(value, dict) else {}


def encode_value(value: Any) -> tuple[str, bool]:
    """Encode a scalar for a simple leaf.

    Returns:
        ``(text, is_string)``. Strings are stored verbatim and flagged so the
        leaf gets typed ``string``; everything else is stored as JSON.
    """
    if isinstance(value, str):
        return value, True
    return _canonical(value), False


def decode_value(text: str, is_string: bool) -> Any:
    """Inverse of :func:`encode_value`.

    Text that should be JSON but does not parse is returned unchanged.
    """
    if is_string:
        return text
    try:
        return json.loads(text)
    except ValueError:
        return text
