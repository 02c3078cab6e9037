"""JSON pointers and ``$ref`` dereferencing within a single document.

Canonical paths such as ``#/components/schemas/Pet`` name reusable component
definitions. They double as the names of component data types in the
catalog, so this module is the single place that builds and parses them.

Only **internal** references (those starting with ``#/``) are supported.
External file or URL references raise
:class:`~apicatalog.exceptions.SpecParseError` when dereferencing is
required.

Public helpers:

* :func:`component_path` / :func:`split_pointer` -- build and parse pointers
  with RFC 6901 escaping (``~0`` for ``~``, ``~1`` for ``/``).
* :func:`get_ref` -- lenient lookup returning ``None`` when absent.
* :func:`resolve_pointer` -- strict lookup raising on missing targets.
* :func:`dereference` -- replace ``$ref`` dicts with their targets, with
  circular-reference detection.
* :func:`collect_component_paths` -- every canonical path a document defines.
"""

from __future__ import annotations

import copy
from typing import Any

from apicatalog.exceptions import SpecParseError

COMPONENTS_PREFIX = "#/components/"


def escape_segment(segment: str) -> str:
    """Escape one pointer segment (``~`` -> ``~0``, ``/`` -> ``~1``)."""
    return segment.replace("~", "~0").replace("/", "~1")


def unescape_segment(segment: str) -> str:
    """Reverse :func:`escape_segment`."""
    return segment.replace("~1", "/").replace("~0", "~")


def component_path(category: str, name: str) -> str:
    """Canonical path of a component member, e.g. ``#/components/schemas/Pet``."""
    return f"{COMPONENTS_PREFIX}{escape_segment(category)}/{escape_segment(name)}"


def is_component_ref(ref: str) -> bool:
    """Whether *ref* points into the reusable ``#/components/`` branch."""
    return ref.startswith(COMPONENTS_PREFIX)


def split_pointer(ref: str) -> list[str]:
    """Split an internal ``#/...`` pointer into unescaped segments.

    Raises:
        SpecParseError: If the reference is external (does not start with ``#``).
    """
    if ref == "#":
        return []
    if not ref.startswith("#/"):
        raise SpecParseError(
            f"External $ref not supported: {ref}. "
            "Only internal references (#/...) are handled."
        )
    return [unescape_segment(segment) for segment in ref[2:].split("/")]


def get_ref(node: Any, ref: str) -> Any:
    """Return the value at *ref* inside *node*, or ``None`` if any segment is missing."""
    try:
        segments = split_pointer(ref)
    except SpecParseError:
        return None
    current = node
    for segment in segments:
        if not isinstance(current, dict):
            return None
        current = current.get(segment)
        if current is None:
            return None
    return current


def resolve_pointer(root: dict[str, Any], ref: str) -> Any:
    """Resolve a single ``$ref`` string against the root document.

    Raises:
        SpecParseError: If the reference is external, or if any segment in
            the pointer path does not exist in the document.
    """
    current: Any = root
    for segment in split_pointer(ref):
        if isinstance(current, dict):
            if segment not in current:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': key '{segment}' not found at path"
                )
            current = current[segment]
        elif isinstance(current, list):
            try:
                current = current[int(segment)]
            except (ValueError, IndexError) as exc:
                raise SpecParseError(
                    f"Cannot resolve $ref '{ref}': invalid array index '{segment}'"
                ) from exc
        else:
            raise SpecParseError(
                f"Cannot resolve $ref '{ref}': cannot navigate into {type(current).__name__}"
            )
    return current


def dereference(root: dict[str, Any], value: Any = None, deep: bool = True) -> Any:
    """Replace ``$ref`` pointers with the objects they point to.

    Works on a deep copy; the input is never mutated. With ``deep=True``
    the referenced definitions are themselves dereferenced. A reference that
    is already being expanded further up the current branch is left as its
    ``{"$ref": ...}`` dict, so component definitions that refer to each
    other circularly terminate.

    Args:
        root: The document used as the lookup target.
        value: The subtree to dereference. Defaults to the whole document.
        deep: Expand references found inside referenced definitions too.

    Raises:
        SpecParseError: On external references or dangling pointers.
    """
    source = copy.deepcopy(root)
    target = source if value is None else copy.deepcopy(value)
    return _expand(target, source, frozenset(), deep)


def _expand(obj: Any, root: dict[str, Any], seen: frozenset[str], deep: bool) -> Any:
    if isinstance(obj, dict):
        ref = obj.get("$ref")
        if isinstance(ref, str):
            if ref in seen:
                return obj
            resolved = resolve_pointer(root, ref)
            if not deep:
                return resolved
            return _expand(resolved, root, seen | {ref}, deep)
        return {key: _expand(item, root, seen, deep) for key, item in obj.items()}
    if isinstance(obj, list):
        return [_expand(item, root, seen, deep) for item in obj]
    return obj


def collect_component_paths(document: dict[str, Any]) -> list[str]:
    """Canonical paths of every member of every ``components`` category.

    Members of categories whose value is not a map are ignored. Paths are
    returned in lexicographic order.
    """
    components = document.get("components")
    paths: list[str] = []
    if not isinstance(components, dict):
        return paths
    for category, members in components.items():
        if not isinstance(members, dict):
            continue
        for name in members:
            paths.append(component_path(str(category), str(name)))
    return sorted(paths)

