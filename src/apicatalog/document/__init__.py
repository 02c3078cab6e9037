"""Document boundary -- load, decode, address, and write API spec documents.

This sub-package owns everything between the raw bytes of a spec file and
the mapping walkers:

* :mod:`~apicatalog.document.loader` -- I/O layer (URL, file, stdin) plus
  format detection and AsyncAPI version validation.
* :mod:`~apicatalog.document.nodes` -- tagged-variant node types the import
  walker dispatches on.
* :mod:`~apicatalog.document.pointer` -- ``#/...`` pointers, canonical
  component paths, and circular-safe ``$ref`` dereferencing.
* :mod:`~apicatalog.document.writer` -- JSON/YAML encoding of exported
  documents.

Typical usage::

    from apicatalog.document import load_document, decode_node

    raw = load_document("streetlights.yaml")
    root = decode_node(raw)
"""

from apicatalog.document.loader import (
    default_root_name,
    detect_spec_kind,
    load_document,
    validate_asyncapi_version,
)
from apicatalog.document.nodes import decode_node
from apicatalog.document.writer import encode_document, write_document

__all__ = [
    "load_document",
    "detect_spec_kind",
    "validate_asyncapi_version",
    "default_root_name",
    "decode_node",
    "encode_document",
    "write_document",
]
