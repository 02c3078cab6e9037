"""The mapping core: AsyncAPI documents to catalog assets and back.

Sub-modules:

* :mod:`~apicatalog.mapping.registry` -- per-run data type registry.
* :mod:`~apicatalog.mapping.codec` -- side-channel encoding of unmodeled
  fields.
* :mod:`~apicatalog.mapping.importer` -- document -> asset graph.
* :mod:`~apicatalog.mapping.exporter` -- asset graph -> document.
* :mod:`~apicatalog.mapping.cleanup` -- delete an imported document.
* :mod:`~apicatalog.mapping.openapi` -- OpenAPI listing stub.

Typical usage::

    from apicatalog.mapping import import_asyncapi_spec, export_asyncapi_spec

    import_asyncapi_spec(document, "streetlights", store)
    restored = export_asyncapi_spec("streetlights", store)
"""

from apicatalog.mapping.cleanup import CleanupReport, clean_asyncapi_spec
from apicatalog.mapping.exporter import AsyncAPIExporter, export_asyncapi_spec
from apicatalog.mapping.importer import AsyncAPIImporter, import_asyncapi_spec
from apicatalog.mapping.openapi import clean_openapi_spec, import_openapi_spec
from apicatalog.mapping.registry import TypeRegistry

__all__ = [
    "TypeRegistry",
    "AsyncAPIImporter",
    "import_asyncapi_spec",
    "AsyncAPIExporter",
    "export_asyncapi_spec",
    "CleanupReport",
    "clean_asyncapi_spec",
    "import_openapi_spec",
    "clean_openapi_spec",
]
