"""apicatalog -- Import AsyncAPI specs into a metadata catalog and export them back.

This package decomposes an AsyncAPI 2.x document into a graph of catalog
*assets* (one asset per document construct, linked to its parent) plus a
deduplicated registry of *data types* for primitives and reusable
``#/components/...`` definitions. The same graph can later be walked to
rebuild the original document.

Typical workflow::

    apicatalog import -i streetlights.yaml       # create the asset graph
    apicatalog export -r streetlights -f yaml    # rebuild the document
    apicatalog clean -i streetlights.yaml        # remove root and component types

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models for catalog assets, data types, and config.
    config: XDG-aware configuration and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
