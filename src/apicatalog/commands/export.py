"""Export command -- rebuild an API spec from the catalog.

Walks the assets under a root asset and writes the reconstructed AsyncAPI
document as JSON or YAML. The output file defaults to ``<root>.<format>``;
``-o -`` writes to stdout instead.
"""

from __future__ import annotations

from typing import Optional

import typer

from apicatalog.output import finish, print_data


def export_command(
    ctx: typer.Context,
    root: str = typer.Option(..., "--root", "-r", help="Name of the root asset to export."),
    output_file: Optional[str] = typer.Option(
        None, "--output", "-o", help="Output file, or '-' for stdout."
    ),
    fmt: Optional[str] = typer.Option(
        None, "--format", "-f", help="Output format: json or yaml."
    ),
    dereference_refs: bool = typer.Option(
        False, "--dereference", help="Inline every $ref in the exported document."
    ),
) -> None:
    """Export an API spec from the catalog.

    Example::

        apicatalog export -r streetlights
        apicatalog export -r streetlights -f yaml -o -
    """
    from apicatalog.commands import context
    from apicatalog.document import encode_document, write_document
    from apicatalog.document.pointer import dereference
    from apicatalog.document.writer import FORMATS
    from apicatalog.exceptions import InvalidUsageError
    from apicatalog.mapping import export_asyncapi_spec

    with context.handle_errors():
        config = context.context_config(ctx)
        fmt = (fmt or config.export_format).lower()
        if fmt not in FORMATS:
            raise InvalidUsageError(
                f"Unsupported output format: {fmt}. Use one of: {', '.join(FORMATS)}"
            )

        with context.open_catalog(ctx) as catalog:
            document = export_asyncapi_spec(root, catalog)
        if dereference_refs:
            document = dereference(document)

        if output_file == "-":
            print_data(encode_document(document, fmt).rstrip("\n"))
            return
        path = write_document(document, output_file or f"{root}.{fmt}", fmt)
        finish(f"API spec exported in file {path}")
