"""Clean command -- remove an imported API spec from the catalog."""

from __future__ import annotations

from typing import Optional

import typer

from apicatalog.output import info, success, warning


def clean_command(
    ctx: typer.Context,
    input_file: str = typer.Option(
        ..., "--input", "-i", help="The spec file that was imported."
    ),
    root: Optional[str] = typer.Option(
        None, "--root", "-r", help="Name of the root asset created from the file."
    ),
) -> None:
    """Delete an imported spec's component data types and root asset.

    Child assets of the root are not deleted.

    Example::

        apicatalog clean -i specs/streetlights.yaml
    """
    from apicatalog.commands import context
    from apicatalog.document import (
        default_root_name,
        detect_spec_kind,
        load_document,
        validate_asyncapi_version,
    )
    from apicatalog.mapping import clean_asyncapi_spec, clean_openapi_spec

    with context.handle_errors():
        document = load_document(input_file)
        if detect_spec_kind(document) == "openapi":
            info(f"Read openapi spec version {document['openapi']}")
            clean_openapi_spec(document)
            return

        version = validate_asyncapi_version(document)
        info(f"Read asyncapi spec version {version}")
        root_name = root or default_root_name(input_file)
        with context.open_catalog(ctx) as catalog:
            report = clean_asyncapi_spec(document, root_name, catalog)

        if not report.root_deleted:
            warning(f"Root asset '{root_name}' was not found")
        success(
            f"Deleted {len(report.deleted_types)} data types"
            + (f" and root asset '{root_name}'" if report.root_deleted else "")
        )
