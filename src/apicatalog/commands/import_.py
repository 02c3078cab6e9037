"""Import command -- load an API spec into the catalog.

Reads an AsyncAPI 2.x document (JSON or YAML, file, URL, or stdin) and
creates its asset graph under a root asset. The root asset name defaults to
the input file name up to its first dot. With ``--dry-run`` the graph is
built in memory and printed instead of being written to the catalog.

OpenAPI documents are only listed; see :mod:`apicatalog.mapping.openapi`.
"""

from __future__ import annotations

from typing import Optional

import typer

from apicatalog.catalog.memory import MemoryCatalogStore
from apicatalog.output import finish, info, print_table, suggest


def import_command(
    ctx: typer.Context,
    input_file: str = typer.Option(
        ..., "--input", "-i", help="Spec file, URL, or '-' for stdin."
    ),
    root: Optional[str] = typer.Option(
        None, "--root", "-r", help="Name of the root asset to create."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Build the asset graph in memory and print it."
    ),
) -> None:
    """Import an API spec into the catalog.

    Example::

        apicatalog import -i specs/streetlights.yaml
        apicatalog import -i - -r streetlights --dry-run < streetlights.json
    """
    from apicatalog.commands import context
    from apicatalog.document import (
        default_root_name,
        detect_spec_kind,
        load_document,
        validate_asyncapi_version,
    )
    from apicatalog.mapping import import_asyncapi_spec, import_openapi_spec

    with context.handle_errors():
        document = load_document(input_file)
        if detect_spec_kind(document) == "openapi":
            info(f"Read openapi spec version {document['openapi']}")
            import_openapi_spec(document)
            return

        version = validate_asyncapi_version(document)
        info(f"Read asyncapi spec version {version}")
        root_name = root or default_root_name(input_file)

        if dry_run:
            store = MemoryCatalogStore()
            importer = import_asyncapi_spec(document, root_name, store)
            _print_assets(store)
            finish(
                f"Dry run: {importer.created} assets would be created "
                f"under root '{root_name}'"
            )
            return

        with context.open_catalog(ctx) as catalog:
            importer = import_asyncapi_spec(document, root_name, catalog)
        finish(
            f"Imported {importer.created} assets under root '{root_name}' "
            f"({importer.root_id})"
        )
        suggest(f"Export it back with: apicatalog export -r {root_name}")


def _print_assets(store: MemoryCatalogStore) -> None:
    """Print the in-memory asset graph as a table."""
    type_names = {data_type.id: data_type.name for data_type in store.data_types}
    rows = [
        [
            str(asset.id),
            "" if asset.parent is None else str(asset.parent),
            "property" if asset.is_property else "element",
            asset.label,
            type_names.get(asset.asset_data_type, ""),
        ]
        for asset in store.assets
    ]
    print_table(["id", "parent", "kind", "label", "type"], rows, title="Assets")
