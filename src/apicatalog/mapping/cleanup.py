"""Remove a previously imported AsyncAPI document from the catalog.

Cleanup deletes the data types named by the document's ``components``
section and then the root asset. It does not walk the asset tree: child
assets of the root are left in the catalog, so cleanup only partially
undoes an import.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from apicatalog.catalog.store import CatalogStore
from apicatalog.document.pointer import collect_component_paths
from apicatalog.output import debug, info


@dataclass
class CleanupReport:
    """What :func:`clean_asyncapi_spec` removed."""

    deleted_types: list[str] = field(default_factory=list)
    missing_types: list[str] = field(default_factory=list)
    root_deleted: bool = False


def clean_asyncapi_spec(
    document: dict[str, Any], root: str, store: CatalogStore
) -> CleanupReport:
    """Delete the component data types of *document* and its root asset.

    Data types and the root asset that cannot be found are skipped. Store
    errors propagate.

    Args:
        document: The parsed AsyncAPI document that was imported.
        root: Name of the root asset created by the import.
        store: Catalog to delete from.
    """
    report = CleanupReport()
    for path in collect_component_paths(document):
        type_id = store.find_data_type_by_name(path)
        if type_id is None:
            debug(f"Data type {path} not found, skipping")
            report.missing_types.append(path)
            continue
        store.delete_data_type(type_id)
        info(f"Deleted data type {path} ({type_id})")
        report.deleted_types.append(path)

    asset = store.find_root_asset(root)
    if asset is None or asset.id is None:
        debug(f"Root asset '{root}' not found, skipping")
        return report
    store.delete_asset(asset.id)
    info(f"Deleted root asset '{root}' ({asset.id})")
    report.root_deleted = True
    return report
