"""Catalog persistence -- the store contract and its implementations.

The mapping core never talks HTTP directly; it receives a
:class:`CatalogStore` and calls its CRUD operations.

Classes:
    :class:`CatalogStore` -- abstract contract.
    :class:`CatalogClient` -- REST implementation backed by :class:`httpx.Client`.
    :class:`MemoryCatalogStore` -- in-process implementation for dry runs
    and tests.

Example::

    from apicatalog.catalog import CatalogClient

    with CatalogClient(config.catalog, password=secret) as store:
        root = store.find_root_asset("streetlights")
"""

from apicatalog.catalog.client import CatalogClient
from apicatalog.catalog.memory import MemoryCatalogStore
from apicatalog.catalog.store import CatalogStore

__all__ = ["CatalogStore", "CatalogClient", "MemoryCatalogStore"]
