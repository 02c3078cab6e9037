"""The narrow CRUD contract the mapping core needs from a catalog.

The import and export walkers, the type registry, and cleanup talk to the
catalog only through :class:`CatalogStore`. Two implementations ship with
the package:

* :class:`~apicatalog.catalog.client.CatalogClient` -- the metadata catalog
  REST API over :mod:`httpx`.
* :class:`~apicatalog.catalog.memory.MemoryCatalogStore` -- an in-process
  graph used for ``import --dry-run`` and tests.

Every operation may raise a transport or store error
(:class:`~apicatalog.exceptions.ServerError`,
:class:`~apicatalog.exceptions.ConnectionError_`,
:class:`~apicatalog.exceptions.AuthError`); lookups by name return ``None``
for "not found" instead of raising.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional

from apicatalog.models import Asset, DataType


class CatalogStore(ABC):
    """Persistence contract for assets and data types."""

    # -- assets ---------------------------------------------------------- #

    @abstractmethod
    def create_asset(self, asset: Asset) -> int:
        """Persist *asset* and return its store-assigned id."""

    @abstractmethod
    def find_asset_by_name(self, name: str) -> Optional[Asset]:
        """Return the first asset named *name*, or ``None``."""

    @abstractmethod
    def find_root_asset(self, name: str) -> Optional[Asset]:
        """Return the top-level asset named *name*, or ``None``.

        Child assets are named after their labels, so a root must be told
        apart from them by having no parent.
        """

    @abstractmethod
    def find_children(self, parent_id: int) -> list[Asset]:
        """Return the assets whose parent is *parent_id* (possibly empty)."""

    @abstractmethod
    def delete_asset(self, asset_id: int) -> None:
        """Delete the asset with id *asset_id* (children are not touched)."""

    # -- data types ------------------------------------------------------ #

    @abstractmethod
    def create_data_type(self, name: str, complex_type: bool) -> int:
        """Create a data type named *name* and return its id."""

    @abstractmethod
    def find_data_type_by_name(self, name: str) -> Optional[int]:
        """Return the id of the data type named *name*, or ``None``."""

    @abstractmethod
    def find_data_type_by_id(self, type_id: int) -> Optional[DataType]:
        """Return the data type with id *type_id*, or ``None``."""

    @abstractmethod
    def delete_data_type(self, type_id: int) -> None:
        """Delete the data type with id *type_id*."""
