"""In-process implementation of :class:`~apicatalog.catalog.store.CatalogStore`.

Backs ``apicatalog import --dry-run`` (the asset graph is built and printed
without touching the catalog) and the test suite. It mimics the catalog's
observable behaviour: integer ids assigned in creation order, children
returned in creation order, data type names unique per store, and
children rejected when their parent does not exist.
"""

from __future__ import annotations

import itertools
from typing import Optional

from apicatalog.catalog.store import CatalogStore
from apicatalog.exceptions import NotFoundError, ServerError
from apicatalog.models import Asset, DataType


class MemoryCatalogStore(CatalogStore):
    """Dict-backed catalog.

    Assets and data types share one id sequence, the way the catalog hands
    out primary keys. Stored models are copies, so callers cannot mutate the
    graph behind the store's back.

    Example::

        store = MemoryCatalogStore()
        root_id = store.create_asset(Asset(name="api", label="api"))
        store.find_children(root_id)  # []
    """

    def __init__(self) -> None:
        self._ids = itertools.count(1)
        self._assets: dict[int, Asset] = {}
        self._types: dict[int, DataType] = {}

    # -- assets ---------------------------------------------------------- #

    def create_asset(self, asset: Asset) -> int:
        if asset.parent is not None and asset.parent not in self._assets:
            raise NotFoundError(f"Parent asset {asset.parent} does not exist")
        asset_id = next(self._ids)
        self._assets[asset_id] = asset.model_copy(update={"id": asset_id})
        return asset_id

    def find_asset_by_name(self, name: str) -> Optional[Asset]:
        for asset in self._assets.values():
            if asset.name == name:
                return asset.model_copy()
        return None

    def find_root_asset(self, name: str) -> Optional[Asset]:
        for asset in self._assets.values():
            if asset.parent is None and asset.name == name:
                return asset.model_copy()
        return None

    def find_children(self, parent_id: int) -> list[Asset]:
        return [
            asset.model_copy()
            for asset in self._assets.values()
            if asset.parent == parent_id
        ]

    def delete_asset(self, asset_id: int) -> None:
        if self._assets.pop(asset_id, None) is None:
            raise NotFoundError(f"Asset {asset_id} does not exist")

    def get_asset(self, asset_id: int) -> Optional[Asset]:
        """Return a copy of the asset with id *asset_id*, or ``None``."""
        asset = self._assets.get(asset_id)
        return asset.model_copy() if asset is not None else None

    @property
    def assets(self) -> list[Asset]:
        """Every stored asset, in creation order."""
        return [asset.model_copy() for asset in self._assets.values()]

    # -- data types ------------------------------------------------------ #

    def create_data_type(self, name: str, complex_type: bool) -> int:
        if self.find_data_type_by_name(name) is not None:
            raise ServerError(f"HTTP 409: data type '{name}' already exists")
        type_id = next(self._ids)
        self._types[type_id] = DataType(
            id=type_id, name=name, label=name, complex_type=complex_type
        )
        return type_id

    def find_data_type_by_name(self, name: str) -> Optional[int]:
        for type_id, data_type in self._types.items():
            if data_type.name == name:
                return type_id
        return None

    def find_data_type_by_id(self, type_id: int) -> Optional[DataType]:
        data_type = self._types.get(type_id)
        return data_type.model_copy() if data_type is not None else None

    def delete_data_type(self, type_id: int) -> None:
        if self._types.pop(type_id, None) is None:
            raise NotFoundError(f"Data type {type_id} does not exist")

    @property
    def data_types(self) -> list[DataType]:
        """Every stored data type, in creation order."""
        return [data_type.model_copy() for data_type in self._types.values()]
