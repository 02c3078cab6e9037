"""Per-run registry of catalog data types.

A :class:`TypeRegistry` maps type names to catalog data type ids. Names are
either one of the basic primitives in :data:`BASIC_TYPES` or the canonical
path of a reusable component (``#/components/messages/Ping``). One registry
is built for each import or export run and handed to the walkers, so no
state survives from one run to the next.

Import side::

    registry = TypeRegistry(store)
    registry.initialize()
    ping = registry.resolve("#/components/messages/Ping", is_complex=True)

Export side only reads, through :meth:`TypeRegistry.lookup`.
"""

from __future__ import annotations

from typing import Optional

from apicatalog.catalog.store import CatalogStore
from apicatalog.document.pointer import is_component_ref
from apicatalog.exceptions import ServerError
from apicatalog.models import DataType
from apicatalog.output import debug, warning

BASIC_TYPES = ("string", "integer", "boolean", "array")


class TypeRegistry:
    """Find-or-create cache of data type ids, keyed by name.

    Args:
        store: Catalog store the data types live in.
    """

    def __init__(self, store: CatalogStore) -> None:
        self._store = store
        self._ids: dict[str, int] = {}
        self._records: dict[int, Optional[DataType]] = {}

    def initialize(self) -> None:
        """Register the basic primitive types before any document type."""
        for name in BASIC_TYPES:
            self.resolve(name, is_complex=False)

    def resolve(self, path: str, is_complex: bool) -> Optional[int]:
        """Return the data type id for *path*, creating the record if needed.

        Repeated calls for the same name return the cached id without
        contacting the store.

        Args:
            path: Basic type name or canonical component path.
            is_complex: Whether a newly created record is a component type.

        Returns:
            The data type id, or ``None`` when the catalog refused to create
            the record. The caller then leaves the asset untyped.
        """
        cached = self._ids.get(path)
        if cached is not None:
            return cached

        type_id = self._store.find_data_type_by_name(path)
        if type_id is None:
            try:
                type_id = self._store.create_data_type(path, is_complex)
            except ServerError as exc:
                warning(f"Could not create data type {path}: {exc}")
                return None
            debug(f"Created data type {path} ({type_id})")

        self._ids[path] = type_id
        return type_id

    def basic(self, name: str) -> Optional[int]:
        """Id of an initialised basic type, or ``None``."""
        return self._ids.get(name)

    def lookup(self, type_id: int) -> Optional[DataType]:
        """Fetch the data type with id *type_id*, caching the answer."""
        if type_id not in self._records:
            record = self._store.find_data_type_by_id(type_id)
            self._records[type_id] = record
            if record is not None and record.name not in self._ids:
                self._ids[record.name] = type_id
        return self._records[type_id]

    def name_of(self, type_id: Optional[int]) -> Optional[str]:
        """Name of the data type with id *type_id*, or ``None`` if unknown."""
        if type_id is None:
            return None
        record = self.lookup(type_id)
        return record.name if record is not None else None

    @staticmethod
    def is_component(path: Optional[str]) -> bool:
        """Whether *path* names a reusable component type."""
        return bool(path) and is_component_ref(path)

    def paths(self) -> list[str]:
        """Every name registered in this run, sorted."""
        return sorted(self._ids)
