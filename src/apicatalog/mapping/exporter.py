"""Export walker: catalog asset graph -> AsyncAPI document.

The inverse of :mod:`apicatalog.mapping.importer`. Starting from the root
asset, :class:`AsyncAPIExporter` queries children by parent id and
dispatches on each child's ``label``. Every rebuilt object gets the asset's
``description``, the fields of its side channel, and whatever its children
export to.

An asset typed with a ``#/components/...`` data type exports as a bare
``{"$ref": path}`` and its children are ignored, unless it is the component
definition itself, in which case it is expanded in full. Labels that mean
nothing at a given position are reported and skipped.

The graph is only read; no data types are created during export.
"""

from __future__ import annotations

from typing import Any, Callable, Optional

from apicatalog.catalog.store import CatalogStore
from apicatalog.exceptions import NotFoundError
from apicatalog.mapping.codec import decode_extra, decode_value
from apicatalog.mapping.registry import BASIC_TYPES, TypeRegistry
from apicatalog.models import Asset
from apicatalog.output import debug, warning


class AsyncAPIExporter:
    """Rebuilds an AsyncAPI document from the assets under one root.

    Args:
        store: Catalog to read from.
        registry: Type registry used to name data types by id. It does not
            need to be initialised.
    """

    def __init__(self, store: CatalogStore, registry: TypeRegistry) -> None:
        self._store = store
        self._registry = registry

    def export_spec(self, root: str) -> dict[str, Any]:
        """Export the document imported under the root asset *root*.

        Raises:
            NotFoundError: If no top-level asset named *root* exists.
        """
        asset = self._store.find_root_asset(root)
        if asset is None or asset.id is None:
            raise NotFoundError(f"Root asset '{root}' not found in the catalog")
        debug(f"Exporting root asset '{root}' ({asset.id})")

        handlers: dict[str, Callable[[Asset], Any]] = {
            "id": self._leaf,
            "asyncapi": self._leaf,
            "info": self._info,
            "components": self._components,
            "servers": self._servers,
            "channels": self._channels,
            "tags": self._tags,
            "externalDocs": self._external_docs,
        }
        document = self._dispatch(asset, handlers)
        return self._merge(document, asset)

    # ------------------------------------------------------------------ #
    # Helpers
    # ------------------------------------------------------------------ #

    def _children(self, asset: Asset) -> list[Asset]:
        """Children of *asset* in creation order."""
        if asset.id is None:
            return []
        children = self._store.find_children(asset.id)
        return sorted(children, key=lambda child: child.id or 0)

    def _dispatch(
        self, asset: Asset, handlers: dict[str, Callable[[Asset], Any]]
    ) -> dict[str, Any]:
        result = self._described(asset)
        for child in self._children(asset):
            handler = handlers.get(child.label)
            if handler is None:
                self._skip(child, asset)
                continue
            result[child.label] = handler(child)
        return result

    def _named(
        self, asset: Asset, walk: Callable[[Asset], Any]
    ) -> dict[str, Any]:
        """A map whose keys are the labels of *asset*'s children."""
        result = {child.label: walk(child) for child in self._children(asset)}
        return self._merge(result, asset)

    @staticmethod
    def _described(asset: Asset) -> dict[str, Any]:
        return {"description": asset.description} if asset.description else {}

    @staticmethod
    def _merge(result: dict[str, Any], asset: Asset) -> dict[str, Any]:
        for key, value in decode_extra(asset.comment).items():
            result.setdefault(key, value)
        return result

    @staticmethod
    def _skip(child: Asset, parent: Asset) -> None:
        warning(
            f"Skipping unrecognised asset '{child.label}' ({child.id}) "
            f"under '{parent.label}'"
        )

    def _type_name(self, asset: Asset) -> Optional[str]:
        return self._registry.name_of(asset.asset_data_type)

    def _reference(self, asset: Asset, definition: bool) -> Optional[dict[str, Any]]:
        """``{"$ref": path}`` for a component-typed use site, else ``None``."""
        if definition:
            return None
        name = self._type_name(asset)
        if self._registry.is_component(name):
            return {"$ref": name}
        return None

    def _leaf(self, asset: Asset) -> Any:
        return decode_value(asset.comment, self._type_name(asset) == "string")

    # ------------------------------------------------------------------ #
    # Top level
    # ------------------------------------------------------------------ #

    def _info(self, asset: Asset) -> dict[str, Any]:
        info = self._dispatch(
            asset,
            {
                "version": self._leaf,
                "contact": lambda child: decode_extra(child.comment),
            },
        )
        return self._merge(info, asset)

    def _external_docs(self, asset: Asset) -> dict[str, Any]:
        return self._merge(self._described(asset), asset)

    def _tags(self, asset: Asset) -> list[dict[str, Any]]:
        tags = []
        for child in self._children(asset):
            tag = {"name": child.label}
            tag.update(self._described(child))
            tags.append(self._merge(tag, child))
        return tags

    def _traits(self, asset: Asset, walk: Callable[[Asset], Any]) -> list[Any]:
        traits = []
        for child in self._children(asset):
            if child.label != "trait":
                self._skip(child, asset)
                continue
            traits.append(walk(child))
        return traits

    # ------------------------------------------------------------------ #
    # Components
    # ------------------------------------------------------------------ #

    def _components(self, asset: Asset) -> dict[str, Any]:
        walkers: dict[str, Callable[..., Any]] = {
            "schemas": self._schema,
            "parameters": self._parameter,
            "messageTraits": self._message_trait,
            "operationTraits": self._operation_trait,
            "messages": self._message,
            "securitySchemes": self._security_scheme,
        }
        components: dict[str, Any] = {}
        for category in self._children(asset):
            walk = walkers.get(category.label)
            if walk is None:
                self._skip(category, asset)
                continue
            components[category.label] = self._named(
                category, lambda member, walk=walk: walk(member, definition=True)
            )
        return self._merge(components, asset)

    def _schema(self, asset: Asset, definition: bool = False) -> dict[str, Any]:
        ref = self._reference(asset, definition)
        if ref is not None:
            return ref

        schema: dict[str, Any] = {}
        type_name = self._type_name(asset)
        if type_name in BASIC_TYPES:
            schema["type"] = type_name
        schema.update(self._described(asset))
        properties: dict[str, Any] = {}
        for child in self._children(asset):
            if child.is_property:
                properties[child.label] = self._schema(child)
            elif child.label == "items":
                schema["items"] = self._schema(child)
            elif child.label == "x-examples":
                schema["x-examples"] = self._leaf(child)
            else:
                self._skip(child, asset)
        if properties:
            schema["properties"] = properties
        return self._merge(schema, asset)

    # ------------------------------------------------------------------ #
    # Channels, operations, messages
    # ------------------------------------------------------------------ #

    def _channels(self, asset: Asset) -> dict[str, Any]:
        return self._named(asset, self._channel)

    def _channel(self, asset: Asset) -> dict[str, Any]:
        ref = self._reference(asset, definition=False)
        if ref is not None:
            return ref
        channel = self._dispatch(
            asset,
            {
                "parameters": lambda child: self._named(child, self._parameter),
                "subscribe": self._operation,
                "publish": self._operation,
            },
        )
        return self._merge(channel, asset)

    def _parameter(self, asset: Asset, definition: bool = False) -> dict[str, Any]:
        ref = self._reference(asset, definition)
        if ref is not None:
            return ref
        parameter = self._dispatch(asset, {"schema": self._schema})
        return self._merge(parameter, asset)

    def _operation(self, asset: Asset) -> dict[str, Any]:
        operation = self._dispatch(
            asset,
            {
                "tags": self._tags,
                "externalDocs": self._external_docs,
                "traits": lambda child: self._traits(child, self._operation_trait),
                "message": self._message,
            },
        )
        return self._merge(operation, asset)

    def _message(self, asset: Asset, definition: bool = False) -> dict[str, Any]:
        ref = self._reference(asset, definition)
        if ref is not None:
            return ref
        message = self._dispatch(
            asset,
            {
                "tags": self._tags,
                "externalDocs": self._external_docs,
                "traits": lambda child: self._traits(child, self._message_trait),
                "payload": self._schema,
                "headers": self._schema,
            },
        )
        return self._merge(message, asset)

    def _operation_trait(self, asset: Asset, definition: bool = False) -> dict[str, Any]:
        return self._trait(asset, definition, with_headers=False)

    def _message_trait(self, asset: Asset, definition: bool = False) -> dict[str, Any]:
        return self._trait(asset, definition, with_headers=True)

    def _trait(self, asset: Asset, definition: bool, with_headers: bool) -> dict[str, Any]:
        ref = self._reference(asset, definition)
        if ref is not None:
            return ref
        handlers: dict[str, Callable[[Asset], Any]] = {
            "tags": self._tags,
            "externalDocs": self._external_docs,
        }
        if with_headers:
            handlers["headers"] = self._schema
        return self._merge(self._dispatch(asset, handlers), asset)

    # ------------------------------------------------------------------ #
    # Security
    # ------------------------------------------------------------------ #

    def _security_scheme(self, asset: Asset, definition: bool = True) -> dict[str, Any]:
        scheme = self._dispatch(
            asset, {"flows": lambda child: self._named(child, self._flow)}
        )
        return self._merge(scheme, asset)

    def _flow(self, asset: Asset) -> dict[str, Any]:
        flow = self._dispatch(asset, {"scopes": self._scopes})
        return self._merge(flow, asset)

    def _scopes(self, asset: Asset) -> dict[str, str]:
        return self._named(asset, lambda scope: scope.description or "")

    def _servers(self, asset: Asset) -> dict[str, Any]:
        return self._named(asset, self._server)

    def _server(self, asset: Asset) -> dict[str, Any]:
        server = self._dispatch(asset, {"security": self._security})
        return self._merge(server, asset)

    def _security(self, asset: Asset) -> list[dict[str, Any]]:
        requirements = []
        for child in self._children(asset):
            if child.label != "requirement":
                self._skip(child, asset)
                continue
            requirement = {
                scheme.label: [self._leaf(scope) for scope in self._children(scheme)]
                for scheme in self._children(child)
            }
            requirements.append(self._merge(requirement, child))
        return requirements


def export_asyncapi_spec(root: str, store: CatalogStore) -> dict[str, Any]:
    """Export the document stored under the root asset *root*.

    Uses a fresh, uninitialised :class:`TypeRegistry`, so the export never
    creates data types.
    """
    registry = TypeRegistry(store)
    return AsyncAPIExporter(store, registry).export_spec(root)
