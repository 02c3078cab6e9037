"""Import walker: AsyncAPI document -> catalog asset graph.

:class:`AsyncAPIImporter` walks a decoded document depth-first and creates
one asset per recognised construct, parent before child. Fields an asset
does not model go into its side channel (see :mod:`apicatalog.mapping.codec`)
so that :mod:`apicatalog.mapping.exporter` can rebuild the document.

Reusable definitions under ``components`` are registered as data types
named by their canonical path before their own asset is created. A use-site
``{"$ref": "#/components/..."}`` becomes an asset typed with that data type
and is not walked any further.

Top-level fields are imported in a fixed order: ``id``, ``asyncapi``,
``info``, ``components``, ``servers``, ``channels``, ``tags``,
``externalDocs``. Components come before anything that references them.
"""

from __future__ import annotations

from typing import Any, Callable, Optional, Union

from apicatalog.catalog.store import CatalogStore
from apicatalog.document.nodes import (
    ArrayNode,
    BoolNode,
    Node,
    NumberNode,
    ObjectNode,
    StringNode,
    decode_node,
    node_kind,
)
from apicatalog.document.pointer import (
    collect_component_paths,
    component_path,
    is_component_ref,
)
from apicatalog.exceptions import ShapeError
from apicatalog.mapping.codec import encode_extra, encode_value
from apicatalog.mapping.registry import BASIC_TYPES, TypeRegistry
from apicatalog.models import Asset, AssetKind
from apicatalog.output import debug, skipped, unmodeled

# Imported in this order so that schemas and traits are registered before
# the messages and channels that use them.
COMPONENT_CATEGORIES = (
    "schemas",
    "parameters",
    "messageTraits",
    "operationTraits",
    "messages",
    "securitySchemes",
)

_Kind = Union[type, tuple[type, ...]]
_SCALARS = (StringNode, NumberNode, BoolNode)


class _Claims:
    """Tracks which keys of one document object its asset models.

    Everything that is not claimed ends up in the side channel. A key whose
    value has the wrong shape is reported and left unclaimed, so it still
    survives the round trip.
    """

    def __init__(self, node: ObjectNode) -> None:
        self.node = node
        self.keys: set[str] = set()

    def take(self, key: str, kind: _Kind, what: str) -> Optional[Any]:
        value = self.node.get(key)
        if value is None:
            return None
        if not isinstance(value, kind):
            unmodeled(
                value.path, f"expected {what} for '{key}', got {node_kind(value)}"
            )
            return None
        self.keys.add(key)
        return value

    def claim(self, key: str) -> None:
        self.keys.add(key)

    def description(self) -> Optional[str]:
        value = self.node.get("description")
        if isinstance(value, StringNode) and value.value:
            self.keys.add("description")
            return value.value
        return None

    def scalar(self, key: str) -> Optional[Node]:
        """Claim a non-empty scalar; empty strings stay in the side channel."""
        value = self.node.get(key)
        if not isinstance(value, _SCALARS):
            if value is not None:
                unmodeled(
                    value.path,
                    f"expected a scalar for '{key}', got {node_kind(value)}",
                )
            return None
        if isinstance(value, StringNode) and not value.value:
            return None
        self.keys.add(key)
        return value

    def extra(self) -> str:
        return encode_extra(self.node, self.keys)


class AsyncAPIImporter:
    """Creates the asset graph for one AsyncAPI document.

    Args:
        store: Catalog the assets and data types are written to.
        registry: Type registry for this run. Must already be initialised
            with the basic types.

    Attributes:
        root_id: Id of the root asset once :meth:`import_spec` has run.
        created: Number of assets created so far.
    """

    def __init__(self, store: CatalogStore, registry: TypeRegistry) -> None:
        self._store = store
        self._registry = registry
        self._defined: set[str] = set()
        self.root_id: Optional[int] = None
        self.created = 0

    def import_spec(self, document: dict[str, Any], root: str) -> int:
        """Import *document* under a new root asset named *root*.

        Returns:
            The id of the root asset.

        Raises:
            ShapeError: When a required container has the wrong shape.
        """
        node = decode_node(document)
        if not isinstance(node, ObjectNode):
            raise ShapeError("AsyncAPI document must be an object", node.path)
        self._defined = set(collect_component_paths(document))

        claims = _Claims(node)
        identifiers = [(key, claims.scalar(key)) for key in ("id", "asyncapi")]
        info = claims.take("info", ObjectNode, "an object")
        components = node.get("components")
        if components is not None:
            if not isinstance(components, ObjectNode):
                raise ShapeError(
                    f"'components' must be a map, got {node_kind(components)}",
                    components.path,
                )
            claims.claim("components")
        servers = claims.take("servers", ObjectNode, "a map of servers")
        channels = claims.take("channels", ObjectNode, "a map of channels")
        tags = claims.take("tags", ArrayNode, "a list of tags")
        external_docs = claims.take("externalDocs", ObjectNode, "an object")

        root_id = self._create(root, None, comment=claims.extra())
        self.root_id = root_id
        for key, value in identifiers:
            if value is not None:
                self._leaf(key, value, root_id)
        if info is not None:
            self._info(info, root_id)
        if components is not None:
            self._components(components, root_id)
        if servers is not None:
            self._servers(servers, root_id)
        if channels is not None:
            self._channels(channels, root_id)
        if tags is not None:
            self._tags(tags, root_id)
        if external_docs is not None:
            self._external_docs(external_docs, root_id)
        return root_id

    # ------------------------------------------------------------------ #
    # Assets
    # ------------------------------------------------------------------ #

    def _create(
        self,
        label: str,
        parent: Optional[int],
        *,
        name: Optional[str] = None,
        description: Optional[str] = None,
        comment: str = "",
        data_type: Optional[int] = None,
        kind: AssetKind = AssetKind.ELEMENT,
    ) -> int:
        asset = Asset(
            name=name or label,
            label=label,
            description=description,
            comment=comment,
            asset_data_type=data_type,
            asset_type=kind,
            parent=parent,
        )
        asset_id = self._store.create_asset(asset)
        self.created += 1
        debug(f"Created asset '{label}' ({asset_id}) under {parent}")
        return asset_id

    def _leaf(
        self,
        label: str,
        value: Node,
        parent: int,
        *,
        name: Optional[str] = None,
        kind: AssetKind = AssetKind.ELEMENT,
    ) -> int:
        """A simple leaf: the value itself is the side channel."""
        text, is_string = encode_value(value.to_python())
        data_type = self._registry.basic("string") if is_string else None
        return self._create(
            label, parent, name=name, comment=text, data_type=data_type, kind=kind
        )

    def _members(self, node: ObjectNode, what: str) -> tuple[list[tuple[str, ObjectNode]], str]:
        """Split a map into object members and a side channel of the rest."""
        members: list[tuple[str, ObjectNode]] = []
        rest: dict[str, Any] = {}
        for key, value in node.sorted_items():
            if isinstance(value, ObjectNode):
                members.append((key, value))
            else:
                unmodeled(
                    value.path,
                    f"expected {what} '{key}' to be an object, got {node_kind(value)}",
                )
                rest[key] = value.to_python()
        return members, encode_extra(rest)

    def _reference(self, claims: _Claims) -> Optional[int]:
        """Data type of a use-site ``$ref``, claiming the key on success."""
        ref = claims.node.string("$ref")
        if ref is None:
            return None
        if not is_component_ref(ref):
            unmodeled(claims.node.path, f"$ref {ref} does not point into #/components/")
            return None
        if ref not in self._defined:
            unmodeled(
                claims.node.path, f"$ref {ref} has no matching component definition"
            )
            return None
        type_id = self._registry.resolve(ref, is_complex=True)
        if type_id is not None:
            claims.claim("$ref")
        return type_id

    # ------------------------------------------------------------------ #
    # Top level
    # ------------------------------------------------------------------ #

    def _info(self, node: ObjectNode, parent: int) -> None:
        claims = _Claims(node)
        description = claims.description()
        version = claims.scalar("version")
        contact = claims.take("contact", ObjectNode, "an object")
        info_id = self._create(
            "info", parent, description=description, comment=claims.extra()
        )
        if version is not None:
            self._leaf("version", version, info_id)
        if contact is not None:
            self._create(
                "contact",
                info_id,
                name=contact.string("name") or "contact",
                comment=encode_extra(contact),
            )

    def _external_docs(self, node: ObjectNode, parent: int) -> None:
        claims = _Claims(node)
        description = claims.description()
        self._create(
            "externalDocs", parent, description=description, comment=claims.extra()
        )

    def _tags(self, node: ArrayNode, parent: int) -> None:
        tags_id = self._create("tags", parent, data_type=self._registry.basic("array"))
        for item in node:
            name = item.string("name") if isinstance(item, ObjectNode) else None
            if not name:
                skipped(item.path, "a tag needs a string 'name'")
                continue
            claims = _Claims(item)
            claims.claim("name")
            description = claims.description()
            self._create(
                name,
                tags_id,
                description=description,
                comment=claims.extra(),
                kind=AssetKind.PROPERTY,
            )

    def _traits(
        self,
        node: ArrayNode,
        parent: int,
        walk: Callable[[str, ObjectNode, int], int],
    ) -> None:
        traits_id = self._create(
            "traits", parent, data_type=self._registry.basic("array")
        )
        for item in node:
            if not isinstance(item, ObjectNode):
                skipped(item.path, "a trait must be an object")
                continue
            walk("trait", item, traits_id)

    # ------------------------------------------------------------------ #
    # Components
    # ------------------------------------------------------------------ #

    def _components(self, node: ObjectNode, parent: int) -> None:
        walkers: dict[str, Callable[..., int]] = {
            "schemas": self._schema,
            "parameters": self._parameter,
            "messageTraits": self._message_trait,
            "operationTraits": self._operation_trait,
            "messages": self._message,
            "securitySchemes": self._security_scheme,
        }
        claims = _Claims(node)
        categories: list[tuple[str, ObjectNode]] = []
        for category in COMPONENT_CATEGORIES:
            members = claims.take(category, ObjectNode, "a map of components")
            if members is not None:
                categories.append((category, members))
        for category, value in node.sorted_items():
            if category not in walkers:
                unmodeled(
                    value.path,
                    f"unsupported components category '{category}'",
                )

        components_id = self._create("components", parent, comment=claims.extra())
        for category, members_node in categories:
            members, rest = self._members(members_node, category)
            category_id = self._create(category, components_id, comment=rest)
            walk = walkers[category]
            for name, member in members:
                path = component_path(category, name)
                type_id = self._registry.resolve(path, is_complex=True)
                walk(name, member, category_id, own_type=type_id)

    # ------------------------------------------------------------------ #
    # Schemas
    # ------------------------------------------------------------------ #

    def _schema(
        self,
        label: str,
        node: ObjectNode,
        parent: int,
        own_type: Optional[int] = None,
        kind: AssetKind = AssetKind.ELEMENT,
    ) -> int:
        """Walk a schema object.

        ``own_type`` is set for component definitions; its presence also
        means a ``$ref`` in the body is an alias kept in the side channel.
        """
        claims = _Claims(node)
        if own_type is None:
            ref_type = self._reference(claims)
            if ref_type is not None:
                return self._create(
                    label, parent, comment=claims.extra(), data_type=ref_type, kind=kind
                )

        data_type = own_type
        description = claims.description()
        schema_type = node.string("type")
        if own_type is None and schema_type in BASIC_TYPES:
            data_type = self._registry.basic(schema_type)
            if data_type is not None:
                claims.claim("type")
        properties = self._properties(node)
        if properties is not None:
            claims.claim("properties")
        items = claims.take("items", ObjectNode, "an object")
        examples = node.get("x-examples")
        if examples is not None:
            claims.claim("x-examples")

        schema_id = self._create(
            label,
            parent,
            description=description,
            comment=claims.extra(),
            data_type=data_type,
            kind=kind,
        )
        if properties is not None:
            for name, prop in properties.sorted_items():
                self._schema(name, prop, schema_id, kind=AssetKind.PROPERTY)
        if items is not None:
            self._schema("items", items, schema_id)
        if examples is not None:
            self._leaf("x-examples", examples, schema_id)
        return schema_id

    @staticmethod
    def _properties(node: ObjectNode) -> Optional[ObjectNode]:
        """The ``properties`` map when every member is a schema object.

        Boolean schemas and other non-object members cannot be walked, so
        such a map is reported and left whole in the side channel.
        """
        properties = node.object("properties")
        if properties is None or not len(properties):
            return None
        for name, prop in properties.sorted_items():
            if not isinstance(prop, ObjectNode):
                unmodeled(
                    properties.path,
                    f"property '{name}' is a {node_kind(prop)} schema, not an object",
                )
                return None
        return properties

    # ------------------------------------------------------------------ #
    # Channels, operations, messages
    # ------------------------------------------------------------------ #

    def _channels(self, node: ObjectNode, parent: int) -> None:
        members, rest = self._members(node, "channel")
        channels_id = self._create("channels", parent, comment=rest)
        for name, channel in members:
            self._channel(name, channel, channels_id)

    def _channel(self, name: str, node: ObjectNode, parent: int) -> int:
        claims = _Claims(node)
        ref_type = self._reference(claims)
        if ref_type is not None:
            return self._create(name, parent, comment=claims.extra(), data_type=ref_type)

        description = claims.description()
        parameters = claims.take("parameters", ObjectNode, "a map of parameters")
        operations = [
            (key, claims.take(key, ObjectNode, "an operation object"))
            for key in ("subscribe", "publish")
        ]
        channel_id = self._create(
            name, parent, description=description, comment=claims.extra()
        )
        if parameters is not None:
            members, rest = self._members(parameters, "parameter")
            parameters_id = self._create("parameters", channel_id, comment=rest)
            for param_name, param in members:
                self._parameter(param_name, param, parameters_id)
        for key, operation in operations:
            if operation is not None:
                self._operation(key, operation, channel_id)
        return channel_id

    def _parameter(
        self, name: str, node: ObjectNode, parent: int, own_type: Optional[int] = None
    ) -> int:
        claims = _Claims(node)
        if own_type is None:
            ref_type = self._reference(claims)
            if ref_type is not None:
                return self._create(
                    name, parent, comment=claims.extra(), data_type=ref_type
                )
        description = claims.description()
        schema = claims.take("schema", ObjectNode, "a schema object")
        param_id = self._create(
            name,
            parent,
            description=description,
            comment=claims.extra(),
            data_type=own_type,
        )
        if schema is not None:
            self._schema("schema", schema, param_id)
        return param_id

    def _operation(self, label: str, node: ObjectNode, parent: int) -> int:
        claims = _Claims(node)
        description = claims.description()
        tags = claims.take("tags", ArrayNode, "a list of tags")
        external_docs = claims.take("externalDocs", ObjectNode, "an object")
        traits = claims.take("traits", ArrayNode, "a list of traits")
        message = claims.take("message", ObjectNode, "a message object")

        operation_id = self._create(
            label, parent, description=description, comment=claims.extra()
        )
        if tags is not None:
            self._tags(tags, operation_id)
        if external_docs is not None:
            self._external_docs(external_docs, operation_id)
        if traits is not None:
            self._traits(traits, operation_id, self._operation_trait)
        if message is not None:
            self._message("message", message, operation_id)
        return operation_id

    def _message(
        self, label: str, node: ObjectNode, parent: int, own_type: Optional[int] = None
    ) -> int:
        claims = _Claims(node)
        if own_type is None:
            ref_type = self._reference(claims)
            if ref_type is not None:
                return self._create(
                    label, parent, comment=claims.extra(), data_type=ref_type
                )
        description = claims.description()
        tags = claims.take("tags", ArrayNode, "a list of tags")
        external_docs = claims.take("externalDocs", ObjectNode, "an object")
        traits = claims.take("traits", ArrayNode, "a list of traits")
        payload = claims.take("payload", ObjectNode, "a schema object")
        headers = claims.take("headers", ObjectNode, "a schema object")

        message_id = self._create(
            label,
            parent,
            description=description,
            comment=claims.extra(),
            data_type=own_type,
        )
        if tags is not None:
            self._tags(tags, message_id)
        if external_docs is not None:
            self._external_docs(external_docs, message_id)
        if traits is not None:
            self._traits(traits, message_id, self._message_trait)
        if payload is not None:
            self._schema("payload", payload, message_id)
        if headers is not None:
            self._schema("headers", headers, message_id)
        return message_id

    def _operation_trait(
        self, label: str, node: ObjectNode, parent: int, own_type: Optional[int] = None
    ) -> int:
        return self._trait(label, node, parent, own_type, with_headers=False)

    def _message_trait(
        self, label: str, node: ObjectNode, parent: int, own_type: Optional[int] = None
    ) -> int:
        return self._trait(label, node, parent, own_type, with_headers=True)

    def _trait(
        self,
        label: str,
        node: ObjectNode,
        parent: int,
        own_type: Optional[int],
        with_headers: bool,
    ) -> int:
        claims = _Claims(node)
        if own_type is None:
            ref_type = self._reference(claims)
            if ref_type is not None:
                return self._create(
                    label, parent, comment=claims.extra(), data_type=ref_type
                )
        description = claims.description()
        tags = claims.take("tags", ArrayNode, "a list of tags")
        external_docs = claims.take("externalDocs", ObjectNode, "an object")
        headers = None
        if with_headers:
            headers = claims.take("headers", ObjectNode, "a schema object")

        trait_id = self._create(
            label,
            parent,
            description=description,
            comment=claims.extra(),
            data_type=own_type,
        )
        if tags is not None:
            self._tags(tags, trait_id)
        if external_docs is not None:
            self._external_docs(external_docs, trait_id)
        if headers is not None:
            self._schema("headers", headers, trait_id)
        return trait_id

    # ------------------------------------------------------------------ #
    # Security
    # ------------------------------------------------------------------ #

    def _security_scheme(
        self, name: str, node: ObjectNode, parent: int, own_type: Optional[int] = None
    ) -> int:
        claims = _Claims(node)
        description = claims.description()
        flows = claims.take("flows", ObjectNode, "a map of OAuth flows")
        scheme_id = self._create(
            name,
            parent,
            description=description,
            comment=claims.extra(),
            data_type=own_type,
        )
        if flows is not None:
            members, rest = self._members(flows, "OAuth flow")
            flows_id = self._create("flows", scheme_id, comment=rest)
            for flow_name, flow in members:
                self._flow(flow_name, flow, flows_id)
        return scheme_id

    def _flow(self, name: str, node: ObjectNode, parent: int) -> None:
        claims = _Claims(node)
        scopes = claims.take("scopes", ObjectNode, "a map of scopes")
        flow_id = self._create(name, parent, comment=claims.extra())
        if scopes is None:
            return
        described: list[tuple[str, str]] = []
        rest: dict[str, Any] = {}
        for scope, text in scopes.sorted_items():
            if isinstance(text, StringNode):
                described.append((scope, text.value))
            else:
                rest[scope] = text.to_python()
        scopes_id = self._create("scopes", flow_id, comment=encode_extra(rest))
        for scope, text in described:
            self._create(
                scope, scopes_id, description=text or None, kind=AssetKind.PROPERTY
            )

    def _servers(self, node: ObjectNode, parent: int) -> None:
        members, rest = self._members(node, "server")
        servers_id = self._create("servers", parent, comment=rest)
        for name, server in members:
            claims = _Claims(server)
            description = claims.description()
            security = claims.take("security", ArrayNode, "a list of requirements")
            server_id = self._create(
                name, servers_id, description=description, comment=claims.extra()
            )
            if security is not None:
                self._security(security, server_id)

    def _security(self, node: ArrayNode, parent: int) -> None:
        array_type = self._registry.basic("array")
        security_id = self._create("security", parent, data_type=array_type)
        for requirement in node:
            if not isinstance(requirement, ObjectNode):
                skipped(requirement.path, "a security requirement must be an object")
                continue
            claims = _Claims(requirement)
            schemes = [
                (scheme, claims.take(scheme, ArrayNode, "a list of scopes"))
                for scheme in sorted(requirement.keys())
            ]
            requirement_id = self._create(
                "requirement", security_id, comment=claims.extra()
            )
            for scheme, scopes in schemes:
                if scopes is None:
                    continue
                scheme_id = self._create(scheme, requirement_id, data_type=array_type)
                for scope in scopes:
                    if not isinstance(scope, StringNode):
                        skipped(scope.path, "a scope must be a string")
                        continue
                    self._leaf(
                        "scope",
                        scope,
                        scheme_id,
                        name=scope.value or "scope",
                        kind=AssetKind.PROPERTY,
                    )


def import_asyncapi_spec(
    document: dict[str, Any], root: str, store: CatalogStore
) -> AsyncAPIImporter:
    """Import *document* under a root asset named *root*.

    Builds and initialises a fresh :class:`TypeRegistry` for the run.

    Returns:
        The importer, whose ``root_id`` and ``created`` attributes describe
        what was written.
    """
    registry = TypeRegistry(store)
    registry.initialize()
    importer = AsyncAPIImporter(store, registry)
    importer.import_spec(document, root)
    return importer
