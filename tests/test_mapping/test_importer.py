"""Tests for the import walker."""

from __future__ import annotations

import json
from typing import Any, Optional

import pytest

from apicatalog.catalog.memory import MemoryCatalogStore
from apicatalog.exceptions import ShapeError
from apicatalog.mapping.importer import AsyncAPIImporter, import_asyncapi_spec
from apicatalog.mapping.registry import TypeRegistry
from apicatalog.models import Asset, AssetKind


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _child(store: MemoryCatalogStore, parent: Asset, label: str) -> Asset:
    matches = [c for c in store.find_children(parent.id) if c.label == label]
    assert len(matches) == 1, f"expected one '{label}' under '{parent.label}', got {matches}"
    return matches[0]


def _path(store: MemoryCatalogStore, root: str, *labels: str) -> Asset:
    asset = store.find_asset_by_name(root)
    assert asset is not None
    for label in labels:
        asset = _child(store, asset, label)
    return asset


def _type_name(store: MemoryCatalogStore, asset: Asset) -> Optional[str]:
    if asset.asset_data_type is None:
        return None
    record = store.find_data_type_by_id(asset.asset_data_type)
    return record.name if record else None


def _import(store: MemoryCatalogStore, document: dict[str, Any], root: str = "api") -> AsyncAPIImporter:
    return import_asyncapi_spec(document, root, store)


@pytest.fixture(autouse=True)
def _quiet(quiet_output) -> None:
    """All importer tests run with quiet output."""


# ---------------------------------------------------------------------------
# Scenarios
# ---------------------------------------------------------------------------


class TestHeartbeat:
    def test_asset_tree(self, store: MemoryCatalogStore, heartbeat_doc) -> None:
        importer = _import(store, heartbeat_doc, root="heartbeat")

        root = store.find_asset_by_name("heartbeat")
        assert root is not None
        assert root.id == importer.root_id
        assert root.parent is None
        assert root.comment == ""

        version = _path(store, "heartbeat", "info", "version")
        assert version.comment == "1.0.0"
        assert _type_name(store, version) == "string"

        payload = _path(
            store, "heartbeat", "channels", "heartbeat", "subscribe", "message", "payload"
        )
        assert _type_name(store, payload) == "string"
        assert payload.comment == ""

    def test_asyncapi_leaf(self, store: MemoryCatalogStore, heartbeat_doc) -> None:
        _import(store, heartbeat_doc)
        leaf = _path(store, "api", "asyncapi")
        assert leaf.comment == "2.0.0"
        assert _type_name(store, leaf) == "string"

    def test_created_count(self, store: MemoryCatalogStore, heartbeat_doc) -> None:
        importer = _import(store, heartbeat_doc)
        # root, asyncapi, info, version, channels, heartbeat, subscribe, message, payload
        assert importer.created == 9
        assert len(store.assets) == 9

    def test_parents_created_before_children(self, store: MemoryCatalogStore, heartbeat_doc) -> None:
        _import(store, heartbeat_doc)
        for asset in store.assets:
            if asset.parent is not None:
                assert asset.parent < asset.id


class TestPing:
    def test_one_type_for_shared_ref(self, store: MemoryCatalogStore, ping_doc) -> None:
        _import(store, ping_doc)

        names = [dt.name for dt in store.data_types]
        assert names.count("#/components/messages/Ping") == 1

        ping_id = store.find_data_type_by_name("#/components/messages/Ping")
        a = _path(store, "api", "channels", "ping/a", "publish", "message")
        b = _path(store, "api", "channels", "ping/b", "subscribe", "message")
        assert a.asset_data_type == ping_id
        assert b.asset_data_type == ping_id

    def test_use_site_is_not_walked(self, store: MemoryCatalogStore, ping_doc) -> None:
        _import(store, ping_doc)
        message = _path(store, "api", "channels", "ping/a", "publish", "message")
        assert store.find_children(message.id) == []
        assert message.comment == ""

    def test_definition_carries_own_type(self, store: MemoryCatalogStore, ping_doc) -> None:
        _import(store, ping_doc)
        definition = _path(store, "api", "components", "messages", "Ping")
        assert _type_name(store, definition) == "#/components/messages/Ping"
        payload = _child(store, definition, "payload")
        assert _type_name(store, payload) == "string"


# ---------------------------------------------------------------------------
# Schemas
# ---------------------------------------------------------------------------


def _schema_doc(schema: dict[str, Any]) -> dict[str, Any]:
    return {
        "asyncapi": "2.0.0",
        "info": {"version": "1"},
        "channels": {"c": {"publish": {"message": {"payload": schema}}}},
    }


class TestSchema:
    def test_object_with_properties(self, store: MemoryCatalogStore) -> None:
        _import(store, _schema_doc({"type": "object", "properties": {"a": {"type": "integer"}}}))
        payload = _path(store, "api", "channels", "c", "publish", "message", "payload")

        assert json.loads(payload.comment) == {"type": "object"}
        assert payload.asset_data_type is None
        prop = _child(store, payload, "a")
        assert prop.asset_type == AssetKind.PROPERTY
        assert _type_name(store, prop) == "integer"
        assert prop.comment == ""

    def test_nested_properties(self, store: MemoryCatalogStore) -> None:
        schema = {
            "type": "object",
            "properties": {
                "outer": {
                    "type": "object",
                    "description": "nested",
                    "properties": {"inner": {"type": "boolean"}},
                }
            },
        }
        _import(store, _schema_doc(schema))
        outer = _path(store, "api", "channels", "c", "publish", "message", "payload", "outer")
        assert outer.description == "nested"
        inner = _child(store, outer, "inner")
        assert inner.is_property
        assert _type_name(store, inner) == "boolean"

    def test_array_items(self, store: MemoryCatalogStore) -> None:
        _import(store, _schema_doc({"type": "array", "items": {"type": "string"}}))
        payload = _path(store, "api", "channels", "c", "publish", "message", "payload")
        assert _type_name(store, payload) == "array"
        items = _child(store, payload, "items")
        assert items.asset_type == AssetKind.ELEMENT
        assert _type_name(store, items) == "string"

    def test_unmodeled_keywords_in_side_channel(self, store: MemoryCatalogStore) -> None:
        _import(store, _schema_doc({"type": "string", "format": "date-time", "maxLength": 30}))
        payload = _path(store, "api", "channels", "c", "publish", "message", "payload")
        assert json.loads(payload.comment) == {"format": "date-time", "maxLength": 30}

    def test_non_basic_type_stays_in_side_channel(self, store: MemoryCatalogStore) -> None:
        _import(store, _schema_doc({"type": "number"}))
        payload = _path(store, "api", "channels", "c", "publish", "message", "payload")
        assert payload.asset_data_type is None
        assert json.loads(payload.comment) == {"type": "number"}

    def test_x_examples_leaf(self, store: MemoryCatalogStore) -> None:
        _import(store, _schema_doc({"type": "string", "x-examples": {"e": "on"}}))
        payload = _path(store, "api", "channels", "c", "publish", "message", "payload")
        examples = _child(store, payload, "x-examples")
        assert json.loads(examples.comment) == {"e": "on"}

    def test_empty_properties_kept_in_side_channel(self, store: MemoryCatalogStore) -> None:
        _import(store, _schema_doc({"type": "object", "properties": {}}))
        payload = _path(store, "api", "channels", "c", "publish", "message", "payload")
        assert json.loads(payload.comment) == {"properties": {}, "type": "object"}

    def test_boolean_property_schema_kept_in_side_channel(
        self, store: MemoryCatalogStore, capsys
    ) -> None:
        schema = {"type": "object", "properties": {"anything": True, "id": {"type": "string"}}}
        _import(store, _schema_doc(schema))
        payload = _path(store, "api", "channels", "c", "publish", "message", "payload")

        assert store.find_children(payload.id) == []
        assert json.loads(payload.comment) == {
            "properties": {"anything": True, "id": {"type": "string"}},
            "type": "object",
        }
        err = capsys.readouterr().err
        assert "#/channels/c/publish/message/payload/properties: property 'anything'" in err
        assert "keeping it as an unmodeled field" in err


# ---------------------------------------------------------------------------
# Components and references
# ---------------------------------------------------------------------------


class TestComponents:
    def test_non_mapping_components_is_shape_error(self, store: MemoryCatalogStore) -> None:
        doc = {"asyncapi": "2.0.0", "components": ["schemas"]}
        with pytest.raises(ShapeError, match="components"):
            _import(store, doc)

    def test_unknown_category_preserved(self, store: MemoryCatalogStore, capsys) -> None:
        doc = {
            "asyncapi": "2.0.0",
            "components": {
                "schemas": {"A": {"type": "string"}},
                "correlationIds": {"cid": {"location": "$message.header#/id"}},
            },
        }
        _import(store, doc)
        components = _path(store, "api", "components")
        assert json.loads(components.comment) == {
            "correlationIds": {"cid": {"location": "$message.header#/id"}}
        }
        assert [c.label for c in store.find_children(components.id)] == ["schemas"]
        assert "correlationIds" in capsys.readouterr().err

    def test_categories_imported_in_fixed_order(self, store: MemoryCatalogStore, streetlights_doc) -> None:
        _import(store, streetlights_doc)
        components = _path(store, "api", "components")
        assert [c.label for c in store.find_children(components.id)] == [
            "schemas",
            "parameters",
            "messageTraits",
            "operationTraits",
            "messages",
            "securitySchemes",
        ]

    def test_members_sorted_by_name(self, store: MemoryCatalogStore, streetlights_doc) -> None:
        _import(store, streetlights_doc)
        schemas = _path(store, "api", "components", "schemas")
        labels = [c.label for c in store.find_children(schemas.id)]
        assert labels == sorted(labels)

    def test_component_type_keeps_schema_type_in_side_channel(self, store: MemoryCatalogStore, streetlights_doc) -> None:
        _import(store, streetlights_doc)
        sent_at = _path(store, "api", "components", "schemas", "sentAt")
        assert _type_name(store, sent_at) == "#/components/schemas/sentAt"
        assert json.loads(sent_at.comment) == {"format": "date-time", "type": "string"}
        assert sent_at.description == "Date and time when the message was sent."

    def test_property_ref_typed_with_component(self, store: MemoryCatalogStore, streetlights_doc) -> None:
        _import(store, streetlights_doc)
        prop = _path(store, "api", "components", "schemas", "lightMeasuredPayload", "sentAt")
        assert prop.is_property
        assert _type_name(store, prop) == "#/components/schemas/sentAt"
        assert store.find_children(prop.id) == []

    def test_every_component_has_one_type(self, store: MemoryCatalogStore, streetlights_doc) -> None:
        from apicatalog.document.pointer import collect_component_paths

        _import(store, streetlights_doc)
        names = [dt.name for dt in store.data_types]
        for path in collect_component_paths(streetlights_doc):
            assert names.count(path) == 1

    def test_definition_site_alias_kept_in_side_channel(self, store: MemoryCatalogStore) -> None:
        doc = {
            "asyncapi": "2.0.0",
            "components": {
                "schemas": {
                    "A": {"type": "string"},
                    "B": {"$ref": "#/components/schemas/A"},
                }
            },
        }
        _import(store, doc)
        alias = _path(store, "api", "components", "schemas", "B")
        assert _type_name(store, alias) == "#/components/schemas/B"
        assert json.loads(alias.comment) == {"$ref": "#/components/schemas/A"}


class TestReferences:
    def test_channel_ref_is_typed_and_not_walked(self, store: MemoryCatalogStore) -> None:
        doc = {
            "asyncapi": "2.0.0",
            "channels": {"x": {"$ref": "#/components/channels/X"}},
            "components": {"channels": {"X": {"publish": {}}}},
        }
        _import(store, doc)
        channel = _path(store, "api", "channels", "x")
        assert _type_name(store, channel) == "#/components/channels/X"
        assert channel.comment == ""
        assert store.find_children(channel.id) == []

    def test_non_component_ref_stays_in_side_channel(self, store: MemoryCatalogStore, capsys) -> None:
        _import(store, _schema_doc({"$ref": "common.json#/Payload"}))
        payload = _path(store, "api", "channels", "c", "publish", "message", "payload")
        assert payload.asset_data_type is None
        assert json.loads(payload.comment) == {"$ref": "common.json#/Payload"}
        assert "does not point into" in capsys.readouterr().err

    def test_dangling_component_ref_stays_in_side_channel(self, store: MemoryCatalogStore, capsys) -> None:
        _import(store, _schema_doc({"$ref": "#/components/schemas/Missing"}))
        payload = _path(store, "api", "channels", "c", "publish", "message", "payload")
        assert payload.asset_data_type is None
        assert json.loads(payload.comment) == {"$ref": "#/components/schemas/Missing"}
        assert store.find_data_type_by_name("#/components/schemas/Missing") is None
        assert "no matching component" in capsys.readouterr().err

    def test_traits_keep_order(self, store: MemoryCatalogStore) -> None:
        doc = {
            "asyncapi": "2.0.0",
            "channels": {
                "c": {
                    "publish": {
                        "traits": [
                            {"$ref": "#/components/operationTraits/b"},
                            {"description": "inline"},
                            {"$ref": "#/components/operationTraits/a"},
                        ]
                    }
                }
            },
            "components": {"operationTraits": {"a": {}, "b": {}}},
        }
        _import(store, doc)
        traits = _path(store, "api", "channels", "c", "publish", "traits")
        assert _type_name(store, traits) == "array"
        children = sorted(store.find_children(traits.id), key=lambda a: a.id)
        assert [c.label for c in children] == ["trait", "trait", "trait"]
        assert [_type_name(store, c) for c in children] == [
            "#/components/operationTraits/b",
            None,
            "#/components/operationTraits/a",
        ]
        assert children[1].description == "inline"


# ---------------------------------------------------------------------------
# Other constructs
# ---------------------------------------------------------------------------


class TestInfo:
    def test_contact_is_opaque_blob(self, store: MemoryCatalogStore, streetlights_doc) -> None:
        _import(store, streetlights_doc)
        info = _path(store, "api", "info")
        contact = _child(store, info, "contact")
        assert contact.name == "API Support"
        assert json.loads(contact.comment) == streetlights_doc["info"]["contact"]
        assert store.find_children(contact.id) == []

    def test_info_side_channel(self, store: MemoryCatalogStore, streetlights_doc) -> None:
        _import(store, streetlights_doc)
        info = _path(store, "api", "info")
        assert info.description.startswith("The Smartylighting")
        assert set(json.loads(info.comment)) == {"title", "license"}

    def test_contact_without_name(self, store: MemoryCatalogStore) -> None:
        _import(store, {"asyncapi": "2.0.0", "info": {"contact": {"email": "a@b.c"}}})
        contact = _path(store, "api", "info", "contact")
        assert contact.name == "contact"

    def test_empty_version_not_created(self, store: MemoryCatalogStore) -> None:
        _import(store, {"asyncapi": "2.0.0", "info": {"version": ""}})
        info = _path(store, "api", "info")
        assert [c.label for c in store.find_children(info.id)] == []
        assert json.loads(info.comment) == {"version": ""}

    def test_numeric_version_is_untyped_json(self, store: MemoryCatalogStore) -> None:
        _import(store, {"asyncapi": "2.0.0", "info": {"version": 2}})
        version = _path(store, "api", "info", "version")
        assert version.comment == "2"
        assert version.asset_data_type is None


class TestRoot:
    def test_unmodeled_root_fields(self, store: MemoryCatalogStore, streetlights_doc) -> None:
        _import(store, streetlights_doc)
        root = store.find_asset_by_name("api")
        assert json.loads(root.comment) == {
            "defaultContentType": "application/json",
            "x-audience": "internal",
        }

    def test_top_level_order(self, store: MemoryCatalogStore, streetlights_doc) -> None:
        _import(store, streetlights_doc)
        root = store.find_asset_by_name("api")
        labels = [c.label for c in store.find_children(root.id)]
        assert labels == [
            "id",
            "asyncapi",
            "info",
            "components",
            "servers",
            "channels",
            "tags",
            "externalDocs",
        ]

    def test_non_mapping_servers_reported_and_preserved(self, store: MemoryCatalogStore, capsys) -> None:
        _import(store, {"asyncapi": "2.0.0", "servers": ["mqtt://broker"]})
        root = store.find_asset_by_name("api")
        assert json.loads(root.comment) == {"servers": ["mqtt://broker"]}
        assert "servers" in capsys.readouterr().err


class TestTags:
    def test_tags_are_properties(self, store: MemoryCatalogStore, streetlights_doc) -> None:
        _import(store, streetlights_doc)
        tags = _path(store, "api", "tags")
        assert _type_name(store, tags) == "array"
        children = sorted(store.find_children(tags.id), key=lambda a: a.id)
        assert [c.label for c in children] == ["lights", "metrics"]
        assert all(c.is_property for c in children)
        assert children[0].description == "Street light control"
        assert json.loads(children[1].comment) == {
            "externalDocs": {"url": "https://docs.smartylighting.example/metrics"}
        }

    def test_tag_without_name_skipped(self, store: MemoryCatalogStore, capsys) -> None:
        _import(store, {"asyncapi": "2.0.0", "tags": [{"description": "anonymous"}]})
        tags = _path(store, "api", "tags")
        assert store.find_children(tags.id) == []
        assert "needs a string 'name'" in capsys.readouterr().err


class TestSecurity:
    def test_flow_scopes(self, store: MemoryCatalogStore, streetlights_doc) -> None:
        _import(store, streetlights_doc)
        flow = _path(
            store, "api", "components", "securitySchemes", "supportedOauthFlows", "flows", "implicit"
        )
        assert json.loads(flow.comment) == {"authorizationUrl": "https://authserver.example/auth"}
        scopes = _child(store, flow, "scopes")
        leaves = {c.label: c for c in store.find_children(scopes.id)}
        assert set(leaves) == {"streetlights:on", "streetlights:off", "streetlights:dim"}
        assert leaves["streetlights:dim"].description == "Ability to dim the lights"
        assert leaves["streetlights:dim"].is_property

    def test_server_security_requirements(self, store: MemoryCatalogStore, streetlights_doc) -> None:
        _import(store, streetlights_doc)
        security = _path(store, "api", "servers", "production", "security")
        requirements = sorted(store.find_children(security.id), key=lambda a: a.id)
        assert [r.label for r in requirements] == ["requirement", "requirement"]

        api_key = _child(store, requirements[0], "apiKey")
        assert store.find_children(api_key.id) == []

        oauth = _child(store, requirements[1], "supportedOauthFlows")
        scopes = sorted(store.find_children(oauth.id), key=lambda a: a.id)
        assert [s.comment for s in scopes] == [
            "streetlights:on",
            "streetlights:off",
            "streetlights:dim",
        ]
        assert all(s.is_property and _type_name(store, s) == "string" for s in scopes)


class TestImporterObject:
    def test_explicit_registry(self, store: MemoryCatalogStore, heartbeat_doc) -> None:
        registry = TypeRegistry(store)
        registry.initialize()
        importer = AsyncAPIImporter(store, registry)
        root_id = importer.import_spec(heartbeat_doc, "hb")
        assert root_id == importer.root_id
        assert store.get_asset(root_id).name == "hb"

    def test_root_name_and_label(self, store: MemoryCatalogStore, heartbeat_doc) -> None:
        _import(store, heartbeat_doc, root="slack_events_api")
        root = store.find_asset_by_name("slack_events_api")
        assert root.label == "slack_events_api"
        assert root.asset_type == AssetKind.ELEMENT
