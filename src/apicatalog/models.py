"""Canonical Pydantic models shared across all apicatalog modules.

The models fall into two groups:

**Catalog wire models** -- the JSON shapes exchanged with the metadata
catalog and produced by the import walker:
    :class:`AssetKind`, :class:`Asset`, and :class:`DataType`.

**Configuration models** -- serialised as JSON in the user's config
directory: :class:`CatalogConfig` and :class:`GlobalConfig`.

Wire models use camelCase aliases (``assetDataType``, ``complexType``) with
``populate_by_name`` so that Python code can use snake_case attribute names.
Identifier references (``parent``, ``assetDataType``) are integers in Python
and strings on the wire; both forms are accepted on input.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Catalog wire models ---


class AssetKind(str, enum.Enum):
    """Catalog asset type identifiers.

    Schema properties, tags, and scopes are stored as JSON properties; every
    other document construct is a JSON element. The kind lets export tell a
    schema property apart from a schema sub-element carrying the same label.
    """

    ELEMENT = "24"
    PROPERTY = "25"


def _blank_id_to_none(value: Any) -> Any:
    if value in (None, "", 0, "0"):
        return None
    return value


class Asset(BaseModel):
    """A node in the catalog graph, created for one document construct.

    ``label`` is the export discriminant and matches the document field name
    the asset came from (``info``, ``channels``, ``message``) or the map key
    for named members (a channel name, a schema property name).

    ``comment`` is the *side channel*: the canonical JSON object of every
    document field the asset does not model explicitly, or the bare scalar
    value of a simple leaf. It is empty when nothing is left over.

    ``asset_data_type`` references a :class:`DataType`; it marks primitive
    typing (``string``, ``integer``, ``boolean``, ``array``) and membership
    of a reusable ``#/components/...`` definition.

    Example::

        Asset(name="heartbeat", label="heartbeat", parent=12)
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[int] = None
    name: str
    label: str
    description: Optional[str] = None
    asset_type: AssetKind = Field(default=AssetKind.ELEMENT, alias="assetType")
    asset_data_type: Optional[int] = Field(default=None, alias="assetDataType")
    comment: str = ""
    parent: Optional[int] = None
    data_element_auto_assigned: bool = Field(
        default=False, alias="dataElementAutoAssigned"
    )
    is_disabled: bool = Field(default=False, alias="isDisabled")
    version: Optional[str] = None

    @field_validator("parent", "asset_data_type", mode="before")
    @classmethod
    def _normalise_reference(cls, value: Any) -> Any:
        return _blank_id_to_none(value)

    @field_validator("asset_type", mode="before")
    @classmethod
    def _normalise_kind(cls, value: Any) -> Any:
        if isinstance(value, int):
            return str(value)
        return value

    @field_validator("comment", mode="before")
    @classmethod
    def _normalise_comment(cls, value: Any) -> Any:
        return "" if value is None else value

    @property
    def is_property(self) -> bool:
        """Whether this asset is a JSON property rather than a JSON element."""
        return self.asset_type == AssetKind.PROPERTY

    def to_payload(self) -> dict[str, Any]:
        """Serialise for a catalog POST body.

        Uses wire aliases, drops unset optional fields, omits empty
        ``comment``/``description``, and renders identifier references as
        strings the way the catalog expects them.
        """
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        for key in ("parent", "assetDataType"):
            if key in data:
                data[key] = str(data[key])
        for key in ("comment", "description"):
            if not data.get(key):
                data.pop(key, None)
        return data


class DataType(BaseModel):
    """A deduplicated type record in the catalog.

    Either a basic primitive (``name`` is ``string``, ``integer``,
    ``boolean`` or ``array``) or a reusable component whose ``name`` is its
    canonical path such as ``#/components/schemas/Pet``. At most one record
    exists per name within a catalog dataset.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[int] = None
    name: str
    label: str = ""
    description: Optional[str] = None
    built_in: bool = Field(default=False, alias="builtIn")
    complex_type: bool = Field(default=False, alias="complexType")

    def to_payload(self) -> dict[str, Any]:
        """Serialise for a catalog POST body."""
        data = self.model_dump(mode="json", by_alias=True, exclude_none=True)
        if not data.get("label"):
            data["label"] = self.name
        return data


# --- Configuration models ---


class CatalogConfig(BaseModel):
    """Connection settings for the metadata catalog REST API.

    The REST base URL is ``url`` + ``basepath``. Data types live under
    ``<dataspace>/<dataset>/datatype`` relative to it; assets under
    ``asset``.

    The password may be given literally or through ``password_source``
    (``env:VAR``, ``file:/path`` or ``prompt``); see
    :func:`~apicatalog.config.resolve_credential`.
    """

    url: Optional[str] = Field(
        default=None, description="Catalog REST host, e.g. https://host"
    )
    basepath: str = Field(default="", description="REST base path appended to url")
    dataspace: str = Field(default="Tabula", description="Catalog dataspace name")
    dataset: str = Field(default="Tabula", description="Catalog dataset name")
    user: Optional[str] = Field(default=None, description="Technical user name")
    password: Optional[str] = None
    password_source: Optional[str] = Field(
        default=None, description="Credential source: env:VAR, file:/path, prompt"
    )
    timeout: float = Field(default=5.0, description="Request timeout in seconds")

    @property
    def base_url(self) -> str:
        """Full REST base URL (``url`` followed by ``basepath``)."""
        return f"{self.url or ''}{self.basepath}".rstrip("/")


class GlobalConfig(BaseModel):
    """User-wide configuration persisted at ``~/.config/apicatalog/config.json``.

    Loaded and saved by :func:`~apicatalog.config.load_global_config` and
    :func:`~apicatalog.config.save_global_config`. See
    :func:`~apicatalog.config.resolve_config` for the precedence chain.
    """

    catalog: CatalogConfig = Field(default_factory=CatalogConfig)
    export_format: str = Field(
        default="json", description="Default export format: json or yaml"
    )
