"""Metadata catalog REST client.

This module provides :class:`CatalogClient`, the HTTP implementation of
:class:`~apicatalog.catalog.store.CatalogStore`. It wraps
:class:`httpx.Client` and layers on:

- **Basic auth** -- ``Authorization: Basic base64(user:password)`` when both
  credentials are configured.
- **Predicate queries** -- lookups by name or parent use the catalog's
  ``predicate=name='...'`` query parameter.
- **Error mapping** -- network failures and non-success statuses become
  typed :mod:`apicatalog.exceptions` errors.

Requests use a bounded timeout (five seconds by default) and are never
retried: a failed call aborts the construct being imported or exported and
propagates to the command.

Endpoint layout relative to ``CatalogConfig.base_url``::

    asset                                   POST, GET ?predicate=
    asset/{id}                              GET, DELETE
    {dataspace}/{dataset}/datatype          POST, GET ?predicate=
    {dataspace}/{dataset}/datatype/{id}     GET, DELETE
"""

from __future__ import annotations

import base64
from typing import Any, Optional

import httpx
from pydantic import ValidationError

from apicatalog.catalog.store import CatalogStore
from apicatalog.exceptions import (
    AuthError,
    ConnectionError_,
    InvalidUsageError,
    NotFoundError,
    ServerError,
)
from apicatalog.models import Asset, CatalogConfig, DataType
from apicatalog.output import get_output


def basic_auth_token(user: str, password: str) -> str:
    """Encode ``user:password`` for a Basic ``Authorization`` header."""
    return base64.b64encode(f"{user}:{password}".encode("utf-8")).decode("ascii")


def _quote(value: str) -> str:
    """Quote *value* for a catalog predicate, doubling embedded quotes."""
    return "'" + value.replace("'", "''") + "'"


class CatalogClient(CatalogStore):
    """Synchronous client for the metadata catalog REST API.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        config: Connection settings (URL, dataspace, dataset, user, timeout).
        password: Resolved password for ``config.user``. When either is
            missing no ``Authorization`` header is sent.

    Example::

        with CatalogClient(config, password="secret") as client:
            root = client.find_root_asset("streetlights")
    """

    def __init__(self, config: CatalogConfig, password: Optional[str] = None) -> None:
        if not config.url:
            raise InvalidUsageError(
                "Catalog URL is not configured. Pass --url or set APICATALOG_URL."
            )
        self._config = config
        self._auth_token: Optional[str] = None
        if config.user and password:
            self._auth_token = basic_auth_token(config.user, password)
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> CatalogClient:
        self._client = httpx.Client(
            base_url=self._config.base_url,
            timeout=self._config.timeout,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    @property
    def _datatype_path(self) -> str:
        return f"{self._config.dataspace}/{self._config.dataset}/datatype"

    # ------------------------------------------------------------------ #
    # Assets
    # ------------------------------------------------------------------ #

    def create_asset(self, asset: Asset) -> int:
        data = self._request("POST", "asset", json_body=asset.to_payload())
        created = self._parse(Asset, data, "asset")
        if created.id is None:
            raise ServerError(f"Catalog did not return an id for asset '{asset.name}'")
        return created.id

    def find_asset_by_name(self, name: str) -> Optional[Asset]:
        results = self._query("asset", f"name={_quote(name)}")
        if not results:
            return None
        return self._parse(Asset, results[0], "asset")

    def find_root_asset(self, name: str) -> Optional[Asset]:
        for item in self._query("asset", f"name={_quote(name)}"):
            asset = self._parse(Asset, item, "asset")
            if asset.parent is None:
                return asset
        return None

    def find_children(self, parent_id: int) -> list[Asset]:
        results = self._query("asset", f"parent={_quote(str(parent_id))}")
        return [self._parse(Asset, item, "asset") for item in results]

    def get_asset(self, asset_id: int) -> Asset:
        """Fetch a single asset by id."""
        data = self._request("GET", f"asset/{asset_id}")
        return self._parse(Asset, data, "asset")

    def delete_asset(self, asset_id: int) -> None:
        self._request("DELETE", f"asset/{asset_id}")

    # ------------------------------------------------------------------ #
    # Data types
    # ------------------------------------------------------------------ #

    def create_data_type(self, name: str, complex_type: bool) -> int:
        payload = DataType(name=name, label=name, complex_type=complex_type).to_payload()
        data = self._request("POST", self._datatype_path, json_body=payload)
        created = self._parse(DataType, data, "data type")
        if created.id is None:
            raise ServerError(f"Catalog did not return an id for data type '{name}'")
        return created.id

    def find_data_type_by_name(self, name: str) -> Optional[int]:
        results = self._query(self._datatype_path, f"name={_quote(name)}")
        if not results:
            return None
        return self._parse(DataType, results[0], "data type").id

    def find_data_type_by_id(self, type_id: int) -> Optional[DataType]:
        try:
            data = self._request("GET", f"{self._datatype_path}/{type_id}")
        except NotFoundError:
            return None
        return self._parse(DataType, data, "data type")

    def delete_data_type(self, type_id: int) -> None:
        self._request("DELETE", f"{self._datatype_path}/{type_id}")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _query(self, path: str, predicate: str) -> list[Any]:
        """Run a predicate query; a 404 means no match."""
        try:
            data = self._request("GET", path, params={"predicate": predicate})
        except NotFoundError:
            return []
        if data is None:
            return []
        if not isinstance(data, list):
            raise ServerError(
                f"Malformed catalog response for {path}: expected a list, "
                f"got {type(data).__name__}"
            )
        return data

    def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, str]] = None,
        json_body: Optional[dict[str, Any]] = None,
    ) -> Any:
        """Send one request and return the decoded JSON body (``None`` if empty).

        Raises:
            ConnectionError_: On network / timeout errors.
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On any other non-success status or a body that is
                not JSON.
        """
        assert self._client is not None, "Client not initialised -- use as context manager"

        headers = {"Accept": "application/json"}
        if json_body is not None:
            headers["Content-Type"] = "application/json; charset=utf-8"
        if self._auth_token:
            headers["Authorization"] = f"Basic {self._auth_token}"

        output = get_output()
        output.debug(f"{method} {self._config.base_url}/{path}")

        kwargs: dict[str, Any] = {"headers": headers}
        if params:
            kwargs["params"] = params
        if json_body is not None:
            kwargs["json"] = json_body

        try:
            response = self._client.request(method, path, **kwargs)
        except (httpx.ConnectError, httpx.TimeoutException, httpx.NetworkError) as exc:
            raise ConnectionError_(f"Failed {method} {path}: {exc}") from exc

        output.debug(f"Catalog {method} status: {response.status_code}")
        self._map_response_error(response, method, path)

        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as exc:
            raise ServerError(
                f"Malformed catalog response for {method} {path}: {exc}"
            ) from exc

    def _map_response_error(self, response: httpx.Response, method: str, path: str) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 300:
            return

        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200] if response.text else ""

        prefix = f"HTTP {method} {path} returned status {status}"
        full_msg = f"{prefix}: {msg}" if msg else prefix

        if status in (401, 403):
            raise AuthError(full_msg)
        if status == 404:
            raise NotFoundError(full_msg)
        raise ServerError(full_msg)

    @staticmethod
    def _parse(model: Any, data: Any, what: str) -> Any:
        try:
            return model.model_validate(data)
        except ValidationError as exc:
            raise ServerError(f"Malformed {what} in catalog response: {exc}") from exc
