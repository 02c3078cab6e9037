"""Shared plumbing for commands that talk to the catalog.

The root callback in :mod:`apicatalog.app` stores the global connection
options in ``ctx.obj``. Commands turn them into an effective
:class:`~apicatalog.models.GlobalConfig` with :func:`context_config` and
open the catalog with :func:`open_catalog`.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator

import typer

from apicatalog.catalog.store import CatalogStore
from apicatalog.exceptions import ApicatalogError
from apicatalog.models import GlobalConfig
from apicatalog.output import error


def context_config(ctx: typer.Context) -> GlobalConfig:
    """Resolve (once per invocation) the config for the global CLI options."""
    from apicatalog.config import resolve_config

    obj = ctx.ensure_object(dict)
    config = obj.get("config")
    if config is None:
        config = resolve_config(
            config_file=obj.get("config_file"),
            cli_url=obj.get("url"),
            cli_user=obj.get("user"),
            cli_password=obj.get("password"),
        )
        obj["config"] = config
    return config


@contextmanager
def open_catalog(ctx: typer.Context) -> Iterator[CatalogStore]:
    """Open a REST connection to the configured catalog.

    Example::

        with open_catalog(ctx) as store:
            store.find_root_asset("streetlights")
    """
    from apicatalog.catalog.client import CatalogClient
    from apicatalog.config import resolve_password

    config = context_config(ctx)
    password = resolve_password(config)
    with CatalogClient(config.catalog, password=password) as client:
        yield client


@contextmanager
def handle_errors() -> Iterator[None]:
    """Report an :class:`ApicatalogError` and exit with its code."""
    try:
        yield
    except ApicatalogError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
