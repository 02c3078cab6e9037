"""Config commands -- view and modify global configuration.

Provides the ``apicatalog config`` sub-command group for reading and
updating the user's global configuration file
(:class:`~apicatalog.models.GlobalConfig`). Settings are persisted in the
apicatalog config directory and supply the catalog connection defaults.
"""

from __future__ import annotations

import json

import typer

from apicatalog.output import error, info, print_data, success


config_app = typer.Typer(no_args_is_help=True)


@config_app.command("show")
def config_show(ctx: typer.Context) -> None:
    """Show the effective configuration.

    Resolves the config the other commands would use (files, environment,
    and global CLI options) and prints it as JSON. The password is masked.

    Example::

        apicatalog config show
        apicatalog --url https://catalog.example.com config show
    """
    from apicatalog.commands import context
    from apicatalog.config import get_config_dir

    with context.handle_errors():
        config = context.context_config(ctx)
    data = config.model_dump(mode="json")
    if data["catalog"].get("password"):
        data["catalog"]["password"] = "****"
    info(f"Config directory: {get_config_dir()}")
    print_data(json.dumps(data, indent=2))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(
        help="Config key (dot notation, e.g., 'catalog.url')."
    ),
    value: str = typer.Argument(help="Value to set."),
) -> None:
    """Set a configuration value.

    Uses dot notation for nested keys. The value is coerced to match the
    existing field's type (float or str). The updated config is validated
    against :class:`~apicatalog.models.GlobalConfig` before saving.

    Args:
        key: Dot-separated config key path (e.g. ``catalog.dataspace``).
        value: String value to set; coerced to the target field type.

    Raises:
        typer.Exit: With code 2 if the key path is invalid, the value
            cannot be coerced, or validation fails.

    Example::

        apicatalog config set catalog.url https://catalog.example.com
        apicatalog config set catalog.timeout 10
        apicatalog config set export_format yaml
    """
    from pydantic import ValidationError

    from apicatalog.config import load_global_config, save_global_config
    from apicatalog.models import GlobalConfig

    config = load_global_config()
    data = config.model_dump(mode="json")

    # Navigate the dot-separated key path.
    keys = key.split(".")
    target = data
    for k in keys[:-1]:
        if k not in target or not isinstance(target[k], dict):
            error(f"Invalid config key: {key}")
            raise typer.Exit(code=2)
        target = target[k]

    final_key = keys[-1]
    if final_key not in target or isinstance(target[final_key], dict):
        error(f"Unknown config key: {key}")
        raise typer.Exit(code=2)

    current = target[final_key]
    coerced: object = value
    if isinstance(current, float):
        try:
            coerced = float(value)
        except ValueError:
            error(f"Expected a number for {key}, got: {value}")
            raise typer.Exit(code=2) from None

    target[final_key] = coerced

    try:
        new_config = GlobalConfig.model_validate(data)
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=2) from None

    save_global_config(new_config)
    success(f"Set {key} = {coerced}")
