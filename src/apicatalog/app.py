"""Typer application and CLI entry point for apicatalog.

This module wires together the top-level Typer application and registers
the built-in sub-commands (``import``, ``export``, ``clean``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
:class:`~apicatalog.exceptions.ApicatalogError` exits with the error's
code; any other exception is written to a crash log under the data
directory.

See Also:
    :mod:`apicatalog.config`: Configuration resolution.
    :mod:`apicatalog.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from apicatalog import __version__
from apicatalog.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="apicatalog",
    help="Import AsyncAPI specs into a metadata catalog and export them back.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

# ------------------------------------------------------------------ #
# Commands
# ------------------------------------------------------------------ #

from apicatalog.commands.clean import clean_command  # noqa: E402
from apicatalog.commands.config import config_app  # noqa: E402
from apicatalog.commands.export import export_command  # noqa: E402
from apicatalog.commands.import_ import import_command  # noqa: E402

app.command("import")(import_command)
app.command("export")(export_command)
app.command("clean")(clean_command)
app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"apicatalog {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    config_file: Optional[str] = typer.Option(
        None, "--config", help="Config file to layer over the global one."
    ),
    url: Optional[str] = typer.Option(
        None, "--url", help="Catalog REST host, e.g. https://catalog.example.com."
    ),
    user: Optional[str] = typer.Option(
        None, "--user", "-u", help="Catalog user name."
    ),
    password: Optional[str] = typer.Option(
        None, "--password", "-p", help="Catalog password."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Initialises the global :class:`~apicatalog.output.OutputManager` from
    CLI flags, and stores the connection options in the Typer context so
    that sub-commands can resolve the catalog config from ``ctx.obj``.

    Args:
        ctx: Typer invocation context.
        version: If ``True``, print the version string and exit.
        config_file: Explicit config file path.
        url: Catalog URL override (highest precedence).
        user: Catalog user override.
        password: Catalog password override.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential diagnostic output.
        verbose: Enable debug-level diagnostic output.
    """
    from apicatalog.output import OutputManager, set_output

    output = OutputManager(no_color=no_color, quiet=quiet, verbose=verbose)
    set_output(output)

    ctx.ensure_object(dict)
    ctx.obj["config_file"] = config_file
    ctx.obj["url"] = url
    ctx.obj["user"] = user
    ctx.obj["password"] = password


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path.

    Args:
        exc: The unhandled exception to log.

    Returns:
        Absolute path to the written crash log file.
    """
    from apicatalog.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``apicatalog`` console script.

    Unhandled :class:`~apicatalog.exceptions.ApicatalogError` instances
    cause a clean exit with the error's ``exit_code``. All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from apicatalog.exceptions import ApicatalogError
        from apicatalog.output import error

        if isinstance(exc, ApicatalogError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
