"""Terminal output for apicatalog: data on stdout, diagnostics on stderr.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- exported documents and the dry-run asset table only, so
  ``apicatalog export -r api -o - | jq`` always sees clean data.
* **stderr** -- everything else: progress, warnings, errors, and hints.
* **Colour** -- Rich markup unless ``--no-color``, ``NO_COLOR``, or
  ``TERM=dumb`` turn it off. Without colour every diagnostic is a single
  plain line.

The import and export walkers report problems with the document through
:func:`unmodeled` (a field is kept verbatim in the side channel instead of
becoming assets) and :func:`skipped` (a list item is dropped). Both lead
with the document path of the node, e.g. ``#/tags/2``. Every warning is
counted, and the commands close with :func:`finish`, which appends the
count to their final status line.

:class:`OutputManager` holds the state. It is created once in
:func:`~apicatalog.app.main_callback` and installed with :func:`set_output`;
the module-level functions delegate to that instance.
"""

from __future__ import annotations

import os
import sys
from typing import Optional

from rich.console import Console
from rich.markup import escape
from rich.table import Table

# level -> (Rich style, plain-text prefix)
_LEVELS: dict[str, tuple[Optional[str], str]] = {
    "info": (None, ""),
    "success": ("green", ""),
    "warning": ("yellow", "Warning: "),
    "error": ("bold red", "Error: "),
    "suggest": ("dim", "→ "),
    "debug": ("dim", "[debug] "),
}


class OutputManager:
    """Routes apicatalog output to stdout or stderr.

    Args:
        no_color: Disable colour and Rich markup.
        quiet: Suppress info, success, and suggestion lines.
        verbose: Show debug lines (store requests, created assets).
        rich_tables: Render :meth:`print_table` as a Rich table. ``None``
            picks Rich on an interactive terminal with colour enabled and
            tab-separated text otherwise.

    Attributes:
        warnings: Number of warnings printed so far.
    """

    def __init__(
        self,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        rich_tables: Optional[bool] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        if rich_tables is None:
            rich_tables = _is_tty() and not self._no_color
        self._rich_tables = rich_tables
        self.warnings = 0

        self._stdout = Console(
            file=sys.stdout, no_color=self._no_color, force_terminal=rich_tables
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    # -- stdout ------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Write *text* to stdout and flush."""
        print(text, file=sys.stdout, flush=True)

    def print_table(
        self,
        headers: list[str],
        rows: list[list[str]],
        title: Optional[str] = None,
    ) -> None:
        """Print rows as a Rich table, or as tab-separated lines.

        The title is only shown in the Rich rendering.
        """
        if not self._rich_tables:
            for row in [headers, *rows]:
                self.print_data("\t".join(row))
            return
        table = Table(title=title, show_header=True, header_style="bold cyan")
        for header in headers:
            table.add_column(header)
        for row in rows:
            table.add_row(*row)
        self._stdout.print(table)

    # -- stderr ------------------------------------------------------------ #

    def _emit(self, level: str, message: str) -> None:
        style, prefix = _LEVELS[level]
        line = prefix + message
        if self._no_color:
            print(line, file=sys.stderr, flush=True)
        elif style is None:
            self._stderr.print(escape(line))
        else:
            self._stderr.print(f"[{style}]{escape(line)}[/{style}]")

    def info(self, message: str) -> None:
        if not self._quiet:
            self._emit("info", message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._emit("success", message)

    def suggest(self, message: str) -> None:
        if not self._quiet:
            self._emit("suggest", message)

    def debug(self, message: str) -> None:
        if self._verbose:
            self._emit("debug", message)

    def warning(self, message: str) -> None:
        """Print and count a warning. Shown even with ``--quiet``."""
        self.warnings += 1
        self._emit("warning", message)

    def error(self, message: str) -> None:
        self._emit("error", message)

    def unmodeled(self, path: str, message: str) -> None:
        """Warn that the node at *path* stays in its parent's side channel."""
        self.warning(f"{path}: {message}; keeping it as an unmodeled field")

    def skipped(self, path: str, message: str) -> None:
        """Warn that the node at *path* was left out of the asset graph."""
        self.warning(f"Skipping {path}: {message}")

    def finish(self, message: str) -> None:
        """Success line for a finished command, noting any warnings."""
        if self.warnings:
            noun = "warning" if self.warnings == 1 else "warnings"
            message = f"{message} ({self.warnings} {noun})"
        self.success(message)


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """``NO_COLOR`` set to anything, or ``TERM=dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Global output instance (set during app startup)
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the global :class:`OutputManager`, creating a default one lazily."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Drop the global manager; tests call this between runs."""
    global _output
    _output = None


def print_data(text: str) -> None:
    get_output().print_data(text)


def print_table(
    headers: list[str],
    rows: list[list[str]],
    title: Optional[str] = None,
) -> None:
    get_output().print_table(headers, rows, title)


def info(message: str) -> None:
    get_output().info(message)


def error(message: str) -> None:
    get_output().error(message)


def success(message: str) -> None:
    get_output().success(message)


def warning(message: str) -> None:
    get_output().warning(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def debug(message: str) -> None:
    get_output().debug(message)


def unmodeled(path: str, message: str) -> None:
    get_output().unmodeled(path, message)


def skipped(path: str, message: str) -> None:
    get_output().skipped(path, message)


def finish(message: str) -> None:
    get_output().finish(message)
