"""Built-in CLI sub-commands for apicatalog.

This package groups the Typer command modules that form the CLI's
top-level command tree:

* :mod:`~apicatalog.commands.import_` -- import a spec into the catalog.
* :mod:`~apicatalog.commands.export` -- rebuild a spec from the catalog.
* :mod:`~apicatalog.commands.clean` -- remove an imported spec.
* :mod:`~apicatalog.commands.config` -- view and modify global settings.
* :mod:`~apicatalog.commands.context` -- config and catalog access shared
  by the commands above.

Single commands export a plain callback registered directly on the root
app; the ``config`` group exports a :class:`typer.Typer` sub-application.
"""
