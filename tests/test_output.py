"""Tests for terminal output.

Covers the stdout/stderr split, colour switches, quiet and verbose modes,
document-path diagnostics with warning counting, and the asset table.
"""

from __future__ import annotations

import pytest

from apicatalog import output as output_module
from apicatalog.output import OutputManager, get_output, reset_output, set_output


@pytest.fixture(autouse=True)
def _reset_global_output():
    reset_output()
    yield
    reset_output()


@pytest.fixture()
def plain() -> OutputManager:
    """A colourless manager installed as the global one."""
    mgr = OutputManager(no_color=True, rich_tables=False)
    set_output(mgr)
    return mgr


class TestColour:
    @pytest.mark.parametrize(
        ("env", "disabled"),
        [
            ({"NO_COLOR": ""}, True),
            ({"TERM": "dumb"}, True),
            ({"TERM": "xterm-256color"}, False),
        ],
    )
    def test_environment(self, monkeypatch, env, disabled):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        for key, value in env.items():
            monkeypatch.setenv(key, value)
        assert output_module._should_disable_color() is disabled

    def test_tables_follow_the_terminal(self, monkeypatch, capfd):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        monkeypatch.setattr("apicatalog.output._is_tty", lambda: False)
        OutputManager().print_table(["id"], [["1"]])
        assert capfd.readouterr().out == "id\n1\n"

    def test_rich_markup_in_messages_is_literal(self, capfd, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        OutputManager().warning("schema [bold] at #/components")
        assert "schema [bold] at #/components" in capfd.readouterr().err


class TestStreams:
    def test_data_goes_to_stdout(self, capfd, plain):
        plain.print_data('{"asyncapi": "2.0.0"}')
        captured = capfd.readouterr()
        assert captured.out == '{"asyncapi": "2.0.0"}\n'
        assert captured.err == ""

    @pytest.mark.parametrize(
        ("method", "line"),
        [
            ("info", "Read asyncapi spec version 2.0.0"),
            ("success", "Read asyncapi spec version 2.0.0"),
            ("warning", "Warning: Read asyncapi spec version 2.0.0"),
            ("error", "Error: Read asyncapi spec version 2.0.0"),
            ("suggest", "→ Read asyncapi spec version 2.0.0"),
        ],
    )
    def test_diagnostics_go_to_stderr(self, capfd, plain, method, line):
        getattr(plain, method)("Read asyncapi spec version 2.0.0")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert captured.err == line + "\n"


class TestQuietAndVerbose:
    @pytest.mark.parametrize("method", ["info", "success", "suggest", "debug"])
    def test_quiet_hides_chatter(self, capfd, method):
        getattr(OutputManager(no_color=True, quiet=True), method)("hidden")
        assert capfd.readouterr().err == ""

    def test_quiet_keeps_problems_and_data(self, capfd):
        mgr = OutputManager(no_color=True, quiet=True, rich_tables=False)
        mgr.warning("w")
        mgr.error("e")
        mgr.print_data("data")
        captured = capfd.readouterr()
        assert captured.err == "Warning: w\nError: e\n"
        assert captured.out == "data\n"

    def test_debug_needs_verbose(self, capfd):
        OutputManager(no_color=True, verbose=True).debug("GET Tabula/Tabula/asset")
        assert capfd.readouterr().err == "[debug] GET Tabula/Tabula/asset\n"


class TestDocumentDiagnostics:
    def test_unmodeled_leads_with_path(self, capfd, plain):
        output_module.unmodeled("#/servers", "expected a map of servers, got array")
        assert capfd.readouterr().err == (
            "Warning: #/servers: expected a map of servers, got array; "
            "keeping it as an unmodeled field\n"
        )

    def test_skipped_leads_with_path(self, capfd, plain):
        output_module.skipped("#/tags/1", "a tag needs a string 'name'")
        assert capfd.readouterr().err == (
            "Warning: Skipping #/tags/1: a tag needs a string 'name'\n"
        )

    def test_warnings_are_counted(self, plain):
        output_module.unmodeled("#/a", "x")
        output_module.skipped("#/b", "y")
        output_module.warning("z")
        assert plain.warnings == 3

    @pytest.mark.parametrize(
        ("warnings", "line"),
        [
            (0, "Imported 9 assets\n"),
            (1, "Imported 9 assets (1 warning)\n"),
            (2, "Imported 9 assets (2 warnings)\n"),
        ],
    )
    def test_finish_reports_warning_count(self, capfd, plain, warnings, line):
        for _ in range(warnings):
            plain.warning("w")
        capfd.readouterr()
        output_module.finish("Imported 9 assets")
        assert capfd.readouterr().err == line

    def test_finish_is_quiet(self, capfd):
        mgr = OutputManager(no_color=True, quiet=True)
        mgr.warning("w")
        capfd.readouterr()
        mgr.finish("Imported 9 assets")
        assert capfd.readouterr().err == ""


class TestPrintTable:
    def test_plain_rows_are_tab_separated(self, capfd, plain):
        output_module.print_table(
            ["id", "parent", "label"], [["1", "", "hb"], ["2", "1", "info"]], title="Assets"
        )
        assert capfd.readouterr().out == "id\tparent\tlabel\n1\t\thb\n2\t1\tinfo\n"

    def test_rich_table_has_title(self, capfd):
        OutputManager(no_color=True, rich_tables=True).print_table(
            ["id", "label"], [["1", "hb"]], title="Assets"
        )
        out = capfd.readouterr().out
        assert "Assets" in out
        assert "label" in out
        assert "hb" in out


class TestGlobalInstance:
    def test_default_is_created_lazily(self):
        assert output_module._output is None
        assert isinstance(get_output(), OutputManager)
        assert get_output() is get_output()

    def test_set_and_reset(self):
        mgr = OutputManager(quiet=True)
        set_output(mgr)
        assert get_output() is mgr
        reset_output()
        assert output_module._output is None
