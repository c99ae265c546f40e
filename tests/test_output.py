"""Tests for the output formatting and logging setup.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- JSON, plain, and rich rendering of submission outcomes
- Global instance management and convenience functions
- Logging through RichHandler
"""

from __future__ import annotations

import json
import logging

import pytest
from rich.logging import RichHandler

from ceisa_bridge import output as output_module
from ceisa_bridge.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    configure_logging,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture(autouse=True)
def _reset_global_output():
    """Ensure the global output instance is reset between tests."""
    reset_output()
    yield
    reset_output()


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("ceisa_bridge.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("ceisa_bridge.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    """Test that AUTO format resolves correctly based on environment."""

    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_no_color_flag_forces_plain(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(format=OutputFormat.AUTO, no_color=True).format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Data goes to stdout and diagnostics go to stderr."""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("a diagnostic")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "a diagnostic" in captured.err

    def test_outcome_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.info("Sending...")
        mgr.format_response({"success": True, "status_code": 200})
        mgr.success("Document submitted")
        captured = capfd.readouterr()
        assert json.loads(captured.out) == {"success": True, "status_code": 200}
        assert "Sending..." in captured.err
        assert "Document submitted" in captured.err

    def test_warning_and_error_prefixes(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.warning("API key auth has no key")
        mgr.error("login failed")
        err = capfd.readouterr().err.splitlines()
        assert err == ["Warning: API key auth has no key", "Error: login failed"]

    def test_suggest_has_arrow(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.suggest("ceisa-bridge send document.json")
        assert "→ ceisa-bridge send document.json" in capfd.readouterr().err


# ------------------------------------------------------------------ #
# Quiet and verbose modes
# ------------------------------------------------------------------ #


class TestQuietMode:
    @pytest.mark.parametrize("method", ["info", "success", "suggest"])
    def test_quiet_suppresses(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("should not appear")
        assert capfd.readouterr().err == ""

    @pytest.mark.parametrize("method", ["warning", "error"])
    def test_quiet_keeps(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("important")
        assert "important" in capfd.readouterr().err

    def test_quiet_keeps_stdout_data(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.print_data("A1")
        assert capfd.readouterr().out == "A1\n"


class TestVerboseMode:
    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).debug("hidden")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True).debug("details")
        assert "[debug] details" in capfd.readouterr().err

    def test_properties(self, non_tty):
        mgr = OutputManager(quiet=True, verbose=True)
        assert mgr.is_quiet is True
        assert mgr.is_verbose is True


# ------------------------------------------------------------------ #
# Rendering
# ------------------------------------------------------------------ #


class TestJsonFormat:
    def test_dict_as_json(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        data = {"nomorAju": "AJU-1", "barang": [{"seriBarang": 1}]}
        mgr.format_response(data)
        assert json.loads(capfd.readouterr().out) == data

    def test_json_string_is_reparsed(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.format_response('{"key": "value"}')
        assert json.loads(capfd.readouterr().out) == {"key": "value"}

    def test_plain_string(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.format_response("hello world")
        assert capfd.readouterr().out == "hello world\n"

    def test_non_ascii_kept(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.format_response({"uraian": "KOPI BUBUK é"})
        assert "KOPI BUBUK é" in capfd.readouterr().out


class TestPlainFormat:
    def test_dict_as_key_value(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.format_response({"success": True, "status_code": 200, "barang": [1]})
        lines = capfd.readouterr().out.strip().split("\n")
        assert lines == ["success\tTrue", "status_code\t200", "barang\t[1]"]

    def test_nested_values_stay_on_one_line(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.format_response({"body": {"status": "OK", "uraian": "KOPI \u00e9"}})
        assert capfd.readouterr().out == 'body\t{"status": "OK", "uraian": "KOPI \u00e9"}\n'

    def test_list_of_dicts_as_rows(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.format_response([{"id": 1, "name": "A"}, {"id": 2, "name": "B"}])
        assert capfd.readouterr().out.strip().split("\n") == ["1\tA", "2\tB"]

    def test_scalar(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.format_response(42)
        assert "42" in capfd.readouterr().out


class TestRichFormat:
    def test_dict_produces_output(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.format_response({"key": "value"})
        out = capfd.readouterr().out
        assert "key" in out
        assert "value" in out

    def test_plain_string(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.format_response("just text")
        assert "just text" in capfd.readouterr().out


# ------------------------------------------------------------------ #
# Global instance management
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        assert isinstance(get_output(), OutputManager)

    def test_set_output_overrides(self):
        custom = OutputManager(format=OutputFormat.JSON, no_color=True)
        set_output(custom)
        assert get_output() is custom

    def test_reset_output_clears(self):
        custom = OutputManager(format=OutputFormat.JSON, no_color=True)
        set_output(custom)
        reset_output()
        assert get_output() is not custom

    def test_convenience_functions_delegate(self, capfd, non_tty):
        set_output(OutputManager(format=OutputFormat.JSON, no_color=True, verbose=True))
        output_module.format_response({"a": 1})
        output_module.print_data("raw")
        output_module.info("i")
        output_module.warning("w")
        output_module.debug("d")
        captured = capfd.readouterr()
        assert '"a": 1' in captured.out
        assert "raw" in captured.out
        assert "Warning: w" in captured.err
        assert "[debug] d" in captured.err


# ------------------------------------------------------------------ #
# Logging
# ------------------------------------------------------------------ #


class TestConfigureLogging:
    def test_installs_rich_handler(self):
        configure_logging()
        logger = logging.getLogger("ceisa_bridge")
        handlers = [h for h in logger.handlers if isinstance(h, RichHandler)]
        assert len(handlers) == 1
        assert logger.level == logging.WARNING
        assert logger.propagate is False

    def test_verbose_enables_debug(self):
        configure_logging(verbose=True)
        assert logging.getLogger("ceisa_bridge").level == logging.DEBUG

    def test_reconfigure_replaces_handler(self):
        configure_logging()
        configure_logging(verbose=True)
        logger = logging.getLogger("ceisa_bridge")
        assert len([h for h in logger.handlers if isinstance(h, RichHandler)]) == 1

    def test_child_loggers_reach_handler(self, capfd):
        configure_logging(no_color=True)
        logging.getLogger("ceisa_bridge.client.sender").warning("Submission rejected: 404")
        captured = capfd.readouterr()
        assert "Submission rejected: 404" in captured.err
        assert captured.out == ""

    def test_info_suppressed_without_verbose(self, capfd):
        configure_logging(no_color=True)
        logging.getLogger("ceisa_bridge.auth.acquirer").info("Attempting OAuth 2.0 login")
        assert "Attempting" not in capfd.readouterr().err
