"""Typer application and CLI entry point for ceisa_bridge.

This module builds the top-level Typer application and registers the
built-in commands (``send``, ``probe``, ``generate``, ``template``,
``auth``, ``config``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs a SIGINT handler and invokes the Typer app;
a :class:`~ceisa_bridge.exceptions.BridgeError` escaping a command exits with
its exit code, and any other exception is written to a crash log under the
data directory.

See Also:
    :mod:`ceisa_bridge.config`: Settings resolution.
    :mod:`ceisa_bridge.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any

import typer

from ceisa_bridge import __version__
from ceisa_bridge.commands.auth import auth_app
from ceisa_bridge.commands.config import config_app
from ceisa_bridge.commands.document import generate_command, template_command
from ceisa_bridge.commands.submit import probe_command, send_command
from ceisa_bridge.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="ceisa-bridge",
    help="Build CEISA customs JSON documents and submit them to a customs API.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("send")(send_command)
app.command("probe")(probe_command)
app.command("generate")(generate_command)
app.command("template")(template_command)
app.add_typer(auth_app, name="auth", help="OAuth 2.0 login and token checks.")
app.add_typer(config_app, name="config", help="Settings management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"ceisa-bridge {__version__}")
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
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output and logging."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Preview submissions without sending."
    ),
    force: bool = typer.Option(
        False, "--force", "-f", help="Skip confirmations."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Loads ``./.env``, initialises the global
    :class:`~ceisa_bridge.output.OutputManager` and logging from CLI flags,
    and stores shared options (``dry_run``, ``force``, ``verbose``) in
    ``ctx.obj``.
    """
    from ceisa_bridge.config import load_env_file
    from ceisa_bridge.output import OutputFormat, OutputManager, configure_logging, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    configure_logging(verbose=verbose, no_color=no_color)
    load_env_file()

    ctx.ensure_object(dict)
    ctx.obj["dry_run"] = dry_run
    ctx.obj["force"] = force
    ctx.obj["verbose"] = verbose


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write the current traceback to the data directory and return its path."""
    from ceisa_bridge.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(f"{type(exc).__name__}: {exc}\n\n{traceback.format_exc()}")
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``ceisa-bridge`` console script.

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
        from ceisa_bridge.exceptions import BridgeError
        from ceisa_bridge.output import error

        if isinstance(exc, BridgeError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
