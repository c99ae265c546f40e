"""Submission commands -- ``send`` a document and ``probe`` an endpoint.

``send`` maps a JSON file or Excel workbook into the customs document,
authenticates with the configured strategy, and posts it to the downstream
API. The outcome body goes to stdout; a non-2xx answer exits with
:data:`~ceisa_bridge.exit_codes.EXIT_SUBMISSION_FAILED`.

``probe`` issues an unauthenticated ``GET`` and reports whether the
endpoint is reachable. An unreachable endpoint is a result, not a failure.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import typer

from ceisa_bridge.exceptions import BridgeError, ValidationError
from ceisa_bridge.exit_codes import EXIT_INVALID_USAGE, EXIT_SUBMISSION_FAILED
from ceisa_bridge.output import debug, error, format_response, info, success, warning


def load_json_file(path: Path) -> Any:
    """Read and parse a JSON document from *path*.

    Raises:
        ValidationError: If the file is missing or is not valid JSON.
    """
    if not path.is_file():
        raise ValidationError(f"File not found: {path}")
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, json.JSONDecodeError) as exc:
        raise ValidationError(f"Cannot read JSON from {path}: {exc}") from exc


def load_document_input(path: Path) -> Any:
    """Read a document from a JSON file or an Excel workbook (by extension).

    Raises:
        ValidationError: If the file is missing or cannot be parsed.
    """
    from ceisa_bridge.spreadsheet import is_workbook, read_workbook

    if is_workbook(path):
        return read_workbook(path)
    return load_json_file(path)


def send_command(
    ctx: typer.Context,
    file: Path = typer.Argument(
        help="JSON document (form or spreadsheet shape) or .xlsx workbook."
    ),
    endpoint: Optional[str] = typer.Option(
        None, "--endpoint", "-e", help="Submission endpoint (overrides settings)."
    ),
    auth_type: Optional[str] = typer.Option(
        None,
        "--auth-type",
        "-a",
        help="Auth strategy: none, api_key, basic, oauth2, legacy.",
    ),
    timeout: Optional[int] = typer.Option(
        None, "--timeout", help="Request timeout in seconds."
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Report what would be sent without sending."
    ),
) -> None:
    """Map a document and submit it to the downstream API.

    With the ``oauth2`` strategy the configured account logs in first.
    A dry run skips the login and any network traffic.

    Raises:
        typer.Exit: With the error's exit code on configuration, auth,
            validation or network errors, and with code 5 when the API
            rejects the document.

    Example::

        ceisa-bridge send bc20.json --endpoint https://customs.example/api
        ceisa-bridge send bc20.json --auth-type oauth2 --dry-run
    """
    from ceisa_bridge.commands.session import build_client, fail
    from ceisa_bridge.config import build_api_config, resolve_settings
    from ceisa_bridge.document import build_document
    from ceisa_bridge.models import OAuth2Auth

    dry_run = dry_run or bool(ctx.obj and ctx.obj.get("dry_run"))

    try:
        document = build_document(load_document_input(file))
        settings = resolve_settings(
            cli_endpoint=endpoint,
            cli_timeout=timeout,
            cli_auth_type=auth_type,
        )
        api_config = build_api_config(settings)
        debug(f"Auth strategy: {api_config.auth.type}, endpoint: {api_config.endpoint or '(none)'}")
        client = build_client(settings, with_credentials=False)

        for problem in client.auth_manager.validate(api_config.auth):
            warning(problem)

        if isinstance(api_config.auth, OAuth2Auth) and not dry_run:
            if api_config.auth.credentials is not None:
                client.set_credentials(api_config.auth.credentials)
            client.login()
            info("Logged in to the OAuth 2.0 endpoint.")

        outcome = client.send(document.to_payload(), api_config, dry_run=dry_run)
    except BridgeError as exc:
        raise fail(exc) from None

    format_response(outcome.body)
    if not outcome.success:
        error(outcome.error or "Submission failed")
        raise typer.Exit(code=EXIT_SUBMISSION_FAILED)
    if dry_run:
        info("Dry run: nothing was sent.")
    else:
        success(f"Document submitted (status {outcome.status_code}).")


def probe_command(
    endpoint: Optional[str] = typer.Argument(
        None, help="Endpoint to probe (defaults to the configured one)."
    ),
    timeout: Optional[int] = typer.Option(
        None, "--timeout", help="Request timeout in seconds."
    ),
) -> None:
    """Check whether an endpoint answers with a 2xx status.

    Exits 0 whether or not the endpoint is reachable; the outcome is
    printed. Exits 2 when no endpoint is given or configured.

    Example::

        ceisa-bridge probe https://customs.example/health
    """
    from ceisa_bridge.commands.session import build_client, fail
    from ceisa_bridge.config import resolve_settings

    try:
        settings = resolve_settings(cli_endpoint=endpoint, cli_timeout=timeout)
        target = settings.api.endpoint
        if not target:
            error("Endpoint URL is required")
            raise typer.Exit(code=EXIT_INVALID_USAGE)
        client = build_client(settings, with_credentials=False)
        result = client.probe(target, timeout=settings.api.timeout)
    except BridgeError as exc:
        raise fail(exc) from None

    format_response(result.model_dump(mode="json"))
    if result.reachable:
        success(result.message)
    else:
        warning(result.message)
