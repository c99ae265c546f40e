"""Shared helpers for commands: settings resolution and client construction."""

from __future__ import annotations

from typing import Optional

import httpx
import typer

from ceisa_bridge.client import ApiClient
from ceisa_bridge.config import build_credential_config
from ceisa_bridge.exceptions import BridgeError
from ceisa_bridge.models import Settings
from ceisa_bridge.output import error

transport: Optional[httpx.BaseTransport] = None
"""Transport handed to every client built here; ``None`` means real network I/O."""


def build_client(settings: Settings, with_credentials: bool = True) -> ApiClient:
    """Build an :class:`~ceisa_bridge.client.ApiClient` for *settings*.

    With *with_credentials* the OAuth2 credentials are resolved here, so an
    unresolvable password source surfaces as a
    :class:`~ceisa_bridge.exceptions.ConfigError`.
    """
    credentials = build_credential_config(settings) if with_credentials else None
    return ApiClient(
        credentials=credentials,
        transport=transport,
        token_timeout=settings.oauth.timeout,
    )


def fail(exc: BridgeError) -> typer.Exit:
    """Report *exc* on stderr and return the matching :class:`typer.Exit`."""
    error(str(exc))
    return typer.Exit(code=exc.exit_code)
