"""Auth commands -- exercise the OAuth2 login and refresh exchanges.

Provides the ``ceisa-bridge auth`` sub-command group. Tokens are never
written to disk, so each command logs in within its own process using the
configured OAuth settings (see ``ceisa-bridge config show``).

Typical workflow::

    export CEISA_OAUTH_USERNAME=user CEISA_OAUTH_PASSWORD=secret
    ceisa-bridge auth login      # verify the account, show token status
    ceisa-bridge auth refresh    # verify the refresh endpoint as well
    TOKEN=$(ceisa-bridge auth token)
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Optional

import typer

from ceisa_bridge.exceptions import BridgeError
from ceisa_bridge.models import TokenStatus
from ceisa_bridge.output import format_response, info, success, suggest

if TYPE_CHECKING:
    from ceisa_bridge.client import ApiClient

auth_app = typer.Typer(no_args_is_help=True)


def _login(
    username: Optional[str],
    password_source: Optional[str],
    login_url: Optional[str],
    refresh_url: Optional[str],
) -> ApiClient:
    """Resolve settings, apply option overrides, and log in.

    Returns:
        The logged-in :class:`~ceisa_bridge.client.ApiClient`.
    """
    from ceisa_bridge.commands.session import build_client
    from ceisa_bridge.config import resolve_settings

    settings = resolve_settings()
    oauth = settings.oauth
    if username is not None:
        oauth.username = username
    if password_source is not None:
        oauth.password_source = password_source
    if login_url is not None:
        oauth.login_url = login_url
    if refresh_url is not None:
        oauth.refresh_url = refresh_url

    client = build_client(settings)
    client.login()
    return client


def _status_row(status: TokenStatus) -> dict[str, Any]:
    return status.model_dump(mode="json")


_USERNAME = typer.Option(None, "--username", "-u", help="Account name (overrides settings).")
_PASSWORD_SOURCE = typer.Option(
    None,
    "--password-source",
    help="Password source: env:VAR, file:/path, or prompt.",
)
_LOGIN_URL = typer.Option(None, "--login-url", help="Login endpoint (overrides settings).")
_REFRESH_URL = typer.Option(None, "--refresh-url", help="Refresh endpoint (overrides settings).")


@auth_app.command("login")
def auth_login(
    username: Optional[str] = _USERNAME,
    password_source: Optional[str] = _PASSWORD_SOURCE,
    login_url: Optional[str] = _LOGIN_URL,
    refresh_url: Optional[str] = _REFRESH_URL,
) -> None:
    """Log in and show the resulting token status.

    Raises:
        typer.Exit: With the error's exit code when configuration is
            missing or the login is rejected.

    Example::

        ceisa-bridge auth login --username user --password-source env:PW
    """
    from ceisa_bridge.commands.session import fail

    try:
        client = _login(username, password_source, login_url, refresh_url)
    except BridgeError as exc:
        raise fail(exc) from None

    success("Login successful.")
    format_response(_status_row(client.token_status()))
    suggest("Submit a document: ceisa-bridge send document.json --auth-type oauth2")


@auth_app.command("refresh")
def auth_refresh(
    username: Optional[str] = _USERNAME,
    password_source: Optional[str] = _PASSWORD_SOURCE,
    login_url: Optional[str] = _LOGIN_URL,
    refresh_url: Optional[str] = _REFRESH_URL,
) -> None:
    """Log in, then exchange the refresh token for a new token.

    Useful to check that the refresh endpoint accepts the tokens issued by
    the login endpoint.
    """
    from ceisa_bridge.commands.session import fail

    try:
        client = _login(username, password_source, login_url, refresh_url)
        client.refresh()
    except BridgeError as exc:
        raise fail(exc) from None

    success("Token refreshed.")
    format_response(_status_row(client.token_status()))


@auth_app.command("token")
def auth_token(
    username: Optional[str] = _USERNAME,
    password_source: Optional[str] = _PASSWORD_SOURCE,
    login_url: Optional[str] = _LOGIN_URL,
    refresh_url: Optional[str] = _REFRESH_URL,
) -> None:
    """Log in and print a valid access token to stdout, for scripting."""
    from ceisa_bridge.commands.session import fail
    from ceisa_bridge.output import print_data

    try:
        client = _login(username, password_source, login_url, refresh_url)
        token = client.get_valid_token()
    except BridgeError as exc:
        raise fail(exc) from None

    print_data(token)


@auth_app.command("defaults")
def auth_defaults() -> None:
    """Show the default CEISA login and refresh endpoints."""
    from ceisa_bridge.config import default_credential_config

    defaults = default_credential_config()
    info("Used when no login/refresh URL is configured.")
    format_response({"login_url": defaults.login_url, "refresh_url": defaults.refresh_url})
