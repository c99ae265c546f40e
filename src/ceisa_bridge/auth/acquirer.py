"""Login and refresh exchanges against the OAuth2 token endpoints.

:class:`TokenAcquirer` performs the two network exchanges that produce a
:class:`~ceisa_bridge.models.TokenRecord`:

* **login** -- ``POST {login_url}`` with ``{"username", "password"}`` as JSON.
* **refresh** -- ``POST {refresh_url}`` with the current refresh token as the
  raw ``Authorization`` header value and no body.

Both endpoints answer with the same envelope::

    {"status": "success", "message": "...",
     "item": {"access_token": "...", "refresh_token": "...",
              "token_type": "Bearer", "scope": "...", "expires_in": 3600}}

An exchange succeeds only when the HTTP status is 200 *and* ``status`` is
``"success"``. The acquirer is stateless; caching is the supervisor's job.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import Any, Optional

import httpx

from ceisa_bridge import __version__
from ceisa_bridge.auth.cache import Clock, utc_now
from ceisa_bridge.exceptions import AuthError, ConfigError
from ceisa_bridge.models import CredentialConfig, LoginRequest, TokenRecord, TokenResponse

logger = logging.getLogger(__name__)

USER_AGENT = f"ceisa-bridge/{__version__}"


class TokenAcquirer:
    """Performs the login and refresh exchanges.

    Args:
        timeout: Per-exchange timeout in seconds.
        transport: Optional :mod:`httpx` transport, e.g. an
            :class:`httpx.MockTransport` in tests.
        clock: Source of the response-received time used to compute
            ``expires_at``.
    """

    def __init__(
        self,
        timeout: float = 30,
        transport: Optional[httpx.BaseTransport] = None,
        clock: Optional[Clock] = None,
    ) -> None:
        self._timeout = timeout
        self._transport = transport
        self._clock = clock or utc_now

    # ------------------------------------------------------------------ #
    # Exchanges
    # ------------------------------------------------------------------ #

    def login(
        self,
        config: Optional[CredentialConfig],
        username: str,
        password: str,
    ) -> TokenRecord:
        """Exchange a username and password for a fresh token record.

        Args:
            config: Credential configuration providing ``login_url``.
            username: Account name sent in the JSON body.
            password: Account password sent in the JSON body.

        Returns:
            A new :class:`~ceisa_bridge.models.TokenRecord`.

        Raises:
            ConfigError: If *config* is missing or has no login URL. No
                request is sent in that case.
            AuthError: If the request cannot be sent, the response cannot be
                decoded, or the endpoint reports a failure.
        """
        if config is None:
            raise ConfigError("OAuth 2.0 configuration not set")
        if not config.login_url:
            raise ConfigError("token URL is required")

        logger.info("Attempting OAuth 2.0 login at %s as %s", config.login_url, username)
        body = LoginRequest(username=username, password=password).model_dump()
        response = self._post(config.login_url, action="login", json=body)
        record = self._to_record(response, failure="login failed")
        logger.info(
            "OAuth 2.0 login successful (expires_at=%s, token_type=%s, scope=%s)",
            record.expires_at.isoformat(),
            record.token_type,
            record.scope,
        )
        return record

    def refresh(self, config: Optional[CredentialConfig], refresh_token: str) -> TokenRecord:
        """Exchange the current refresh token for a new token record.

        Raises:
            ConfigError: If *config* is missing or has no refresh URL.
            AuthError: If *refresh_token* is empty (no request is sent), the
                request cannot be sent, the response cannot be decoded, or
                the endpoint reports a failure.
        """
        if config is None:
            raise ConfigError("OAuth 2.0 configuration not set")
        if not refresh_token:
            raise AuthError("no refresh token available")
        if not config.refresh_url:
            raise ConfigError("refresh URL is required")

        logger.info("Refreshing OAuth 2.0 token at %s", config.refresh_url)
        response = self._post(
            config.refresh_url,
            action="refresh",
            headers={"Authorization": refresh_token},
        )
        record = self._to_record(response, failure="token refresh failed")
        logger.info("OAuth 2.0 token refreshed (expires_at=%s)", record.expires_at.isoformat())
        return record

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _post(
        self,
        url: str,
        action: str,
        headers: Optional[dict[str, str]] = None,
        json: Optional[dict[str, Any]] = None,
    ) -> httpx.Response:
        request_headers = {
            "Content-Type": "application/json",
            "User-Agent": USER_AGENT,
        }
        request_headers.update(headers or {})
        try:
            with httpx.Client(timeout=self._timeout, transport=self._transport) as client:
                return client.post(url, headers=request_headers, json=json)
        except (httpx.TransportError, httpx.InvalidURL) as exc:
            logger.error("%s request to %s failed: %s", action.capitalize(), url, exc)
            raise AuthError(f"{action} request failed: {exc}") from exc

    def _to_record(self, response: httpx.Response, failure: str) -> TokenRecord:
        received_at = self._clock()
        try:
            payload = TokenResponse.model_validate(response.json())
        except ValueError as exc:
            if response.status_code != 200:
                raise AuthError(
                    f"{failure}: {response.reason_phrase} (status: {response.status_code})"
                ) from exc
            raise AuthError(f"failed to parse token response: {exc}") from exc

        if response.status_code != 200 or payload.status != "success":
            logger.error(
                "%s (status=%s, message=%s)", failure, response.status_code, payload.message
            )
            raise AuthError(f"{failure}: {payload.message} (status: {response.status_code})")

        item = payload.item
        if not item.access_token:
            raise AuthError(f"{failure}: response did not contain an access token")

        return TokenRecord(
            access_token=item.access_token,
            refresh_token=item.refresh_token,
            token_type=item.token_type or "Bearer",
            scope=item.scope,
            expires_at=received_at + timedelta(seconds=item.expires_in),
        )
