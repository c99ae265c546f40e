"""ApiClient -- the operations the command layer is allowed to call.

:class:`ApiClient` ties the token supervisor, the auth manager and the
outbound sender together. Callers never see the token cache; they log in,
ask for a token, or submit a document, and get typed results or a
:class:`~ceisa_bridge.exceptions.BridgeError`.

A submission goes through these steps:

1. Dry run? Return the synthetic outcome. No endpoint check, no token
   lookup, no network traffic.
2. Validate the :class:`~ceisa_bridge.models.ApiConfig` (endpoint present,
   timeout not negative, zero timeout becomes the default).
3. Build the request skeleton (JSON body, ``Content-Type``, ``User-Agent``).
4. Let the auth manager attach the strategy's credentials.
5. Send and classify the response.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx

from ceisa_bridge.auth.acquirer import USER_AGENT, TokenAcquirer
from ceisa_bridge.auth.cache import Clock
from ceisa_bridge.auth.manager import AuthManager, create_default_manager
from ceisa_bridge.auth.supervisor import TokenSupervisor
from ceisa_bridge.client.sender import OutboundSender
from ceisa_bridge.exceptions import ValidationError
from ceisa_bridge.models import (
    ApiConfig,
    AuthOutcome,
    CredentialConfig,
    NoAuth,
    OutboundRequest,
    ProbeResult,
    TokenRecord,
    TokenStatus,
)

DEFAULT_TIMEOUT = 30


class ApiClient:
    """Facade over token management and authenticated submission.

    Args:
        credentials: Initial OAuth2 credential configuration.
        supervisor: Token supervisor to use; built from *credentials*,
            *transport* and *clock* when omitted.
        auth_manager: Strategy dispatcher; defaults to
            :func:`~ceisa_bridge.auth.manager.create_default_manager` bound to
            the supervisor.
        transport: Optional :mod:`httpx` transport shared by the token
            exchanges and the submissions.
        clock: Current-time source for token expiry.
        token_timeout: Timeout in seconds for login/refresh exchanges.

    Example::

        client = ApiClient(credentials=credentials)
        client.login()
        outcome = client.send(document, api_config)
    """

    def __init__(
        self,
        credentials: Optional[CredentialConfig] = None,
        supervisor: Optional[TokenSupervisor] = None,
        auth_manager: Optional[AuthManager] = None,
        transport: Optional[httpx.BaseTransport] = None,
        clock: Optional[Clock] = None,
        token_timeout: float = DEFAULT_TIMEOUT,
    ) -> None:
        if supervisor is None:
            acquirer = TokenAcquirer(timeout=token_timeout, transport=transport, clock=clock)
            supervisor = TokenSupervisor(config=credentials, acquirer=acquirer, clock=clock)
        elif credentials is not None:
            supervisor.set_config(credentials)
        self._supervisor = supervisor
        self._auth_manager = auth_manager or create_default_manager(supervisor)
        self._sender = OutboundSender(transport=transport)

    @property
    def supervisor(self) -> TokenSupervisor:
        return self._supervisor

    @property
    def auth_manager(self) -> AuthManager:
        return self._auth_manager

    # ------------------------------------------------------------------ #
    # Token operations
    # ------------------------------------------------------------------ #

    def set_credentials(self, credentials: CredentialConfig) -> None:
        self._supervisor.set_config(credentials)

    def get_credentials(self) -> Optional[CredentialConfig]:
        return self._supervisor.get_config()

    def login(self, username: Optional[str] = None, password: Optional[str] = None) -> TokenRecord:
        return self._supervisor.login(username, password)

    def refresh(self) -> TokenRecord:
        return self._supervisor.refresh()

    def get_valid_token(self) -> str:
        return self._supervisor.get_valid_token()

    def is_token_valid(self) -> bool:
        return self._supervisor.is_token_valid()

    def clear_token(self) -> None:
        self._supervisor.clear_token()

    def token_status(self) -> TokenStatus:
        return self._supervisor.token_status()

    # ------------------------------------------------------------------ #
    # Submission
    # ------------------------------------------------------------------ #

    @staticmethod
    def default_config() -> ApiConfig:
        """An unauthenticated configuration with the default timeout and no endpoint."""
        return ApiConfig(endpoint="", timeout=DEFAULT_TIMEOUT, auth=NoAuth())

    @staticmethod
    def validate_config(config: ApiConfig) -> ApiConfig:
        """Check *config* and return it with defaults applied.

        Raises:
            ValidationError: If the endpoint is empty or the timeout negative.
        """
        if not config.endpoint:
            raise ValidationError("API endpoint is required")
        if config.timeout < 0:
            raise ValidationError("timeout must be positive")
        if config.timeout == 0:
            return config.model_copy(update={"timeout": DEFAULT_TIMEOUT})
        return config

    def send(self, payload: Any, config: ApiConfig, dry_run: bool = False) -> AuthOutcome:
        """Submit *payload* to ``config.endpoint`` under ``config.auth``.

        Args:
            payload: The document to send; must be a JSON object unless
                *dry_run* is set.
            config: Endpoint, timeout and auth strategy.
            dry_run: Report what would be sent without any network I/O.

        Raises:
            ValidationError: If the payload or configuration is malformed.
            AuthError: If the strategy's credentials cannot be obtained.
            ConfigError: If the OAuth2 configuration is unusable.
            NetworkError: If the request cannot be sent.
        """
        request = OutboundRequest(
            url=config.endpoint,
            headers={"Content-Type": "application/json", "User-Agent": USER_AGENT},
            json_body=payload,
            timeout=config.timeout or DEFAULT_TIMEOUT,
        )
        if dry_run:
            return self._sender.send(request, dry_run=True)

        if not isinstance(payload, dict):
            raise ValidationError(
                f"payload must be a JSON object, got {type(payload).__name__}"
            )

        config = self.validate_config(config)
        request = request.model_copy(update={"timeout": config.timeout})
        request = self._auth_manager.apply(request, config.auth)
        return self._sender.send(request)

    def probe(self, endpoint: str, timeout: float = DEFAULT_TIMEOUT) -> ProbeResult:
        """Unauthenticated connectivity check, see :meth:`OutboundSender.probe`."""
        return self._sender.probe(endpoint, timeout=timeout)
