"""Token supervisor -- hands out a valid bearer token, refreshing it when due.

:class:`TokenSupervisor` owns the OAuth2 :class:`~ceisa_bridge.models.CredentialConfig`,
a :class:`~ceisa_bridge.auth.cache.TokenCache`, and a
:class:`~ceisa_bridge.auth.acquirer.TokenAcquirer`. Callers ask for a token
with :meth:`~TokenSupervisor.get_valid_token`; the supervisor never logs in
on its own, so an empty cache is reported rather than papered over.

Concurrency:
    The configuration is guarded by its own read/write lock and the cache by
    another. By default the check-then-refresh sequence in
    :meth:`~TokenSupervisor.get_valid_token` is not exclusive: two callers
    that both see a token inside the renewal window both refresh, and the
    last record written wins. Pass ``single_flight=True`` to serialise
    refreshes so that callers waiting behind an in-flight refresh reuse its
    result instead of issuing their own.
"""

from __future__ import annotations

import logging
import threading
from datetime import timedelta
from typing import Optional

from ceisa_bridge.auth.acquirer import TokenAcquirer
from ceisa_bridge.auth.cache import Clock, ReadWriteLock, TokenCache, utc_now
from ceisa_bridge.exceptions import AuthError, ConfigError
from ceisa_bridge.models import CredentialConfig, TokenRecord, TokenStatus

logger = logging.getLogger(__name__)

REFRESH_BUFFER = timedelta(minutes=1)
"""Tokens expiring within this window are refreshed before being handed out."""

_FIELD_ERRORS = {
    "login_url": "token URL is required",
    "refresh_url": "refresh URL is required",
    "username": "username is required",
    "password": "password is required",
}


class TokenSupervisor:
    """Coordinates the credential configuration, token cache and acquirer.

    Args:
        config: Initial credential configuration, if already known.
        acquirer: Performs the network exchanges. Defaults to a
            :class:`~ceisa_bridge.auth.acquirer.TokenAcquirer` sharing
            *clock*.
        clock: Current-time source shared with the cache.
        single_flight: Serialise refreshes, see the module docstring.

    Example::

        supervisor = TokenSupervisor(config=credentials)
        supervisor.login()
        headers = {"Authorization": f"Bearer {supervisor.get_valid_token()}"}
    """

    def __init__(
        self,
        config: Optional[CredentialConfig] = None,
        acquirer: Optional[TokenAcquirer] = None,
        clock: Optional[Clock] = None,
        single_flight: bool = False,
    ) -> None:
        self._clock = clock or utc_now
        self._cache = TokenCache(clock=self._clock)
        self._acquirer = acquirer or TokenAcquirer(clock=self._clock)
        self._config = config
        self._config_lock = ReadWriteLock()
        self._single_flight = single_flight
        self._refresh_lock = threading.Lock()

    # ------------------------------------------------------------------ #
    # Configuration
    # ------------------------------------------------------------------ #

    def set_config(self, config: CredentialConfig) -> None:
        """Replace the credential configuration. The cached token is kept."""
        with self._config_lock.write():
            self._config = config

    def get_config(self) -> Optional[CredentialConfig]:
        """Return the current credential configuration, if any."""
        with self._config_lock.read():
            return self._config

    @staticmethod
    def validate_config(config: Optional[CredentialConfig]) -> None:
        """Check that every field needed for login and refresh is present.

        Raises:
            ConfigError: Naming the first missing field.
        """
        if config is None:
            raise ConfigError("OAuth 2.0 configuration not set")
        missing = config.missing_fields()
        if missing:
            raise ConfigError(_FIELD_ERRORS[missing[0]])

    # ------------------------------------------------------------------ #
    # Token lifecycle
    # ------------------------------------------------------------------ #

    def login(self, username: Optional[str] = None, password: Optional[str] = None) -> TokenRecord:
        """Log in and cache the resulting token.

        Args:
            username: Account name; defaults to the configured one.
            password: Account password; defaults to the configured one.

        Raises:
            ConfigError: If no configuration is set, or no URL or account is
                available. Nothing is sent in that case.
            AuthError: If the login exchange fails.
        """
        config = self.get_config()
        if config is None:
            raise ConfigError("OAuth 2.0 configuration not set")
        if not config.login_url:
            raise ConfigError(_FIELD_ERRORS["login_url"])

        username = username if username is not None else config.username
        password = password if password is not None else config.password
        if not username:
            raise ConfigError(_FIELD_ERRORS["username"])
        if not password:
            raise ConfigError(_FIELD_ERRORS["password"])

        record = self._acquirer.login(config, username, password)
        self._cache.set(record)
        return record

    def refresh(self) -> TokenRecord:
        """Refresh the cached token and cache the new record.

        Raises:
            ConfigError: If no configuration or refresh URL is set.
            AuthError: If there is no refresh token, or the exchange fails.
        """
        record = self._cache.get()
        current = record.refresh_token if record is not None else ""
        new_record = self._acquirer.refresh(self.get_config(), current)
        self._cache.set(new_record)
        return new_record

    def get_valid_token(self) -> str:
        """Return an access token that stays valid for at least a minute.

        A cached token inside the renewal window is refreshed first. A failed
        refresh propagates; there is no fallback to a fresh login.

        Raises:
            AuthError: ``"no token available, please login first"`` when the
                cache is empty, or any refresh failure.
            ConfigError: If a refresh is due and no refresh URL is configured.
        """
        record = self._cache.get()
        if record is None:
            raise AuthError("no token available, please login first")
        if self._is_fresh(record):
            return record.access_token

        if not self._single_flight:
            logger.debug("Token expires at %s, refreshing", record.expires_at.isoformat())
            return self.refresh().access_token

        with self._refresh_lock:
            current = self._cache.get()
            if current is not None and current is not record and self._is_fresh(current):
                return current.access_token
            logger.debug("Token expires at %s, refreshing", record.expires_at.isoformat())
            return self.refresh().access_token

    def is_token_valid(self) -> bool:
        """True iff a token is cached and has not yet expired."""
        return self._cache.is_valid()

    def clear_token(self) -> None:
        """Forget the cached token."""
        self._cache.clear()
        logger.info("OAuth 2.0 token cleared")

    def token_info(self) -> Optional[TokenRecord]:
        """Return the cached token record, if any."""
        return self._cache.get()

    def token_status(self) -> TokenStatus:
        """Summarise the cached token without exposing it."""
        record = self._cache.get()
        if record is None:
            return TokenStatus()
        remaining = (record.expires_at - self._clock()).total_seconds()
        return TokenStatus(
            has_token=True,
            is_valid=self._cache.is_valid(),
            expires_at=record.expires_at,
            seconds_remaining=max(int(remaining), 0),
            token_type=record.token_type,
            scope=record.scope,
        )

    def _is_fresh(self, record: TokenRecord) -> bool:
        return self._clock() + REFRESH_BUFFER < record.expires_at
