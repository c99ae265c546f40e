"""Abstract base class for authentication plugins.

This module defines the two foundational types of the dispatch layer:

- :class:`AuthResult` -- the HTTP headers an auth plugin produces for one
  outbound submission.
- :class:`AuthPlugin` -- the abstract base class every strategy extends.

There is one plugin per :class:`~ceisa_bridge.models.AuthType`; the
:class:`~ceisa_bridge.auth.manager.AuthManager` picks the plugin matching the
strategy variant carried by an :class:`~ceisa_bridge.models.ApiConfig`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from ceisa_bridge.models import AuthType


class AuthResult:
    """Container for the headers to merge into an outbound request.

    Args:
        headers: HTTP headers to add (e.g. ``{"Authorization": "Bearer ..."}``).

    Example::

        result = AuthResult(headers={"X-API-Key": "k-123"})
        assert result.headers["X-API-Key"] == "k-123"
    """

    def __init__(self, headers: dict[str, str] | None = None):
        self.headers = headers or {}

    def __bool__(self) -> bool:
        return bool(self.headers)


class AuthPlugin(ABC):
    """Abstract base class for authentication strategies.

    Subclasses provide:

    1. An :attr:`auth_type` property naming the strategy variant handled.
    2. An :meth:`authenticate` implementation turning that variant into an
       :class:`AuthResult`.
    """

    @property
    @abstractmethod
    def auth_type(self) -> AuthType:
        """Return the strategy tag this plugin handles."""
        ...

    @abstractmethod
    def authenticate(self, strategy: Any) -> AuthResult:
        """Produce the credential headers for one submission.

        Args:
            strategy: The strategy variant whose ``type`` equals
                :attr:`auth_type`.

        Returns:
            An :class:`AuthResult`; empty when there is nothing to attach.

        Raises:
            AuthError: If a required credential cannot be obtained.
        """
        ...

    def validate_config(self, strategy: Any) -> list[str]:
        """Validate the strategy before use.

        Returns:
            Human-readable problems. An empty list means the strategy is usable.
        """
        return []
