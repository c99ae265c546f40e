"""Authentication for outbound submissions.

The package has two layers:

- The OAuth2 token lifecycle: :class:`TokenCache` holds the current token,
  :class:`TokenAcquirer` performs the login and refresh exchanges, and
  :class:`TokenSupervisor` hands out a token that stays valid for at least a
  minute, refreshing it when due.
- Strategy dispatch: :class:`AuthManager` maps each
  :class:`~ceisa_bridge.models.AuthType` to an :class:`AuthPlugin` that turns
  the strategy into request headers.

Typical usage::

    from ceisa_bridge.auth import TokenSupervisor, create_default_manager

    supervisor = TokenSupervisor(config=credentials)
    supervisor.login()
    manager = create_default_manager(supervisor)
    request = manager.apply(request, api_config.auth)
"""

from ceisa_bridge.auth.acquirer import TokenAcquirer
from ceisa_bridge.auth.base import AuthPlugin, AuthResult
from ceisa_bridge.auth.cache import ReadWriteLock, TokenCache
from ceisa_bridge.auth.manager import AuthManager, create_default_manager
from ceisa_bridge.auth.supervisor import TokenSupervisor

__all__ = [
    "AuthManager",
    "AuthPlugin",
    "AuthResult",
    "ReadWriteLock",
    "TokenAcquirer",
    "TokenCache",
    "TokenSupervisor",
    "create_default_manager",
]
