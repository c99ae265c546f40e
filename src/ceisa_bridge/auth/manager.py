"""Auth manager -- registry and dispatcher for auth plugins.

:class:`AuthManager` maps every :class:`~ceisa_bridge.models.AuthType` to an
:class:`~ceisa_bridge.auth.base.AuthPlugin` and decorates outbound requests
with the headers the selected plugin produces.

Call :func:`create_default_manager` for a manager pre-loaded with the five
built-in strategies.
"""

from __future__ import annotations

from typing import Optional

from ceisa_bridge.auth.base import AuthPlugin, AuthResult
from ceisa_bridge.auth.supervisor import TokenSupervisor
from ceisa_bridge.exceptions import AuthError, ValidationError
from ceisa_bridge.models import AuthStrategy, AuthType, OutboundRequest


class AuthManager:
    """Registry and dispatcher for authentication plugins.

    Example::

        manager = AuthManager()
        manager.register(APIKeyAuthPlugin())
        request = manager.apply(request, ApiKeyAuth(api_key="k-123"))
    """

    def __init__(self) -> None:
        self._plugins: dict[AuthType, AuthPlugin] = {}

    def register(self, plugin: AuthPlugin) -> None:
        """Register *plugin* under its auth type, replacing any previous one."""
        self._plugins[AuthType(plugin.auth_type)] = plugin

    def get_plugin(self, auth_type: AuthType | str) -> AuthPlugin:
        """Retrieve the plugin registered for *auth_type*.

        Raises:
            AuthError: If no plugin is registered for *auth_type*.
        """
        try:
            plugin = self._plugins.get(AuthType(auth_type))
        except ValueError:
            plugin = None
        if plugin is None:
            available = ", ".join(self.list_types()) or "(none)"
            raise AuthError(
                f"No auth plugin registered for type '{getattr(auth_type, 'value', auth_type)}'. "
                f"Available types: {available}"
            )
        return plugin

    def authenticate(self, strategy: AuthStrategy) -> AuthResult:
        """Delegate to the plugin matching ``strategy.type``.

        Raises:
            AuthError: If the type has no plugin, or the plugin fails.
        """
        return self.get_plugin(strategy.type).authenticate(strategy)

    def apply(self, request: OutboundRequest, strategy: AuthStrategy) -> OutboundRequest:
        """Return a copy of *request* carrying the strategy's credential headers.

        Raises:
            AuthError: If authentication fails. The request is never sent
                without the credentials the strategy asks for.
            ValidationError: If a credential header is not plain ASCII and
                so cannot go on the wire.
        """
        result = self.authenticate(strategy)
        if not result:
            return request
        for name, value in result.headers.items():
            if not (name.isascii() and value.isascii()):
                raise ValidationError(
                    f"{strategy.type} credentials for header '{name}' "
                    "must contain only ASCII characters"
                )
        return request.model_copy(update={"headers": {**request.headers, **result.headers}})

    def validate(self, strategy: AuthStrategy) -> list[str]:
        """Return the problems the matching plugin finds in *strategy*."""
        return self.get_plugin(strategy.type).validate_config(strategy)

    def list_types(self) -> list[str]:
        """Return the registered auth type identifiers, sorted."""
        return sorted(t.value for t in self._plugins)


def create_default_manager(supervisor: Optional[TokenSupervisor] = None) -> AuthManager:
    """Create an :class:`AuthManager` with every built-in strategy registered.

    - ``none`` -- nothing attached.
    - ``api_key`` -- static key in a header.
    - ``basic`` -- HTTP Basic authentication.
    - ``oauth2`` -- bearer token from *supervisor*.
    - ``legacy`` -- API key and/or Basic, whichever are configured.

    Args:
        supervisor: Token supervisor backing the ``oauth2`` strategy. A fresh
            one without configuration is created when omitted.
    """
    from ceisa_bridge.plugins.api_key import APIKeyAuthPlugin
    from ceisa_bridge.plugins.basic import BasicAuthPlugin
    from ceisa_bridge.plugins.legacy import LegacyAuthPlugin
    from ceisa_bridge.plugins.no_auth import NoAuthPlugin
    from ceisa_bridge.plugins.oauth2 import OAuth2AuthPlugin

    manager = AuthManager()
    manager.register(NoAuthPlugin())
    manager.register(APIKeyAuthPlugin())
    manager.register(BasicAuthPlugin())
    manager.register(OAuth2AuthPlugin(supervisor or TokenSupervisor()))
    manager.register(LegacyAuthPlugin())
    return manager
