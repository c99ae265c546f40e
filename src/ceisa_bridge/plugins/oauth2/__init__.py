"""OAuth2 bearer authentication plugin.

Implements the ``oauth2`` strategy on top of a
:class:`~ceisa_bridge.auth.supervisor.TokenSupervisor`.

See Also:
    :class:`~ceisa_bridge.plugins.oauth2.plugin.OAuth2AuthPlugin`
"""

from ceisa_bridge.plugins.oauth2.plugin import OAuth2AuthPlugin

__all__ = ["OAuth2AuthPlugin"]
