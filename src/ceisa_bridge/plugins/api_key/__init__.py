"""API key authentication plugin.

Implements the ``api_key`` strategy, which sends a static key in a request
header (``X-API-Key`` unless configured otherwise).

See Also:
    :class:`~ceisa_bridge.plugins.api_key.plugin.APIKeyAuthPlugin`
"""

from ceisa_bridge.plugins.api_key.plugin import APIKeyAuthPlugin, api_key_headers

__all__ = ["APIKeyAuthPlugin", "api_key_headers"]
