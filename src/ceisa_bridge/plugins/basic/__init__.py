"""HTTP Basic authentication plugin.

Implements the ``basic`` strategy (:rfc:`7617`).

See Also:
    :class:`~ceisa_bridge.plugins.basic.plugin.BasicAuthPlugin`
"""

from ceisa_bridge.plugins.basic.plugin import BasicAuthPlugin, basic_auth_headers

__all__ = ["BasicAuthPlugin", "basic_auth_headers"]
