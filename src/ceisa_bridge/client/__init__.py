"""HTTP client layer for ceisa_bridge.

Classes:
    :class:`OutboundSender` -- sends prepared submissions and probes
    endpoints, backed by :class:`httpx.Client`.
    :class:`ApiClient` -- facade combining token management, strategy
    dispatch and the sender; the only entry point the command layer uses.

Example::

    from ceisa_bridge.client import ApiClient

    client = ApiClient()
    outcome = client.send(document, api_config, dry_run=True)
"""

from ceisa_bridge.client.api_client import ApiClient
from ceisa_bridge.client.sender import OutboundSender

__all__ = ["ApiClient", "OutboundSender"]
