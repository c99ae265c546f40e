"""Unauthenticated submissions (the ``none`` strategy)."""

from ceisa_bridge.plugins.no_auth.plugin import NoAuthPlugin

__all__ = ["NoAuthPlugin"]
