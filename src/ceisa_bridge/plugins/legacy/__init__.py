"""Legacy authentication plugin: API key and/or Basic, whichever are configured."""

from ceisa_bridge.plugins.legacy.plugin import LegacyAuthPlugin

__all__ = ["LegacyAuthPlugin"]
