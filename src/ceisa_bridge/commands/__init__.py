"""Built-in CLI sub-commands for ceisa_bridge.

* :mod:`~ceisa_bridge.commands.auth` -- OAuth2 login, refresh and token output.
* :mod:`~ceisa_bridge.commands.submit` -- ``send`` and ``probe``.
* :mod:`~ceisa_bridge.commands.document` -- ``generate`` the customs document
  and write the Excel ``template``.
* :mod:`~ceisa_bridge.commands.config` -- view and modify persisted settings.

Commands only talk to :class:`~ceisa_bridge.client.ApiClient`, built by
:func:`~ceisa_bridge.commands.session.build_client`.
"""
