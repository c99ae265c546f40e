"""Built-in authentication strategies.

One subpackage per :class:`~ceisa_bridge.models.AuthType`, each exporting an
:class:`~ceisa_bridge.auth.base.AuthPlugin`:

* :mod:`~ceisa_bridge.plugins.no_auth` -- ``none``
* :mod:`~ceisa_bridge.plugins.api_key` -- ``api_key``
* :mod:`~ceisa_bridge.plugins.basic` -- ``basic``
* :mod:`~ceisa_bridge.plugins.oauth2` -- ``oauth2``
* :mod:`~ceisa_bridge.plugins.legacy` -- ``legacy``

:func:`~ceisa_bridge.auth.manager.create_default_manager` registers all of them.
"""
