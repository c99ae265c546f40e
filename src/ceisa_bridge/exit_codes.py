"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to an error category and is referenced by the matching
:class:`~ceisa_bridge.exceptions.BridgeError` subclass, so shell wrappers can
tell a rejected login from an unreachable endpoint without parsing stderr.

Example::

    $ ceisa-bridge send document.json
    $ echo $?
    3   # EXIT_AUTH_FAILURE -- the login endpoint rejected the credentials
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred, or the configuration is unusable."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or an invalid document."""

EXIT_AUTH_FAILURE = 3
"""A credential could not be acquired, refreshed, or attached."""

EXIT_SUBMISSION_FAILED = 5
"""The downstream API answered with a non-2xx status."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""
