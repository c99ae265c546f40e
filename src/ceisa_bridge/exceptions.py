"""Exception hierarchy for ceisa_bridge.

All exceptions inherit from :class:`BridgeError`, which carries an
``exit_code`` attribute mapped to a constant from
:mod:`ceisa_bridge.exit_codes`. The entry point in
:func:`ceisa_bridge.app.main` catches ``BridgeError`` and exits with the
matching code; anything else produces a crash log.

Subclass hierarchy::

    BridgeError (exit 1)
    +-- ConfigError       (exit 1)
    +-- ValidationError   (exit 2)
    +-- AuthError         (exit 3)
    +-- NetworkError      (exit 6)

None of these are retried by the library itself.
"""

from ceisa_bridge.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
)


class BridgeError(Exception):
    """Base exception for all ceisa_bridge errors.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class ConfigError(BridgeError):
    """Raised when required configuration is missing or unusable.

    Always detected before any network call is made.
    """

    exit_code = EXIT_GENERIC_FAILURE


class AuthError(BridgeError):
    """Raised when a credential cannot be acquired, refreshed, or attached.

    Covers rejected logins, undecodable token responses, a missing refresh
    token, an empty token cache, and login/refresh exchanges that could not
    be sent at all (the underlying transport error is chained).
    """

    exit_code = EXIT_AUTH_FAILURE


class NetworkError(BridgeError):
    """Raised on transport failures while submitting a document."""

    exit_code = EXIT_CONNECTION_ERROR


class ValidationError(BridgeError):
    """Raised for a malformed document or submission configuration."""

    exit_code = EXIT_INVALID_USAGE
