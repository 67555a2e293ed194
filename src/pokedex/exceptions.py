"""Exception hierarchy for pokedex.

All exceptions inherit from :class:`PokedexError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`pokedex.exit_codes`.
The top-level error handler in :func:`pokedex.app.main` catches
``PokedexError`` and exits with the appropriate code; inside the REPL the
same errors are printed and the loop keeps going.

The response cache itself never raises: absence is reported through the
``found`` flag of :meth:`~pokedex.cache.ResponseCache.get`.

Subclass hierarchy::

    PokedexError (exit 1)
    +-- InvalidUsageError    (exit 2)
    +-- NotFoundError        (exit 4)
    +-- ServerError          (exit 5)
    +-- ConnectionError_     (exit 6)
    +-- ResponseDecodeError  (exit 7)
    +-- ConfigError          (exit 1)
"""

from pokedex.exit_codes import (
    EXIT_CONNECTION_ERROR,
    EXIT_DECODE_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
)


class PokedexError(Exception):
    """Base exception for all pokedex errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`pokedex.exit_codes`.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(PokedexError):
    """Raised for invalid CLI arguments or missing required parameters."""

    exit_code = EXIT_INVALID_USAGE


class NotFoundError(PokedexError):
    """Raised when the API returns HTTP 404 (resource not found).

    Commands such as ``explore`` and ``catch`` treat this as an ordinary
    outcome ("Location not found!") rather than a failure.
    """

    exit_code = EXIT_NOT_FOUND


class ServerError(PokedexError):
    """Raised when the API answers with a non-2xx status other than 404."""

    exit_code = EXIT_SERVER_ERROR


class ConnectionError_(PokedexError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class ResponseDecodeError(PokedexError):
    """Raised when a response body is not valid JSON or does not match the model."""

    exit_code = EXIT_DECODE_ERROR


class ConfigError(PokedexError):
    """Raised for configuration problems (invalid JSON, bad environment overrides)."""

    exit_code = EXIT_GENERIC_FAILURE
