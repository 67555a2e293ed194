"""Process exit codes for the one-shot ``pokedex`` commands.

:func:`pokedex.app.main` exits with the ``exit_code`` of the
:class:`~pokedex.exceptions.PokedexError` that stopped the command, so a
shell script can tell "no such area" apart from "PokeAPI is down"::

    $ pokedex explore atlantis-area
    $ echo $?
    4

Code 3 is unused: PokeAPI needs no authentication.
"""

EXIT_SUCCESS = 0

EXIT_GENERIC_FAILURE = 1
"""Anything not covered below, including bad configuration."""

EXIT_INVALID_USAGE = 2
"""Bad arguments or an unknown ``config set`` key."""

EXIT_NOT_FOUND = 4
"""PokeAPI answered 404 for the requested area or Pokemon."""

EXIT_SERVER_ERROR = 5
"""PokeAPI answered with any other non-2xx status, after retries."""

EXIT_CONNECTION_ERROR = 6
"""The request never got an answer (DNS, refused connection, timeout)."""

EXIT_DECODE_ERROR = 7
"""A 2xx body was not JSON or did not have the expected shape."""
