"""Interactive read-eval-print loop.

:func:`run_repl` reads lines, tokenizes them with :func:`clean_input`, and
hands the first token to :func:`dispatch`, which looks the command up in
the session's registry and runs its handler.  Any
:class:`~pokedex.exceptions.PokedexError` raised by a handler is printed
and the loop continues.
"""

from __future__ import annotations

import re
from typing import Callable

from pokedex.exceptions import PokedexError
from pokedex.output import get_output
from pokedex.repl.commands import Session

DEFAULT_PROMPT = "Pokedex > "

_TOKEN_RE = re.compile(r"[a-z]+(?:-[a-z0-9]+)*")


def clean_input(text: str) -> list[str]:
    """Lower-case *text* and split it into command tokens.

    Tokens are runs of letters, optionally followed by hyphenated
    alphanumeric parts (``canalave-city-area``, ``porygon-z``).  Everything
    else is treated as a separator.
    """
    return _TOKEN_RE.findall(text.lower())


def dispatch(session: Session, command: str, args: list[str]) -> bool:
    """Run *command* with *args* against *session*.

    Returns:
        ``True`` if the handler ran to completion, ``False`` if the command
        was unknown, an argument was missing, or the handler failed.
    """
    output = get_output()
    entry = session.commands.get(command)
    if entry is None:
        output.print_data("Please provide a supported command.")
        output.suggest("Try `help` if you don't know them!")
        return False

    if entry.missing_arg is not None and not args:
        output.print_data(entry.missing_arg)
        return False

    try:
        entry.handler(session, args)
    except PokedexError as exc:
        output.error(str(exc))
        return False
    return True


def run_repl(
    session: Session,
    read_line: Callable[[str], str] = input,
    prompt: str = DEFAULT_PROMPT,
) -> None:
    """Read and execute commands until ``exit`` or end of input.

    Args:
        session: State shared by all commands.
        read_line: Prompting line reader; :func:`input` by default.
        prompt: Text shown before each line.
    """
    output = get_output()
    while session.running:
        try:
            line = read_line(prompt)
        except EOFError:
            output.print_data("")
            break

        tokens = clean_input(line)
        if not tokens:
            continue
        dispatch(session, tokens[0], tokens[1:])
