"""Interactive Pokedex shell.

:mod:`pokedex.repl.commands` holds the command registry, the per-session
state (pagination links, caught Pokemon, RNG) and the handlers;
:mod:`pokedex.repl.shell` holds the tokenizer, dispatcher and loop.
"""

from pokedex.repl.commands import Command, Session, build_registry
from pokedex.repl.shell import clean_input, dispatch, run_repl

__all__ = ["Command", "Session", "build_registry", "clean_input", "dispatch", "run_repl"]
