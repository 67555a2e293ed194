"""REPL command registry, session state, and command handlers.

Each command is a :class:`Command` whose handler receives the active
:class:`Session` and the remaining tokens of the input line.  Handlers
write results through :mod:`pokedex.output` and let
:class:`~pokedex.exceptions.PokedexError` propagate to the dispatcher in
:mod:`pokedex.repl.shell`, except for 404s, which are an expected outcome
for ``explore`` and ``catch`` and are reported inline.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Optional

from pokedex.client.pokeapi import PokeAPI
from pokedex.exceptions import NotFoundError
from pokedex.models import LocationAreaPage, Pokemon
from pokedex.output import OutputFormat, get_output

HELP_HEADER = "Welcome to the Pokedex!\nUsage:\n"

# Base-experience range of catchable Pokemon and the capture odds it maps to.
MIN_BASE_EXP = 64
MAX_BASE_EXP = 608
P_MIN = 0.1
P_MAX = 0.9
RNG_SEED = 69420


Handler = Callable[["Session", list[str]], None]


@dataclass
class Command:
    """A named REPL command.

    ``missing_arg`` is the message printed when a command that needs an
    argument is called without one; ``None`` means the command takes no
    argument.
    """

    name: str
    description: str
    handler: Handler
    missing_arg: Optional[str] = None


@dataclass
class Session:
    """Mutable state shared by the commands of one REPL session.

    ``next_url`` and ``previous_url`` are the pagination links for
    ``map``/``mapb`` and are only touched by those two handlers.
    """

    api: PokeAPI
    page_size: int = 20
    next_url: Optional[str] = None
    previous_url: Optional[str] = None
    caught: dict[str, Pokemon] = field(default_factory=dict)
    rng: random.Random = field(default_factory=lambda: random.Random(RNG_SEED))
    commands: dict[str, Command] = field(default_factory=dict)
    running: bool = True

    def __post_init__(self) -> None:
        if self.next_url is None:
            self.next_url = self.api.location_areas_url(0, self.page_size)
        if not self.commands:
            self.commands = build_registry()


# ------------------------------------------------------------------ #
# Handlers
# ------------------------------------------------------------------ #


def command_exit(session: Session, args: list[str]) -> None:
    get_output().print_data("Closing the Pokedex... Goodbye!")
    session.running = False


def command_help(session: Session, args: list[str]) -> None:
    output = get_output()
    output.print_data(HELP_HEADER)
    for command in session.commands.values():
        output.print_data(f"{command.name}: {command.description}")


def _show_page(session: Session, page: LocationAreaPage) -> None:
    get_output().print_list([area.name for area in page.results])
    session.next_url = page.next
    session.previous_url = page.previous


def command_map(session: Session, args: list[str]) -> None:
    """Print the next page of location areas."""
    if session.next_url is None:
        get_output().print_data("you're on the last page")
        return
    _show_page(session, session.api.location_area_page(session.next_url))


def command_mapb(session: Session, args: list[str]) -> None:
    """Print the previous page of location areas."""
    if session.previous_url is None:
        get_output().print_data("you're on the first page")
        return
    _show_page(session, session.api.location_area_page(session.previous_url))


def command_explore(session: Session, args: list[str]) -> None:
    """List the Pokemon that can be encountered in a location area."""
    output = get_output()
    name = args[0]
    output.info(f"Exploring {name}...")
    try:
        area = session.api.location_area(name)
    except NotFoundError:
        output.print_data("Location not found!")
        return
    output.print_list(
        [encounter.pokemon.name for encounter in area.pokemon_encounters],
        title="Found Pokemon:",
    )


def catch_probability(base_experience: Optional[int]) -> float:
    """Map a Pokemon's base experience onto a capture probability.

    Higher base experience means a lower chance.  The result is scaled
    into ``[P_MIN, P_MAX]``; unknown experience counts as the maximum.
    """
    if base_experience is None:
        base_experience = MAX_BASE_EXP
    base_experience = min(max(base_experience, MIN_BASE_EXP), MAX_BASE_EXP)

    def raw(exp: int) -> float:
        return 1 / ((exp - MIN_BASE_EXP) / (MAX_BASE_EXP - MIN_BASE_EXP) + 1)

    raw_min, raw_max = raw(MAX_BASE_EXP), raw(MIN_BASE_EXP)
    return P_MIN + (raw(base_experience) - raw_min) * ((P_MAX - P_MIN) / (raw_max - raw_min))


def command_catch(session: Session, args: list[str]) -> None:
    """Throw a Pokeball at a Pokemon and add it to the Pokedex on success."""
    output = get_output()
    name = args[0]
    if name in session.caught:
        output.print_data(f"You've already caught a {name}!")
        return

    try:
        pokemon = session.api.pokemon(name)
    except NotFoundError:
        output.print_data("Pokemon not found!")
        return

    output.print_data(f"Throwing a Pokeball at {name}...")
    chance = catch_probability(pokemon.base_experience)
    output.info(f"You have a {chance:.0%} chance of capturing the Pokemon!")
    if session.rng.random() <= chance:
        output.print_data(f"{name} was caught!")
        output.suggest("You may now inspect it with the inspect command.")
        session.caught[name] = pokemon
    else:
        output.print_data(f"{name} escaped!")


def command_inspect(session: Session, args: list[str]) -> None:
    """Show the stats of a caught Pokemon."""
    output = get_output()
    name = args[0]
    pokemon = session.caught.get(name)
    if pokemon is None:
        output.print_data("you have not caught that pokemon")
        return

    if output.format == OutputFormat.JSON:
        output.format_response(pokemon.model_dump(mode="json"))
        return

    output.print_data(f"Name: {pokemon.name}")
    output.print_data(f"Height: {pokemon.height}")
    output.print_data(f"Weight: {pokemon.weight}")
    output.print_data("Stats:")
    for slot in pokemon.stats:
        output.print_data(f"  -{slot.stat.name}: {slot.base_stat}")
    output.print_data("Types:")
    for slot in pokemon.types:
        output.print_data(f"  - {slot.type.name}")


def command_pokedex(session: Session, args: list[str]) -> None:
    output = get_output()
    if not session.caught:
        output.print_data("You haven't caught any Pokemon!")
        return
    output.print_list(list(session.caught), title="Your Pokedex:")


def command_cache(session: Session, args: list[str]) -> None:
    """Show response cache statistics, or empty the cache with ``cache clear``."""
    output = get_output()
    cache = session.api.cache
    if cache is None:
        output.print_data("Response caching is disabled.")
        return
    if not args:
        output.format_response(cache.stats())
    elif args[0] == "clear":
        cache.clear()
        output.print_data("Cache cleared.")
    else:
        output.print_data("Usage: cache [clear]")


def build_registry() -> dict[str, Command]:
    """Return a fresh name-to-command mapping in help order."""
    commands = [
        Command("help", "Displays a help message", command_help),
        Command("exit", "Exit the Pokedex", command_exit),
        Command("map", "Get the next page of location-areas", command_map),
        Command("mapb", "Get the previous page of location-areas", command_mapb),
        Command(
            "explore",
            "Explore a location-area for Pokemon",
            command_explore,
            missing_arg="Please provide a location-area to explore!",
        ),
        Command(
            "catch",
            "Catch the given Pokemon",
            command_catch,
            missing_arg="Please provide a Pokemon to catch!",
        ),
        Command(
            "inspect",
            "Inspect a caught Pokemon",
            command_inspect,
            missing_arg="Please provide a Pokemon to inspect!",
        ),
        Command("pokedex", "List caught Pokemon", command_pokedex),
        Command("cache", "Show response cache stats (`cache clear` empties it)", command_cache),
    ]
    return {command.name: command for command in commands}
