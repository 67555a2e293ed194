"""pokedex -- a command-line Pokedex backed by PokeAPI.

The client talks to the paginated PokeAPI REST service and keeps raw
response bodies in a short-lived, in-memory cache so that paging back and
forth or re-exploring an area does not hit the network twice.

Typical usage::

    pokedex                 # start the interactive REPL
    pokedex map --limit 5   # one-shot listing of location areas
    pokedex explore canalave-city-area

Modules:
    app: Typer application factory and CLI entry point.
    cache: Time-bounded, thread-safe in-memory response cache.
    client: HTTP fetch-or-populate client and the PokeAPI facade.
    repl: Interactive read-eval-print loop and its commands.
    models: Pydantic models for configuration and API payloads.
    config: XDG-aware configuration loading and precedence resolution.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.3.0"
