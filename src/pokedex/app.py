"""Typer application factory and CLI entry point for pokedex.

Invoked without a sub-command, ``pokedex`` starts the interactive REPL.
The ``map`` and ``explore`` commands run a single query and exit, and
``config`` manages the persisted settings.

Every command that talks to PokeAPI opens its own
:class:`~pokedex.cache.ResponseCache` and
:class:`~pokedex.client.SyncClient` through :func:`open_api`; leaving that
block closes the HTTP transport and stops the cache reaper.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  Unhandled exceptions are written to a crash log under
the data directory.
"""

from __future__ import annotations

import logging
import signal
import sys
import traceback
from contextlib import contextmanager
from datetime import datetime
from typing import Any, Iterator, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler

from pokedex import __version__
from pokedex.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="pokedex",
    help="Explore PokeAPI from the command line.",
    invoke_without_command=True,
    add_completion=False,
    rich_markup_mode="rich",
)

from pokedex.commands.config import config_app  # noqa: E402

app.add_typer(config_app, name="config", help="Configuration management.")


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"pokedex {__version__}")
        raise typer.Exit()


def _configure_logging(verbose: bool) -> None:
    """Route the ``pokedex`` logger to stderr, at DEBUG level under ``--verbose``."""
    logger = logging.getLogger("pokedex")
    logger.setLevel(logging.DEBUG if verbose else logging.WARNING)
    if not any(isinstance(h, RichHandler) for h in logger.handlers):
        handler = RichHandler(console=Console(stderr=True), show_path=False)
        handler.setFormatter(logging.Formatter("%(message)s"))
        logger.addHandler(handler)
    logger.propagate = False


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(False, "--json", help="JSON output format."),
    plain_output: bool = typer.Option(False, "--plain", help="Plain text output."),
    no_color: bool = typer.Option(False, "--no-color", help="Disable color output."),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug output (cache hits, retries, sweeps)."
    ),
    base_url: Optional[str] = typer.Option(
        None, "--base-url", help="PokeAPI root URL."
    ),
    cache_ttl: Optional[float] = typer.Option(
        None, "--cache-ttl", help="Seconds a cached response stays eligible for reuse."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Installs the global :class:`~pokedex.output.OutputManager` and keeps
    the ``--base-url``/``--cache-ttl`` overrides in ``ctx.obj``.  The
    configuration itself is resolved by the commands that query PokeAPI, so
    ``config reset`` still runs when ``config.json`` is broken.  Starts the
    REPL when no sub-command was given.
    """
    from pokedex.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    set_output(OutputManager(format=fmt, no_color=no_color, quiet=quiet, verbose=verbose))
    _configure_logging(verbose)

    ctx.ensure_object(dict)
    ctx.obj["overrides"] = {"cli_base_url": base_url, "cli_cache_ttl": cache_ttl}

    if ctx.invoked_subcommand is None:
        repl_command(ctx)


def _resolved_config(ctx: typer.Context) -> Any:
    """Resolve the effective configuration from the overrides kept in ``ctx.obj``."""
    from pokedex.config import resolve_config

    return resolve_config(**ctx.obj["overrides"])


@contextmanager
def open_api(config: Any) -> Iterator[Any]:
    """Yield a :class:`~pokedex.client.PokeAPI` backed by a fresh cache.

    Args:
        config: The resolved :class:`~pokedex.models.GlobalConfig`.
    """
    from pokedex.cache import ResponseCache
    from pokedex.client import PokeAPI, SyncClient

    with ResponseCache(config.cache.ttl_seconds) as cache, SyncClient(
        config.request, base_url=config.base_url, cache=cache
    ) as client:
        yield PokeAPI(client)


@app.command("repl")
def repl_command(ctx: typer.Context) -> None:
    """Start the interactive Pokedex shell."""
    from pokedex.repl import Session, run_repl

    config = _resolved_config(ctx)
    with open_api(config) as api:
        run_repl(Session(api, page_size=config.page_size), prompt=config.prompt)


@app.command("map")
def map_command(
    ctx: typer.Context,
    offset: int = typer.Option(0, "--offset", min=0, help="Index of the first area."),
    limit: Optional[int] = typer.Option(
        None, "--limit", min=1, help="Areas per page (defaults to page_size)."
    ),
) -> None:
    """List one page of location areas."""
    from pokedex.output import print_list, suggest

    config = _resolved_config(ctx)
    with open_api(config) as api:
        page = api.location_areas(offset, limit or config.page_size)
    print_list([area.name for area in page.results])
    if page.next:
        suggest(f"Next page: pokedex map --offset {offset + (limit or config.page_size)}")


@app.command("explore")
def explore_command(
    ctx: typer.Context,
    name: str = typer.Argument(help="Location-area name, e.g. canalave-city-area."),
) -> None:
    """List the Pokemon found in a location area."""
    from pokedex.output import print_list

    with open_api(_resolved_config(ctx)) as api:
        area = api.location_area(name.lower())
    print_list(
        [encounter.pokemon.name for encounter in area.pokemon_encounters],
        title="Found Pokemon:",
    )


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from pokedex.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``pokedex`` console script.

    :class:`~pokedex.exceptions.PokedexError` instances cause a clean exit
    with the error's ``exit_code``.  All other exceptions produce a crash
    log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from pokedex.exceptions import PokedexError
        from pokedex.output import error

        if isinstance(exc, PokedexError):
            error(str(exc))
            sys.exit(exc.exit_code)
        log_path = _write_crash_log(exc)
        error(f"Unexpected error. Debug log: {log_path}")
        sys.exit(EXIT_GENERIC_FAILURE)
