"""Terminal output for pokedex: data on stdout, diagnostics on stderr.

Anything a user might pipe into another tool -- area names, Pokemon
listings, ``inspect`` details, config dumps -- is written to **stdout**.
Progress lines ("Exploring ..."), errors, next-step hints and the
``--verbose`` cache/retry traces go to **stderr**, so
``pokedex map --json | jq`` keeps working while the REPL still talks to
the user.

Rendering follows the resolved :class:`OutputFormat`: JSON documents,
tab-separated plain text, or Rich syntax highlighting on an interactive
terminal.  Colour is dropped for ``--no-color``, ``NO_COLOR`` and
``TERM=dumb`` (see https://no-color.org/).

The active :class:`OutputManager` is process-global.  The root CLI
callback installs one with :func:`set_output`, REPL handlers and the HTTP
client fetch it with :func:`get_output`, and tests swap it out freely.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.syntax import Syntax


class OutputFormat(str, Enum):
    """How data written to stdout is rendered.

    ``AUTO`` becomes ``RICH`` on a colour-capable TTY and ``PLAIN``
    everywhere else.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Routes pokedex output to the right stream in the right format.

    Args:
        format: Requested format; ``AUTO`` is resolved on construction.
        no_color: Strip colour and Rich markup from every stream.
        quiet: Hide informational stderr lines (errors are always shown).
        verbose: Show ``debug`` lines such as cache hits and retries.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose

        if format != OutputFormat.AUTO:
            self._format = format
        elif _is_tty() and not self._no_color:
            self._format = OutputFormat.RICH
        else:
            self._format = OutputFormat.PLAIN

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=self._format == OutputFormat.RICH,
        )
        self._stderr = Console(file=sys.stderr, no_color=self._no_color, stderr=True)

    @property
    def format(self) -> OutputFormat:
        return self._format

    # ------------------------------------------------------------------ #
    # stdout
    # ------------------------------------------------------------------ #

    def print_data(self, text: str) -> None:
        """Write one line of data to stdout, unstyled."""
        print(text, file=sys.stdout, flush=True)

    def print_list(self, items: list[str], title: Optional[str] = None) -> None:
        """Write a list of resource names.

        JSON output is a bare array (the title is dropped).  Otherwise each
        name gets its own line; under a *title* such as ``"Found Pokemon:"``
        the names are indented as ``  - name``.
        """
        if self._format == OutputFormat.JSON:
            self.print_data(json.dumps(items, indent=2, ensure_ascii=False))
        elif title:
            self.print_data(title)
            for item in items:
                self.print_data(f"  - {item}")
        else:
            for item in items:
                self.print_data(item)

    def format_response(self, data: Any) -> None:
        """Render a structured value (decoded payload, config dump, stats).

        * JSON: indented document.  A string holding JSON is re-indented.
        * Plain: ``key<TAB>value`` per dict item, one line per list item.
        * Rich: syntax-highlighted JSON for dicts and lists.
        """
        if self._format == OutputFormat.JSON:
            if isinstance(data, str):
                try:
                    data = json.loads(data)
                except json.JSONDecodeError:
                    self.print_data(data)
                    return
            self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        elif self._format == OutputFormat.PLAIN:
            self._print_plain(data)
        elif isinstance(data, (dict, list)):
            text = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(text, "json", theme="monokai", word_wrap=True))
        else:
            self._stdout.print(str(data))

    def _print_plain(self, data: Any, prefix: str = "") -> None:
        # Nested dicts flatten to dotted keys, as accepted by ``config set``.
        if isinstance(data, dict):
            for key, value in data.items():
                if isinstance(value, dict):
                    self._print_plain(value, prefix=f"{prefix}{key}.")
                else:
                    self.print_data(f"{prefix}{key}\t{value}")
        elif isinstance(data, list):
            for item in data:
                if isinstance(item, dict):
                    self.print_data("\t".join(str(v) for v in item.values()))
                else:
                    self.print_data(str(item))
        else:
            self.print_data(str(data))

    # ------------------------------------------------------------------ #
    # stderr
    # ------------------------------------------------------------------ #

    def _diagnostic(self, text: str, markup: str) -> None:
        """Write *text* to stderr, using Rich *markup* unless colour is off."""
        if self._no_color:
            print(text, file=sys.stderr, flush=True)
        else:
            self._stderr.print(markup)

    def info(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, message)

    def success(self, message: str) -> None:
        if not self._quiet:
            self._diagnostic(message, f"[green]{message}[/green]")

    def suggest(self, message: str) -> None:
        """Hint at a next step, e.g. ``→ Try `help` ...``.  Hidden by ``--quiet``."""
        if not self._quiet:
            self._diagnostic(f"→ {message}", f"[dim]→ {message}[/dim]")

    def error(self, message: str) -> None:
        """Report a failure.  Shown even under ``--quiet``."""
        self._diagnostic(f"Error: {message}", f"[bold red]Error:[/bold red] {message}")

    def debug(self, message: str) -> None:
        """Trace line for ``--verbose`` (cache hits/misses, retries)."""
        if self._verbose:
            self._diagnostic(f"[debug] {message}", f"[dim]\\[debug] {message}[/dim]")


def _is_tty() -> bool:
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """True when ``NO_COLOR`` is set (to anything) or ``TERM`` is ``dumb``."""
    return os.environ.get("NO_COLOR") is not None or os.environ.get("TERM") == "dumb"


# ------------------------------------------------------------------ #
# Process-global manager
# ------------------------------------------------------------------ #

_output: Optional[OutputManager] = None


def get_output() -> OutputManager:
    """Return the installed manager, creating an ``AUTO`` one on first use."""
    global _output
    if _output is None:
        _output = OutputManager()
    return _output


def set_output(output: OutputManager) -> None:
    global _output
    _output = output


def reset_output() -> None:
    """Forget the installed manager; the next :func:`get_output` builds a fresh one."""
    global _output
    _output = None


def format_response(data: Any) -> None:
    get_output().format_response(data)


def print_list(items: list[str], title: Optional[str] = None) -> None:
    get_output().print_list(items, title)


def info(message: str) -> None:
    get_output().info(message)


def success(message: str) -> None:
    get_output().success(message)


def suggest(message: str) -> None:
    get_output().suggest(message)


def error(message: str) -> None:
    get_output().error(message)
