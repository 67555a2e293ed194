"""``pokedex config`` -- inspect and edit ``config.json``.

Only the file is touched; flags and environment overrides are not shown
here.  Keys use dot notation matching :class:`~pokedex.models.GlobalConfig`,
e.g. ``cache.ttl_seconds``, ``page_size`` or ``request.max_retries``.
"""

from __future__ import annotations

from typing import Any

import typer
from pydantic import ValidationError

from pokedex.exceptions import InvalidUsageError
from pokedex.output import error, format_response, info, success


config_app = typer.Typer(no_args_is_help=True)


def _coerce(current: Any, raw: str, key: str) -> Any:
    """Convert *raw* to the type of the value it replaces."""
    if isinstance(current, bool):
        return raw.lower() in ("true", "1", "yes", "on")
    if isinstance(current, (int, float)):
        try:
            return type(current)(raw)
        except ValueError:
            raise InvalidUsageError(
                f"Expected {type(current).__name__} for {key}, got: {raw}"
            ) from None
    return raw


def _set_dotted(data: dict[str, Any], key: str, raw: str) -> Any:
    """Assign *raw* at dotted *key* inside *data*; return the stored value."""
    *parents, leaf = key.split(".")
    node = data
    for part in parents:
        node = node.get(part)
        if not isinstance(node, dict):
            raise InvalidUsageError(f"Invalid config key: {key}")
    if leaf not in node or isinstance(node[leaf], dict):
        raise InvalidUsageError(f"Unknown config key: {key}")
    node[leaf] = _coerce(node[leaf], raw, key)
    return node[leaf]


@config_app.command("show")
def config_show() -> None:
    """Print the saved configuration.

    Example::

        pokedex --json config show
    """
    from pokedex.config import get_config_dir, load_global_config

    info(f"Config directory: {get_config_dir()}")
    format_response(load_global_config().model_dump(mode="json"))


@config_app.command("set")
def config_set(
    key: str = typer.Argument(help="Dotted key, e.g. 'cache.ttl_seconds'."),
    value: str = typer.Argument(help="New value."),
) -> None:
    """Change one setting and save it.

    The value is parsed as the type of the setting it replaces and the
    whole configuration is validated before anything is written.  Exits
    with code 2 on an unknown key or an invalid value.

    Example::

        pokedex config set cache.ttl_seconds 10
    """
    from pokedex.config import load_global_config, save_global_config
    from pokedex.models import GlobalConfig

    data = load_global_config().model_dump(mode="json")
    try:
        stored = _set_dotted(data, key, value)
        updated = GlobalConfig.model_validate(data)
    except InvalidUsageError as exc:
        error(str(exc))
        raise typer.Exit(code=exc.exit_code) from None
    except ValidationError as exc:
        error(f"Validation error: {exc}")
        raise typer.Exit(code=InvalidUsageError.exit_code) from None

    save_global_config(updated)
    success(f"Set {key} = {stored}")


@config_app.command("reset")
def config_reset(
    force: bool = typer.Option(False, "--force", "-f", help="Skip confirmation."),
) -> None:
    """Restore every setting to its default."""
    from pokedex.config import save_global_config
    from pokedex.models import GlobalConfig

    if not force and not typer.confirm("Reset all config to defaults?"):
        info("Cancelled.")
        raise typer.Exit()

    save_global_config(GlobalConfig())
    success("Configuration reset to defaults.")
