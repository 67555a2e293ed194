"""Built-in CLI sub-commands for pokedex.

* :mod:`~pokedex.commands.config` -- view and modify global settings.

The interactive shell and the one-shot ``map``/``explore`` commands are
registered directly on the root app in :mod:`pokedex.app`.
"""
