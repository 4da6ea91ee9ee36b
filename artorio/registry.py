"""Command discovery.

Every module in artorio/commands/ that defines a module-level `command`
(a Command instance) becomes a CLI subcommand under that command's name.
Modules whose names start with an underscore are skipped.
"""

import importlib
import pkgutil

from artorio.core.types import Command

_registry: dict[str, Command] = {}


def discover() -> dict[str, Command]:
    """Import every command module once and return name -> Command."""
    if not _registry:
        import artorio.commands as pkg

        for info in pkgutil.iter_modules(pkg.__path__, prefix=f'{pkg.__name__}.'):
            if info.name.rpartition('.')[2].startswith('_'):
                continue
            cmd = getattr(importlib.import_module(info.name), 'command', None)
            if isinstance(cmd, Command):
                _registry[cmd.name] = cmd
    return _registry


def get(name: str) -> Command:
    reg = discover()
    if name not in reg:
        raise KeyError(f'Unknown command: {name}. Available: {", ".join(sorted(reg))}')
    return reg[name]


def all_commands() -> dict[str, Command]:
    return discover()
