"""Lazy command loading and aliases for the cinelog CLI."""

import importlib
import os
from typing import Optional

from rich_click import RichGroup

# Modules in the commands package that are not commands
HELPER_MODULES = {"common"}

DEFAULT_ALIASES = {
    "st": "status",
    "imp": "import",
    "pv": "preview",
}


class CinelogGroup(RichGroup):
    """
    Root command group.

    Commands live one per module in ``commands_package`` and are imported
    only when invoked. A trailing ``_cmd`` in a module name is dropped, so
    ``import_cmd.py`` provides the ``import`` command. Groups registered with
    ``add_command`` take precedence over lazily loaded commands.
    """

    def __init__(self, *args, commands_package: Optional[str] = None, aliases: Optional[dict] = None, **kwargs):
        super().__init__(*args, **kwargs)
        self.commands_package = commands_package or 'cinelog.cli.commands'
        self.aliases = aliases if aliases is not None else dict(DEFAULT_ALIASES)

    def _lazy_command_names(self):
        package = importlib.import_module(self.commands_package)
        commands_dir = os.path.dirname(package.__file__)

        names = []
        for filename in os.listdir(commands_dir):
            if not filename.endswith('.py') or filename.startswith('__'):
                continue
            name = filename[:-3]
            if name in HELPER_MODULES:
                continue
            if name.endswith('_cmd'):
                name = name[:-4]
            names.append(name)
        return names

    def list_commands(self, ctx):
        names = set(self._lazy_command_names())
        names.update(self.commands.keys())
        return sorted(names)

    def get_command(self, ctx, cmd_name):
        """Resolve aliases, then return a registered or lazily loaded command."""
        name = self.aliases.get(cmd_name, cmd_name)
        if name in self.commands:
            return self.commands[name]

        for module_name in (name, f"{name}_cmd"):
            qualified = f'{self.commands_package}.{module_name}'
            try:
                module = importlib.import_module(qualified)
            except ModuleNotFoundError as e:
                # Only a missing command module means "no such command"
                if e.name != qualified:
                    raise
                continue
            return getattr(module, 'cli', None)
        return None
