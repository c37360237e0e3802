#!/usr/bin/env python
"""
File: plugins/help.py
---------------------
Summary: Help command. Lists available commands, grouped by command group.

Only shows commands the invoking user is allowed to run: owner-only commands
stay hidden from everybody else.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from discord.ext import commands

logger = logging.getLogger(__name__)

NO_GROUP = "Help"


def first_help_line(command: commands.Command[Any, ..., Any]) -> str:
    # cmd.help can be None → coerce to empty string first
    raw_help = (command.help or "").strip()
    return next((ln.strip() for ln in raw_help.splitlines() if ln.strip()), "…")


def format_help_listing(
    groups: Mapping[str, Sequence[commands.Command[Any, ..., Any]]], prefix: str
) -> str:
    """Render ``{group name: commands}`` as the text sent for ``<prefix>help``."""
    blocks: list[str] = []
    for group_name, cmds in groups.items():
        if not cmds:
            continue
        lines = [f"**{group_name}**"]
        lines.extend(
            f"`{prefix}{cmd.name}` – {first_help_line(cmd)}"
            for cmd in sorted(cmds, key=lambda c: c.name)
        )
        blocks.append("\n".join(lines))

    if not blocks:
        return "No commands available."
    blocks.append(f"Use `{prefix}help <command>` for more details.")
    return "\n\n".join(blocks)


def format_command_help(command: commands.Command[Any, ..., Any], prefix: str) -> str:
    usage = f"{prefix}{command.qualified_name}"
    if command.signature:
        usage = f"{usage} {command.signature}"
    text = f"**{usage}**\n{command.help or 'No detailed help available.'}"
    if command.aliases:
        text += "\nAliases: " + ", ".join(f"`{a}`" for a in command.aliases)
    return text


class PocketHelpCommand(commands.HelpCommand):
    def __init__(self, **options: Any) -> None:
        options.setdefault(
            "command_attrs",
            {"help": "Show available commands. Use help <command> for details on one."},
        )
        super().__init__(**options)

    async def send_bot_help(
        self,
        mapping: Mapping[commands.Cog | None, list[commands.Command[Any, ..., Any]]],
    ) -> None:
        groups: dict[str, Sequence[commands.Command[Any, ..., Any]]] = {}
        for cog, cmds in mapping.items():
            visible = await self.filter_commands(cmds, sort=True)
            if visible:
                groups[cog.qualified_name if cog is not None else NO_GROUP] = visible
        await self.get_destination().send(format_help_listing(groups, self.context.clean_prefix))

    async def send_cog_help(self, cog: commands.Cog) -> None:
        visible = await self.filter_commands(cog.get_commands(), sort=True)
        await self.get_destination().send(
            format_help_listing({cog.qualified_name: visible}, self.context.clean_prefix)
        )

    async def send_command_help(self, command: commands.Command[Any, ..., Any]) -> None:
        await self.get_destination().send(format_command_help(command, self.context.clean_prefix))

    def command_not_found(self, string: str) -> str:
        return f"Command `{string}` not found."
