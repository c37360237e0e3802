from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import discord
from discord.ext import commands

logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from pocketbot.core.containers import Container
    from pocketbot.core.lifecycle import BotLifecycle


class MyBot(commands.Bot):
    # Attrs added at runtime, but mypy needs to know for strict type checking.
    container: Container
    lifecycle: BotLifecycle

    def __init__(self, *args: Any, container: Container | None = None, **kwargs: Any):
        super().__init__(*args, **kwargs)
        if container is not None:
            self.container = container

    async def add_command_group(self, group: commands.Cog) -> bool:
        """Register *group*, unless one of its names is already taken.

        Groups registered earlier keep their names; a later group that clashes
        is rejected as a whole so a half-registered group never answers.
        """
        try:
            await self.add_cog(group)
        except commands.CommandRegistrationError as e:
            kind = "alias" if e.alias_conflict else "command"
            logger.error(
                "Command group %s not registered: %s '%s' is already taken.",
                group.qualified_name,
                kind,
                e.name,
            )
            return False
        except discord.ClientException as e:
            logger.error("Command group %s not registered: %s", group.qualified_name, e)
            return False
        logger.info(
            "Registered command group %s: %s",
            group.qualified_name,
            ", ".join(sorted(c.name for c in group.get_commands())) or "—",
        )
        return True


def default_intents() -> discord.Intents:
    """Default intents plus message content, which prefix commands need."""
    intents = discord.Intents.default()
    intents.message_content = True
    return intents
