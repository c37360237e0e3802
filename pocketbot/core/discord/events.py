from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from discord.ext import commands

if TYPE_CHECKING:
    from pocketbot.core.discord.boot import MyBot

logger = logging.getLogger(__name__)

__all__ = ["EventHandler", "LoggingEventHandler", "register_event_handlers"]


class EventHandler(ABC):
    """
    Lifecycle callbacks delivered by the client runtime.

    Every method runs on the event loop, so implementations must return
    promptly and never block.
    """

    @abstractmethod
    async def on_ready(self, bot: commands.Bot) -> None:
        """The gateway session is established."""

    @abstractmethod
    async def on_resumed(self, bot: commands.Bot) -> None:
        """A dropped gateway session was resumed."""

    @abstractmethod
    async def after_command(
        self, ctx: commands.Context[commands.Bot], error: commands.CommandError | None
    ) -> None:
        """Called once per command execution; *error* is ``None`` on success."""


def _command_name(ctx: commands.Context[commands.Bot]) -> str:
    command = ctx.command
    if command is None:
        return ctx.invoked_with or "<unknown>"
    return command.qualified_name


class LoggingEventHandler(EventHandler):
    async def on_ready(self, bot: commands.Bot) -> None:
        name = bot.user.name if bot.user is not None else "<unknown>"
        logger.info("Connected as %s", name)

    async def on_resumed(self, bot: commands.Bot) -> None:
        logger.info("Resumed")

    async def after_command(
        self, ctx: commands.Context[commands.Bot], error: commands.CommandError | None
    ) -> None:
        name = _command_name(ctx)
        if error is None:
            logger.debug("Command %s completed", name)
            return

        if isinstance(error, commands.CommandInvokeError):
            # The command body itself raised; keep the original traceback.
            logger.warning(
                "Problem in %s command: %r", name, error.original, exc_info=error.original
            )
            return

        # Check failures, bad arguments, cooldowns – expected, not alarming.
        logger.debug("Problem in %s command: %r", name, error)


def register_event_handlers(bot: MyBot, handler: EventHandler | None = None) -> EventHandler:
    """
    Bind *handler* to the runtime events of *bot*.

    Returns the handler actually used so callers can keep a reference.
    """
    active = handler if handler is not None else LoggingEventHandler()

    @bot.event
    async def on_ready() -> None:
        await active.on_ready(bot)

    @bot.event
    async def on_resumed() -> None:
        await active.on_resumed(bot)

    @bot.event
    async def on_command_completion(ctx: commands.Context[commands.Bot]) -> None:
        await active.after_command(ctx, None)

    @bot.event
    async def on_command_error(
        ctx: commands.Context[commands.Bot], error: commands.CommandError
    ) -> None:
        # Unknown names are not command executions; stay quiet.
        if isinstance(error, commands.CommandNotFound):
            return
        await active.after_command(ctx, error)

    return active
