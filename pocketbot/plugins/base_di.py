from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from discord.ext import commands

from pocketbot.core.state import SharedState

if TYPE_CHECKING:
    from pocketbot.core.containers import Container


# A light mix‑in that resolves the DI container once.
class BaseDIClientCog(commands.Cog):
    """
    Command groups that read shared startup state should inherit from this mix‑in.
    It guarantees that ``self.container`` and ``self.state`` are always present.
    """

    container: Container  # populated at runtime

    def __init__(self, bot: commands.Bot, state: SharedState | None = None) -> None:
        super().__init__()
        self.bot = bot
        # Fail fast if container is missing
        if not hasattr(bot, "container"):
            raise RuntimeError(
                "DI container missing – start the bot via BotLifecycle "
                "or attach a Container in your test fixture."
            )
        self.container = bot.container
        self.state: SharedState = state if state is not None else self.container.shared_state()
        logging.getLogger(__name__).debug(
            "[BaseDIClientCog] container resolved: %s", type(self.container).__name__
        )
