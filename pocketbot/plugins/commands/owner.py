from __future__ import annotations

import logging

from discord.ext import commands

from pocketbot.core.discord.owners import is_owner_id
from pocketbot.core.state import ShardManagerContainer, SharedState
from pocketbot.plugins.base_di import BaseDIClientCog
from pocketbot.plugins.commands.general import format_latency

logger = logging.getLogger(__name__)

OWNER_ONLY = "❌ Owner only."
NO_SHARD_MANAGER = "There was a problem getting the shard manager."


class OwnerCommands(BaseDIClientCog, name="Owner"):
    def __init__(self, bot: commands.Bot, state: SharedState | None = None) -> None:
        BaseDIClientCog.__init__(self, bot, state)

    async def cog_check(self, ctx: commands.Context[commands.Bot]) -> bool:  # type: ignore[override]
        if not is_owner_id(ctx.bot, ctx.author.id):
            raise commands.NotOwner("You do not own this bot.")
        return True

    async def cog_command_error(
        self, ctx: commands.Context[commands.Bot], error: Exception
    ) -> None:
        if isinstance(error, commands.NotOwner):
            logger.info(
                "Rejected %s from non-owner %s",
                ctx.command.qualified_name if ctx.command else "?",
                ctx.author.id,
            )
            await ctx.send(OWNER_ONLY)

    @commands.command(name="shutdown", aliases=["quit"])
    async def shutdown(self, ctx: commands.Context[commands.Bot]) -> None:
        """Disconnect from every shard and stop the bot."""
        manager = self.state.get(ShardManagerContainer)
        if manager is None:
            await ctx.send(NO_SHARD_MANAGER)
            return
        await ctx.send("📴 Shutting down…")
        logger.info("Shutdown requested by owner %s", ctx.author.id)
        await manager.close()

    @commands.command(name="latency")
    async def latency(self, ctx: commands.Context[commands.Bot]) -> None:
        """Show gateway latency for each shard."""
        manager = self.state.get(ShardManagerContainer)
        if manager is None:
            await ctx.send(NO_SHARD_MANAGER)
            return
        lines = [
            f"Shard {shard_id}: {format_latency(latency)}"
            for shard_id, latency in manager.latencies
        ]
        await ctx.send("\n".join(lines) or "No shards connected.")
