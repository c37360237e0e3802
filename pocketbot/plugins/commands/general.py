from __future__ import annotations

import importlib.metadata
import math

import discord
from discord.ext import commands

from pocketbot.core.state import PermissionsContainer, SharedState, StartTime
from pocketbot.plugins.base_di import BaseDIClientCog
from pocketbot.utils.timefmt import format_uptime, uptime_since


def get_bot_version() -> str:
    """Installed version of the pocketbot distribution."""
    try:
        return importlib.metadata.version("pocketbot")
    except importlib.metadata.PackageNotFoundError:
        return "unknown"


def format_latency(seconds: float) -> str:
    # discord.py reports nan/inf until the first heartbeat is acknowledged
    if math.isnan(seconds) or math.isinf(seconds):
        return "n/a"
    return f"{round(seconds * 1000)} ms"


class GeneralCommands(BaseDIClientCog, name="General"):
    def __init__(self, bot: commands.Bot, state: SharedState | None = None) -> None:
        BaseDIClientCog.__init__(self, bot, state)

    @commands.command(name="ping")
    async def ping(self, ctx: commands.Context[commands.Bot]) -> None:
        """Check that the bot is alive and show gateway latency."""
        await ctx.send(f"Pong! ({format_latency(self.bot.latency)})")

    @commands.command(name="uptime")
    async def uptime(self, ctx: commands.Context[commands.Bot]) -> None:
        """Show how long the bot has been running."""
        started = self.state.get(StartTime)
        if started is None:
            await ctx.send("Uptime is not available.")
            return
        await ctx.send(f"⏱️ Up for {format_uptime(uptime_since(started))}")

    @commands.command(name="invite")
    async def invite(self, ctx: commands.Context[commands.Bot]) -> None:
        """Get a link for adding the bot to another server."""
        if self.bot.user is None:
            await ctx.send("Not connected yet – try again in a moment.")
            return
        perms = self.state.get(PermissionsContainer) or discord.Permissions.none()
        url = discord.utils.oauth_url(self.bot.user.id, permissions=perms, scopes=("bot",))
        await ctx.send(f"<{url}>")

    @commands.command(name="about")
    async def about(self, ctx: commands.Context[commands.Bot]) -> None:
        """Show version information."""
        await ctx.send(
            f"pocketbot {get_bot_version()} – running on discord.py {discord.__version__}"
        )
