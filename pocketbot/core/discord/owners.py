from __future__ import annotations

import asyncio

import aiohttp
import discord
from discord.ext import commands

from pocketbot.core.exceptions import NetworkFailure


async def fetch_owner_ids(bot: commands.Bot, *, timeout: float | None = None) -> frozenset[int]:
    """Look up who owns the application behind *bot*.

    The owner set is the application owner plus, for team-owned
    applications, every team member.

    Raises:
        NetworkFailure: If the application info cannot be fetched in time.
    """
    try:
        info = await asyncio.wait_for(bot.application_info(), timeout)
    except (discord.HTTPException, aiohttp.ClientError, TimeoutError) as e:
        raise NetworkFailure(f"Problem accessing application info: {e!r}") from e

    owners = {info.owner.id}
    if info.team is not None:
        owners.update(member.id for member in info.team.members)
    return frozenset(owners)


def is_owner_id(bot: commands.Bot, user_id: int) -> bool:
    """Membership test against the owner set configured at startup (no network)."""
    if bot.owner_id is not None:
        return user_id == bot.owner_id
    return user_id in (bot.owner_ids or ())
