from __future__ import annotations

import random
import re

from discord.ext import commands

ROLL_USAGE = "Usage: roll NdM – e.g. `2d6` (1-100 dice, 2-1000 sides)"
MAX_DICE = 100
MAX_SIDES = 1000

_DICE_RE = re.compile(r"^(\d*)d(\d+)$", re.IGNORECASE)


def parse_dice(spec: str) -> tuple[int, int] | None:
    """Parse ``NdM`` (``N`` defaults to 1); ``None`` when out of range or malformed."""
    match = _DICE_RE.match(spec.strip())
    if match is None:
        return None
    count = int(match.group(1) or 1)
    sides = int(match.group(2))
    if not 1 <= count <= MAX_DICE or not 2 <= sides <= MAX_SIDES:
        return None
    return count, sides


class FunCommands(commands.Cog, name="Fun"):
    def __init__(self, bot: commands.Bot, rng: random.Random | None = None) -> None:
        super().__init__()
        self.bot = bot
        self.rng = rng if rng is not None else random.Random()

    @commands.command(name="roll")
    async def roll(self, ctx: commands.Context[commands.Bot], dice: str = "1d6") -> None:
        """Roll dice written as NdM, e.g. 2d6."""
        parsed = parse_dice(dice)
        if parsed is None:
            await ctx.send(ROLL_USAGE)
            return
        count, sides = parsed
        rolls = [self.rng.randint(1, sides) for _ in range(count)]
        if count == 1:
            await ctx.send(f"🎲 {rolls[0]}")
        else:
            await ctx.send(f"🎲 {' + '.join(map(str, rolls))} = **{sum(rolls)}**")

    @commands.command(name="choose")
    async def choose(self, ctx: commands.Context[commands.Bot], *choices: str) -> None:
        """Pick one of the given options."""
        if len(choices) < 2:
            await ctx.send("Give me at least two things to choose from.")
            return
        await ctx.send(self.rng.choice(choices))

    @commands.command(name="flip", aliases=["coin"])
    async def flip(self, ctx: commands.Context[commands.Bot]) -> None:
        """Flip a coin."""
        await ctx.send(self.rng.choice(("Heads", "Tails")))
