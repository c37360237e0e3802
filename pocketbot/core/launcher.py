from __future__ import annotations

import asyncio
import functools
import logging
from pathlib import Path

from pocketbot.core.lifecycle import BotLifecycle
from pocketbot.core.settings import DEFAULT_ENV_FILE, load_config
from pocketbot.utils.signals import SignalHandlers

logger = logging.getLogger(__name__)


async def launch_bot(env_file: str | Path | None = DEFAULT_ENV_FILE) -> int:
    """Run the bot lifecycle under signal handlers and return its exit code.

    This is the primary entry point called by ``main.py``.
    """
    lifecycle = BotLifecycle(config_loader=functools.partial(load_config, env_file))

    loop = asyncio.get_running_loop()
    async with SignalHandlers(loop, lifecycle):
        exit_code = await lifecycle.run()

    logger.info("launch_bot completed with exit code %d.", exit_code)
    return exit_code
