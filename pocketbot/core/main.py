#!/usr/bin/env python
"""
main.py - Main entry point for the bot.
Delegates to the startup orchestrator and reports its exit code.
"""

from pathlib import Path

from pocketbot.core.launcher import launch_bot
from pocketbot.core.settings import DEFAULT_ENV_FILE


async def main(env_file: str | Path | None = DEFAULT_ENV_FILE) -> int:
    """
    Main asynchronous entry point.
    Logging is configured by ``pocketbot.core.__main__`` before this runs.
    """
    return await launch_bot(env_file=env_file)
