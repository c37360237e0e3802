#!/usr/bin/env python
"""
tests/conftest.py – test harness bootstrap.
Quiet logging, a real Settings object and a DI container wired to a fake bot.
"""

from __future__ import annotations

import time
from collections.abc import AsyncIterator
from unittest.mock import PropertyMock, patch

import pytest

from pocketbot.core.containers import Container, build_container
from pocketbot.core.discord.boot import MyBot, default_intents
from pocketbot.core.discord.events import register_event_handlers
from pocketbot.core.lifecycle import COMMAND_GROUPS
from pocketbot.core.logger_setup import setup_logging
from pocketbot.core.settings import Settings
from pocketbot.core.state import (
    PermissionsContainer,
    ShardManagerContainer,
    SharedState,
    StartTime,
)
from tests.fakes.fake_discord import BOT_USER, OWNER, FakeBot


# ------------------------------------------------------------------+
# Global logging setup                                              +
# ------------------------------------------------------------------+
setup_logging({"root": {"level": "WARNING"}})


@pytest.fixture(autouse=True)
def _isolated_env(monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep a developer's real bot configuration out of every test."""
    for name in ("DISCORD_TOKEN", "PREFIX", "PERMS", "STARTUP_TIMEOUT"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def test_settings() -> Settings:
    """Provides a real Settings object that never touches a .env file."""
    return Settings(_env_file=None, discord_token="T", prefix="!", perms="8")  # type: ignore[call-arg]


@pytest.fixture
def container(test_settings: Settings) -> Container:
    return build_container(test_settings)


@pytest.fixture
def shared_state(container: Container) -> SharedState:
    state: SharedState = container.shared_state()
    return state


@pytest.fixture
def fake_bot(container: Container) -> FakeBot:
    bot = FakeBot()
    bot.container = container
    return bot


@pytest.fixture
async def offline_bot(
    container: Container, test_settings: Settings
) -> AsyncIterator[MyBot]:
    """
    A real MyBot with every command group registered, as the lifecycle does,
    but never logged in. ``bot.user`` is patched to BOT_USER and the
    owner set is {OWNER}. Entering the bot as a context manager binds it
    to the running loop so events can be dispatched.
    """
    with patch.object(MyBot, "user", new_callable=PropertyMock, return_value=BOT_USER):
        bot = MyBot(
            command_prefix=test_settings.prefix,
            intents=default_intents(),
            help_command=container.help_command(),
            container=container,
        )
        bot.owner_ids = frozenset({OWNER.id})
        state = container.shared_state()
        state.put(PermissionsContainer, test_settings.permissions)
        state.put(ShardManagerContainer, bot)
        state.put(StartTime, time.monotonic())
        for name in COMMAND_GROUPS:
            assert await bot.add_command_group(getattr(container, f"{name}_cog")(bot=bot))
        register_event_handlers(bot)
        state.freeze()
        async with bot:
            yield bot
