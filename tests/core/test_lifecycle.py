"""
tests/core/test_lifecycle.py – startup state machine.

The gateway is never contacted: ``login``, ``application_info``, ``connect``
and ``close`` are patched on :class:`MyBot`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Iterator
from types import SimpleNamespace
from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import aiohttp
import discord
import pytest

from pocketbot.core.discord.boot import MyBot
from pocketbot.core.exceptions import MissingPrefix, MissingToken
from pocketbot.core.lifecycle import BotLifecycle, LifecycleState
from pocketbot.core.settings import Settings
from pocketbot.core.state import PermissionsContainer, ShardManagerContainer, StartTime

OWNER_ID = 4242


def _app_info(owner_id: int = OWNER_ID, team_ids: tuple[int, ...] = ()) -> SimpleNamespace:
    team = None
    if team_ids:
        team = SimpleNamespace(members=[SimpleNamespace(id=i) for i in team_ids])
    return SimpleNamespace(owner=SimpleNamespace(id=owner_id), team=team)


class GatewayPatches(SimpleNamespace):
    login: AsyncMock
    application_info: AsyncMock
    connect: AsyncMock
    close: AsyncMock


@pytest.fixture
def gateway() -> Iterator[GatewayPatches]:
    with (
        patch.object(MyBot, "login", new_callable=AsyncMock) as login,
        patch.object(MyBot, "application_info", new_callable=AsyncMock) as app_info,
        patch.object(MyBot, "connect", new_callable=AsyncMock) as connect,
        patch.object(MyBot, "close", new_callable=AsyncMock) as close,
    ):
        app_info.return_value = _app_info()
        yield GatewayPatches(
            login=login, application_info=app_info, connect=connect, close=close
        )


async def test_clean_startup_and_disconnect(
    test_settings: Settings, gateway: GatewayPatches
) -> None:
    lifecycle = BotLifecycle(settings=test_settings)

    exit_code = await lifecycle.run()

    assert exit_code == 0
    assert lifecycle.state == LifecycleState.TERMINATED
    gateway.login.assert_awaited_once_with("T")
    gateway.connect.assert_awaited_once()

    bot = lifecycle.bot
    assert bot is not None
    assert bot.owner_ids == frozenset({OWNER_ID})
    assert bot.command_prefix == "!"
    assert {"Fun", "General", "Owner"} <= set(bot.cogs)
    assert bot.get_command("help") is not None


async def test_shared_state_populated_and_frozen(
    test_settings: Settings, gateway: GatewayPatches
) -> None:
    lifecycle = BotLifecycle(settings=test_settings)
    await lifecycle.run()

    state = lifecycle.shared_state
    assert state is not None
    assert state.frozen
    assert state[PermissionsContainer] == discord.Permissions(8)
    assert state[ShardManagerContainer] is lifecycle.bot
    assert isinstance(state[StartTime], float)
    assert lifecycle.bot is not None and lifecycle.bot.container.shared_state() is state


async def test_states_reached_in_order(test_settings: Settings, gateway: GatewayPatches) -> None:
    lifecycle = BotLifecycle(settings=test_settings)
    seen: list[LifecycleState] = []
    original = lifecycle._set_state

    def record(new_state: LifecycleState) -> None:
        seen.append(new_state)
        original(new_state)

    with patch.object(lifecycle, "_set_state", side_effect=record):
        await lifecycle.run()

    assert seen == [
        LifecycleState.CONFIGURED,
        LifecycleState.AUTHENTICATED,
        LifecycleState.DISPATCHING,
        LifecycleState.SHUTTING_DOWN,
        LifecycleState.TERMINATED,
    ]


async def test_team_members_are_owners(test_settings: Settings, gateway: GatewayPatches) -> None:
    gateway.application_info.return_value = _app_info(OWNER_ID, team_ids=(7, 8))
    lifecycle = BotLifecycle(settings=test_settings)

    await lifecycle.run()

    assert lifecycle.bot is not None
    assert lifecycle.bot.owner_ids == frozenset({OWNER_ID, 7, 8})


@pytest.mark.parametrize("error", [MissingToken(), MissingPrefix()])
async def test_config_failure_exits_without_network(
    gateway: GatewayPatches, error: Exception, caplog: pytest.LogCaptureFixture
) -> None:
    loader = MagicMock(side_effect=error)
    factory = MagicMock()
    lifecycle = BotLifecycle(config_loader=loader, bot_factory=factory)

    exit_code = await lifecycle.run()

    assert exit_code == 1
    assert lifecycle.state == LifecycleState.TERMINATED
    assert lifecycle.shared_state is None
    factory.assert_not_called()
    gateway.login.assert_not_awaited()
    gateway.application_info.assert_not_awaited()
    assert str(error) in caplog.text


async def test_invalid_token_exits_before_owner_fetch(
    test_settings: Settings, gateway: GatewayPatches
) -> None:
    gateway.login.side_effect = discord.LoginFailure("Improper token has been passed.")
    lifecycle = BotLifecycle(settings=test_settings)

    assert await lifecycle.run() == 1
    gateway.application_info.assert_not_awaited()
    gateway.connect.assert_not_awaited()
    assert lifecycle.state == LifecycleState.TERMINATED


async def test_owner_fetch_failure_exits(
    test_settings: Settings, gateway: GatewayPatches, caplog: pytest.LogCaptureFixture
) -> None:
    gateway.application_info.side_effect = aiohttp.ClientConnectionError("unreachable")
    lifecycle = BotLifecycle(settings=test_settings)

    assert await lifecycle.run() == 1
    gateway.connect.assert_not_awaited()
    assert "Problem accessing application info" in caplog.text


async def test_owner_fetch_timeout_exits(gateway: GatewayPatches) -> None:
    settings = Settings(  # type: ignore[call-arg]
        _env_file=None, discord_token="T", prefix="!", startup_timeout=0.05
    )

    async def hang() -> Any:
        await asyncio.sleep(10)

    gateway.application_info.side_effect = hang
    lifecycle = BotLifecycle(settings=settings)

    assert await lifecycle.run() == 1
    gateway.connect.assert_not_awaited()


async def test_gateway_failure_exits(test_settings: Settings, gateway: GatewayPatches) -> None:
    gateway.connect.side_effect = discord.GatewayNotFound()
    lifecycle = BotLifecycle(settings=test_settings)

    assert await lifecycle.run() == 1
    assert lifecycle.state == LifecycleState.TERMINATED


async def test_unexpected_client_error_exits(
    test_settings: Settings, gateway: GatewayPatches, caplog: pytest.LogCaptureFixture
) -> None:
    gateway.connect.side_effect = RuntimeError("boom")
    caplog.set_level(logging.ERROR)
    lifecycle = BotLifecycle(settings=test_settings)

    assert await lifecycle.run() == 1
    assert "Client error" in caplog.text


async def test_signal_while_dispatching_is_a_clean_exit(test_settings: Settings, gateway: GatewayPatches) -> None:
    disconnected = asyncio.Event()

    async def block_until_closed(*args: Any, **kwargs: Any) -> None:
        await disconnected.wait()

    async def close() -> None:
        disconnected.set()

    gateway.connect.side_effect = block_until_closed
    gateway.close.side_effect = close
    lifecycle = BotLifecycle(settings=test_settings)

    run_task = asyncio.create_task(lifecycle.run())
    for _ in range(100):
        if lifecycle.state == LifecycleState.DISPATCHING:
            break
        await asyncio.sleep(0.01)
    assert lifecycle.state == LifecycleState.DISPATCHING

    await lifecycle.shutdown("SIGINT")
    assert await asyncio.wait_for(run_task, 1) == 0
    assert lifecycle.state == LifecycleState.TERMINATED
    gateway.close.assert_awaited()


async def test_run_twice_is_ignored(test_settings: Settings, gateway: GatewayPatches) -> None:
    lifecycle = BotLifecycle(settings=test_settings)
    await lifecycle.run()

    assert await lifecycle.run() == 0
    gateway.login.assert_awaited_once()


def _record_states(lifecycle: BotLifecycle) -> list[LifecycleState]:
    seen: list[LifecycleState] = []
    original = lifecycle._set_state

    def record(new_state: LifecycleState) -> None:
        before = lifecycle.state
        original(new_state)
        if lifecycle.state != before:
            seen.append(lifecycle.state)

    lifecycle._set_state = record  # type: ignore[method-assign]
    return seen


@pytest.mark.parametrize("blocking_call", ["login", "application_info"])
async def test_signal_during_startup_is_final(
    test_settings: Settings, gateway: GatewayPatches, blocking_call: str
) -> None:
    entered = asyncio.Event()
    release = asyncio.Event()

    async def block(*args: Any, **kwargs: Any) -> Any:
        entered.set()
        await release.wait()
        return _app_info()

    getattr(gateway, blocking_call).side_effect = block
    lifecycle = BotLifecycle(settings=test_settings)
    seen = _record_states(lifecycle)

    run_task = asyncio.create_task(lifecycle.run())
    await asyncio.wait_for(entered.wait(), 1)
    await lifecycle.shutdown("SIGINT")
    assert lifecycle.state == LifecycleState.TERMINATED

    release.set()
    assert await asyncio.wait_for(run_task, 1) == 0

    assert lifecycle.state == LifecycleState.TERMINATED
    assert seen == [
        LifecycleState.CONFIGURED,
        LifecycleState.SHUTTING_DOWN,
        LifecycleState.TERMINATED,
    ]
    gateway.connect.assert_not_awaited()
    assert lifecycle.bot is not None
    assert "Owner" not in lifecycle.bot.cogs
    if blocking_call == "login":
        gateway.application_info.assert_not_awaited()


async def test_terminated_is_final(test_settings: Settings, gateway: GatewayPatches) -> None:
    lifecycle = BotLifecycle(settings=test_settings)
    await lifecycle.run()

    lifecycle._set_state(LifecycleState.DISPATCHING)

    assert lifecycle.state == LifecycleState.TERMINATED


async def test_bot_factory_receives_container(test_settings: Settings, gateway: GatewayPatches) -> None:
    built: list[MyBot] = []

    def factory(**kwargs: Any) -> MyBot:
        bot = MyBot(command_prefix="?", intents=discord.Intents.none(), **kwargs)
        built.append(bot)
        return bot

    lifecycle = BotLifecycle(settings=test_settings, bot_factory=factory)
    assert await lifecycle.run() == 0

    [bot] = built
    assert bot is lifecycle.bot
    assert bot.container.config() is test_settings
