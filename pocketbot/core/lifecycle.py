from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from enum import Enum, auto
from typing import TYPE_CHECKING

import aiohttp
import discord

from pocketbot.core.containers import build_container
from pocketbot.core.discord.boot import MyBot, default_intents
from pocketbot.core.discord.events import EventHandler, register_event_handlers
from pocketbot.core.discord.owners import fetch_owner_ids
from pocketbot.core.exceptions import (
    AuthError,
    BotRuntimeError,
    ConfigError,
    ConnectionLost,
    InvalidToken,
    NetworkFailure,
)
from pocketbot.core.settings import Settings, load_config
from pocketbot.core.state import (
    PermissionsContainer,
    ShardManagerContainer,
    SharedState,
    StartTime,
)

if TYPE_CHECKING:
    from pocketbot.core.containers import Container

logger = logging.getLogger(__name__)

# Registration order; on a name clash the earlier group keeps the name.
COMMAND_GROUPS: tuple[str, ...] = ("fun", "general", "owner")

EXIT_OK = 0
EXIT_FAILURE = 1


class LifecycleState(Enum):
    UNCONFIGURED = auto()
    CONFIGURED = auto()
    AUTHENTICATED = auto()  # logged in, owner set known
    DISPATCHING = auto()  # bot.connect() is running
    SHUTTING_DOWN = auto()
    TERMINATED = auto()


class BotLifecycle:
    def __init__(
        self,
        settings: Settings | None = None,
        *,
        config_loader: Callable[[], Settings] = load_config,
        bot_factory: Callable[..., MyBot] | None = None,
        event_handler: EventHandler | None = None,
    ):
        self._settings: Settings | None = settings
        self._config_loader = config_loader
        self._bot_factory = bot_factory
        self._event_handler = event_handler
        self._state: LifecycleState = LifecycleState.UNCONFIGURED
        self._bot: MyBot | None = None
        self._container: Container | None = None
        self._exit_code: int = EXIT_OK
        self._shutdown_event = asyncio.Event()

    @property
    def state(self) -> LifecycleState:
        return self._state

    @property
    def exit_code(self) -> int:
        return self._exit_code

    @property
    def bot(self) -> MyBot | None:
        return self._bot

    @property
    def shared_state(self) -> SharedState | None:
        return self._container.shared_state() if self._container is not None else None

    def _set_state(self, new_state: LifecycleState) -> None:
        if self._state == new_state:
            return
        if self._state == LifecycleState.TERMINATED:
            logger.debug(f"Ignoring transition to {new_state.name}; lifecycle already terminated.")
            return
        logger.info(f"Bot lifecycle state changing from {self._state.name} to {new_state.name}")
        self._state = new_state

    async def run(self) -> int:
        """Drive startup to completion and block while the bot is connected.

        Returns the process exit code: 0 after a clean disconnect, 1 after any
        startup failure or unrecoverable runtime error.
        """
        if self._state != LifecycleState.UNCONFIGURED:
            logger.warning(
                f"Bot run() called when not in UNCONFIGURED state (current: {self._state.name}). Ignoring."
            )
            return self._exit_code

        try:
            self._configure()
        except ConfigError as e:
            logger.error("%s", e)
            self._exit_code = EXIT_FAILURE
            self._set_state(LifecycleState.TERMINATED)
            self._shutdown_event.set()
            return self._exit_code

        try:
            self._initialize_services_and_bot()
            await self._authenticate()
            if self._shutdown_requested():
                logger.info("Shutdown requested during startup; not connecting.")
                return self._exit_code
            await self._register_command_groups()
            self._register_event_handlers()
            if self._shutdown_requested():
                logger.info("Shutdown requested during startup; not connecting.")
                return self._exit_code
            await self._dispatch()

        except (KeyboardInterrupt, asyncio.CancelledError) as e:
            logger.info(
                f"Shutdown signal (KeyboardInterrupt/CancelledError: {type(e).__name__}) received."
            )
        except AuthError as e:
            logger.error("%s", e)
            self._exit_code = EXIT_FAILURE
        except BotRuntimeError as e:
            logger.error("Client error: %s", e)
            self._exit_code = EXIT_FAILURE
        except Exception as e:
            logger.exception("Client error:", exc_info=e)
            self._exit_code = EXIT_FAILURE
        finally:
            await self.shutdown()
        return self._exit_code

    def _shutdown_requested(self) -> bool:
        return self._state in (LifecycleState.SHUTTING_DOWN, LifecycleState.TERMINATED)

    def _configure(self) -> Settings:
        if self._settings is None:
            self._settings = self._config_loader()
        self._set_state(LifecycleState.CONFIGURED)
        return self._settings

    def _initialize_services_and_bot(self) -> None:
        if self._settings is None:
            raise RuntimeError("Settings not loaded before initialization.")
        logger.info("Initializing services and bot instance...")
        self._container = build_container(self._settings)
        settings: Settings = self._container.config()
        shared_state = self._container.shared_state()

        if self._bot_factory is not None:
            self._bot = self._bot_factory(container=self._container)
        else:
            self._bot = MyBot(
                command_prefix=settings.prefix,
                intents=default_intents(),
                help_command=self._container.help_command(),
                container=self._container,
            )
        self._bot.lifecycle = self

        # Everything command groups read later is written here, once.
        shared_state.put(PermissionsContainer, settings.permissions)
        shared_state.put(ShardManagerContainer, self._bot)
        shared_state.put(StartTime, time.monotonic())
        logger.info("Services and bot instance initialized.")

    async def _authenticate(self) -> None:
        if not self._bot or not self._container:
            raise RuntimeError("Bot not initialized for login.")
        settings: Settings = self._container.config()

        logger.info("Logging in...")
        try:
            await asyncio.wait_for(self._bot.login(settings.discord_token), settings.startup_timeout)
        except discord.LoginFailure as e:
            raise InvalidToken(f"Problem logging in: {e}") from e
        except (discord.HTTPException, aiohttp.ClientError, TimeoutError) as e:
            raise NetworkFailure(f"Problem logging in: {e!r}") from e
        if self._shutdown_requested():
            return

        owners = await fetch_owner_ids(self._bot, timeout=settings.startup_timeout)
        self._bot.owner_ids = owners
        logger.info("Owner set resolved: %s", ", ".join(str(o) for o in sorted(owners)))
        self._set_state(LifecycleState.AUTHENTICATED)

    async def _register_command_groups(self) -> None:
        if not self._bot or not self._container:
            raise RuntimeError("Bot or container not initialized for command registration.")

        loaded: list[str] = []
        failed: list[str] = []
        for group_name in COMMAND_GROUPS:
            provider = getattr(self._container, f"{group_name}_cog")
            group = provider(bot=self._bot)
            if await self._bot.add_command_group(group):
                loaded.append(group.qualified_name)
            else:
                failed.append(group.qualified_name)
        logger.info(
            f"Command groups loaded: {', '.join(loaded) or '—'}"
            + (f" | failed: {', '.join(failed)}" if failed else "")
        )

    def _register_event_handlers(self) -> None:
        if not self._bot:
            raise RuntimeError("Bot not initialized for event handler registration.")
        logger.info("Registering event handlers...")
        self._event_handler = register_event_handlers(self._bot, self._event_handler)

    async def _dispatch(self) -> None:
        if not self._bot or not self._container:
            raise RuntimeError("Bot not initialized for dispatching.")

        # No writes after this point; command handlers only read.
        self._container.shared_state().freeze()
        self._set_state(LifecycleState.DISPATCHING)
        logger.info("Connecting to the gateway...")
        try:
            await self._bot.connect(reconnect=True)
        except discord.PrivilegedIntentsRequired as e:
            raise ConnectionLost(
                f"{e} (enable the message content intent in the developer portal)"
            ) from e
        except (discord.ConnectionClosed, discord.GatewayNotFound, aiohttp.ClientError) as e:
            raise ConnectionLost(str(e)) from e
        logger.info("Bot has disconnected from the gateway (connect() returned).")

    async def shutdown(self, signal_name: str | None = None) -> None:
        if self._state in [LifecycleState.SHUTTING_DOWN, LifecycleState.TERMINATED]:
            # Avoid re-entrancy or multiple shutdown calls
            if self._state == LifecycleState.SHUTTING_DOWN:
                logger.info("Shutdown already in progress. Waiting for completion.")
                await self._shutdown_event.wait()
            return

        if signal_name:
            logger.info(f"Shutdown initiated by signal: {signal_name}.")
        else:
            logger.info("Shutdown initiated.")

        self._set_state(LifecycleState.SHUTTING_DOWN)

        if self._bot and not self._bot.is_closed():
            logger.info("Closing bot connection...")
            await self._bot.close()
            logger.info("Bot connection closed.")
        else:
            logger.info("Bot was already closed, not started, or not initialized.")

        self._set_state(LifecycleState.TERMINATED)
        self._shutdown_event.set()
        logger.info("Bot has shut down.")
