#!/usr/bin/env python
"""
core/exceptions.py - Central module for custom exception classes.

Startup errors (configuration, authentication) are fatal and end the process
with exit code 1. Per-command failures use discord.py's
``commands.CommandError`` hierarchy and never leave their invocation.
"""


class BotError(Exception):
    """Base class for every error raised by pocketbot itself."""


class ConfigError(BotError):
    """Raised when the environment does not describe a runnable bot."""


class MissingToken(ConfigError):
    def __init__(self) -> None:
        super().__init__("Expected a token in the environment (DISCORD_TOKEN)")


class MissingPrefix(ConfigError):
    def __init__(self) -> None:
        super().__init__("Expected a bot prefix in the environment (PREFIX)")


class AuthError(BotError):
    """Raised when the gateway rejects us or cannot be reached during startup."""


class InvalidToken(AuthError):
    pass


class NetworkFailure(AuthError):
    pass


class BotRuntimeError(BotError):
    """Raised when the running client fails in a way it cannot recover from."""


class ConnectionLost(BotRuntimeError):
    pass


class StateFrozenError(BotError):
    """Raised on a write to the shared state after startup has finished."""

    def __init__(self, key: str):
        super().__init__(f"Shared state is frozen; refusing to write {key}")
        self.key = key
