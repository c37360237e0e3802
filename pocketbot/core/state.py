"""
core/state.py – process-wide data shared with command groups.

Values are keyed by *typed slot classes* rather than strings so every reader
agrees on what lives in a slot::

    state.put(StartTime, time.monotonic())
    started = state.get(StartTime)  # float | None

The store is filled once during startup and then frozen; command handlers
only ever read from it, so reads take no lock.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Generic, TypeVar

import discord

from pocketbot.core.exceptions import StateFrozenError

if TYPE_CHECKING:
    from discord.ext import commands

V = TypeVar("V")

__all__ = [
    "StateKey",
    "PermissionsContainer",
    "ShardManagerContainer",
    "StartTime",
    "SharedState",
]


class StateKey(Generic[V]):
    """Marker base for a slot in :class:`SharedState`; never instantiated."""


class PermissionsContainer(StateKey[discord.Permissions]):
    """Default permissions requested by the ``invite`` command."""


class ShardManagerContainer(StateKey["commands.Bot"]):
    """The running client; owns every shard connection."""


class StartTime(StateKey[float]):
    """``time.monotonic()`` reading taken at startup."""


class SharedState:
    def __init__(self) -> None:
        self._data: dict[type[StateKey[Any]], Any] = {}
        self._frozen = False

    @property
    def frozen(self) -> bool:
        return self._frozen

    def put(self, key: type[StateKey[V]], value: V) -> None:
        """Store *value* under *key*, replacing any earlier value."""
        if self._frozen:
            raise StateFrozenError(key.__name__)
        self._data[key] = value

    def get(self, key: type[StateKey[V]]) -> V | None:
        value: V | None = self._data.get(key)
        return value

    def freeze(self) -> None:
        self._frozen = True

    def __getitem__(self, key: type[StateKey[V]]) -> V:
        value: V = self._data[key]
        return value

    def __contains__(self, key: object) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        keys = ", ".join(k.__name__ for k in self._data)
        return f"<SharedState frozen={self._frozen} keys=[{keys}]>"
