"""
Test Fakes Module
=================

Provides fake implementations of Discord objects for testing.
These fakes simulate real behavior without a gateway connection,
enabling fast, reliable, and isolated unit tests.
"""

from .fake_discord import (
    BOT_USER,
    OWNER,
    STRANGER,
    FakeBot,
    FakeChannel,
    FakeContext,
    FakeMessage,
    FakeUser,
)

__all__ = [
    "BOT_USER",
    "OWNER",
    "STRANGER",
    "FakeBot",
    "FakeChannel",
    "FakeContext",
    "FakeMessage",
    "FakeUser",
]
