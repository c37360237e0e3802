"""
Settings for pocketbot, read from the process environment (optionally seeded
from a ``.env`` file).

    DISCORD_TOKEN   bot token (required)
    PREFIX          command prefix, e.g. ``!`` (required)
    PERMS           default permission bitmask for invites (optional)
    STARTUP_TIMEOUT seconds allowed for login + owner lookup (optional)
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING, Any

import discord
from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings

from pocketbot.core.exceptions import ConfigError, MissingPrefix, MissingToken

logger = logging.getLogger(__name__)

DEFAULT_ENV_FILE = ".env"


class Settings(BaseSettings):
    if TYPE_CHECKING:  # pragma: no cover

        def __init__(self, **data: Any) -> None: ...

    discord_token: str
    prefix: str

    # Raw bitmask; see ``permissions`` for the typed view.
    perms: int = 0

    startup_timeout: float = Field(default=30.0, gt=0)

    model_config = {
        "env_file": DEFAULT_ENV_FILE,
        "case_sensitive": False,
        "extra": "ignore",
    }

    @field_validator("discord_token")
    @classmethod
    def _token_must_exist(cls, v: str) -> str:
        # Reject only truly empty/placeholder tokens
        placeholder = {"", "YOUR_TOKEN_HERE"}
        if v.strip() in placeholder:
            raise ValueError("DISCORD_TOKEN is required")
        return v

    @field_validator("prefix")
    @classmethod
    def _prefix_must_exist(cls, v: str) -> str:
        if not v:
            raise ValueError("PREFIX is required")
        return v

    @field_validator("perms", mode="before")
    @classmethod
    def _lenient_int(cls, v: Any) -> int:  # noqa: D401
        """
        PERMS is optional and forgiving: anything that is not a non-negative
        integer collapses to an empty mask instead of failing startup.
        """
        if isinstance(v, bool):
            return 0
        if isinstance(v, int):
            return v if v >= 0 else 0
        try:
            parsed = int(str(v).strip())
        except (TypeError, ValueError):
            return 0
        return parsed if parsed >= 0 else 0

    @property
    def permissions(self) -> discord.Permissions:
        """``perms`` as ``discord.Permissions``, with unknown bits dropped."""
        return discord.Permissions(self.perms & discord.Permissions.all().value)


def load_config(env_file: str | Path | None = DEFAULT_ENV_FILE) -> Settings:
    """Build :class:`Settings` or raise the matching :class:`ConfigError`.

    A missing *env_file* is not an error – the process environment alone may
    be enough – but it is logged so a typo in the path is easy to spot.
    Pass ``env_file=None`` to skip the file entirely.
    """
    if env_file is not None and not Path(env_file).is_file():
        logger.info("No env file at %s; using the process environment only.", env_file)

    try:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    except ValidationError as e:
        failed = {str(err["loc"][0]) for err in e.errors() if err.get("loc")}
        # The token is checked first, mirroring startup order.
        if "discord_token" in failed:
            raise MissingToken() from e
        if "prefix" in failed:
            raise MissingPrefix() from e
        raise ConfigError(f"Invalid configuration: {e}") from e


__all__ = ["Settings", "load_config", "DEFAULT_ENV_FILE"]
