"""Forward OS termination signals to the bot lifecycle.

``SIGINT`` (Ctrl+C) and, on POSIX, ``SIGTERM`` from a process manager both end
in ``BotLifecycle.shutdown(signal_name=...)`` so the gateway connection is
closed cleanly instead of the process dying mid-write.
"""

from __future__ import annotations

import asyncio
import logging
import os
import signal
from collections.abc import Callable, Iterable
from typing import Any, Protocol

logger = logging.getLogger(__name__)

__all__ = ["ShutdownTarget", "install_handlers", "SignalHandlers"]


class ShutdownTarget(Protocol):
    async def shutdown(self, signal_name: str | None = None) -> None: ...


def default_signals() -> list[signal.Signals]:
    sigs: list[signal.Signals] = [signal.SIGINT]
    if os.name != "nt":  # SIGTERM is a no-op on Windows consoles
        sigs.append(signal.SIGTERM)
    return sigs


def install_handlers(
    loop: asyncio.AbstractEventLoop,
    target: ShutdownTarget,
    *,
    signals: Iterable[signal.Signals] | None = None,
) -> list[signal.Signals]:
    """Register *signals* on *loop*; each one schedules ``target.shutdown()``.

    Returns the signals that were actually installed, so the caller can
    remove exactly those again.
    """
    pending: set[asyncio.Task[Any]] = set()

    def _make_handler(sig: signal.Signals) -> Callable[[], None]:
        def _handler() -> None:  # pragma: no cover – real signal path
            logger.info("Received signal %s, initiating graceful shutdown…", sig.name)
            task = loop.create_task(target.shutdown(signal_name=sig.name))
            pending.add(task)
            task.add_done_callback(pending.discard)

        return _handler

    installed: list[signal.Signals] = []
    for sig in default_signals() if signals is None else list(signals):
        try:
            loop.add_signal_handler(sig, _make_handler(sig))
        except (NotImplementedError, AttributeError, ValueError, RuntimeError) as e:
            logger.warning("Could not set %s handler: %s", sig.name, e)
            continue
        logger.debug("Registered handler for %s", sig.name)
        installed.append(sig)
    return installed


class SignalHandlers:
    """Async context manager around :func:`install_handlers`."""

    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        target: ShutdownTarget,
        *,
        signals: Iterable[signal.Signals] | None = None,
    ) -> None:
        self._loop = loop
        self._target = target
        self._signals = signals
        self._installed: list[signal.Signals] = []

    async def __aenter__(self) -> SignalHandlers:
        self._installed = install_handlers(self._loop, self._target, signals=self._signals)
        return self

    async def __aexit__(self, *exc_info: Any) -> bool:
        for sig in self._installed:
            try:
                self._loop.remove_signal_handler(sig)
            except (NotImplementedError, AttributeError, ValueError, RuntimeError) as e:  # pragma: no cover
                logger.debug("Could not remove %s handler during cleanup: %s", sig.name, e)
        self._installed = []
        # Do not suppress exceptions
        return False
