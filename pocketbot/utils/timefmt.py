"""Small formatting helpers for durations shown to users."""

import time


def format_hms(seconds: float) -> str:  # noqa: D401 – utility
    h = int(seconds) // 3600
    m = (int(seconds) % 3600) // 60
    s = int(seconds) % 60
    return f"{h:02d}:{m:02d}:{s:02d}"


def format_uptime(seconds: float) -> str:
    """``3d 04:05:06`` style; days are omitted when zero."""
    seconds = max(seconds, 0.0)
    days, rest = divmod(int(seconds), 86400)
    hms = format_hms(rest)
    return f"{days}d {hms}" if days else hms


def uptime_since(started: float, now: float | None = None) -> float:
    """Seconds elapsed since a ``time.monotonic()`` reading."""
    return (time.monotonic() if now is None else now) - started
