from __future__ import annotations

import argparse
import asyncio
import sys
from textwrap import dedent

__all__ = ["cli"]

# ---------------------------------------------------------------------------+
#  Minimal CLI parser                                                         +
# ---------------------------------------------------------------------------+


def _build_parser() -> argparse.ArgumentParser:  # noqa: D401 – imperative style
    """Return the parser for ``python -m pocketbot.core``.

    Built without importing discord.py so ``--help`` and ``--version`` answer
    immediately.
    """

    try:
        import importlib.metadata as _ilmd

        version: str = _ilmd.version("pocketbot")
    except Exception:  # pragma: no cover – metadata lookup best-effort
        version = "unknown"

    parser = argparse.ArgumentParser(
        prog="pocketbot",
        add_help=False,  # we add it manually to keep tight control
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description=dedent(
            """\
            Discord-bot bootstrap
            --------------------
            Reads DISCORD_TOKEN, PREFIX and (optionally) PERMS from the
            environment, seeded from an env file when one exists.
            """
        ),
    )
    parser.add_argument("-h", "--help", action="help", help="show this message and exit")
    parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {version}")
    parser.add_argument(
        "--env-file",
        default=".env",
        metavar="PATH",
        help="key=value file read before the process environment (default: .env)",
    )
    return parser


# ---------------------------------------------------------------------------+
#  Public entry-point                                                        +
# ---------------------------------------------------------------------------+


def cli(argv: list[str] | None = None) -> None:  # noqa: D401
    """Entry-point for ``python -m pocketbot.core`` and the ``pocketbot`` script."""

    # 1️⃣ Handle trivial flags **before** heavy imports.
    args = _build_parser().parse_args(argv)  # exits on -h/-V automatically

    # 2️⃣ Configure logging (idempotent) & launch the real bot.
    from pocketbot.core.logger_setup import setup_logging

    setup_logging()
    from pocketbot.core.main import main  # delayed import keeps --help fast

    try:
        exit_code = asyncio.run(main(env_file=args.env_file))
    except KeyboardInterrupt:  # ^C before the signal handlers are installed
        print("\nInterrupted.", file=sys.stderr)
        exit_code = 130
    sys.exit(exit_code)


# ---------------------------------------------------------------------------+
#  Module runner                                                             +
# ---------------------------------------------------------------------------+

if __name__ == "__main__":  # pragma: no cover
    cli(sys.argv[1:])
