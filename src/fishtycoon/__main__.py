"""Entry point: python -m fishtycoon

Runs an idle session: load the save, backfill offline progress, then let the
timers fish until interrupted. Saves on exit.
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import signal
import sys
from pathlib import Path

from rich.console import Console
from rich.live import Live

from fishtycoon import dashboard
from fishtycoon.config import load_settings
from fishtycoon.game.session import GameSession

REFRESH_SECONDS = 0.5


def setup_logging(log_dir: Path, *, console: bool = True) -> None:
    """Configure logging for the game session."""
    log_dir.mkdir(parents=True, exist_ok=True)
    log_file = log_dir / "fishtycoon.log"

    formatter = logging.Formatter(
        "[%(asctime)s] %(message)s", datefmt="%H:%M:%S",
    )

    file_handler = logging.FileHandler(log_file, mode="a")
    file_handler.setFormatter(formatter)

    root = logging.getLogger("fishtycoon")
    root.setLevel(logging.INFO)
    root.handlers.clear()
    root.addHandler(file_handler)

    if console:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setFormatter(formatter)
        root.addHandler(console_handler)

    logging.getLogger(__name__).info("Logging to %s", log_file)


async def run(session: GameSession, *, show_dashboard: bool) -> None:
    """Run the session until SIGINT/SIGTERM."""
    shutdown = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, shutdown.set)

    console = Console()
    welcome = dashboard.offline_summary(session.last_offline)
    if welcome is not None:
        console.print(welcome)

    session.start()
    try:
        if show_dashboard:
            with Live(dashboard.render(session.ledger), console=console, refresh_per_second=4) as live:
                while not shutdown.is_set():
                    live.update(dashboard.render(session.ledger))
                    try:
                        await asyncio.wait_for(shutdown.wait(), timeout=REFRESH_SECONDS)
                    except asyncio.TimeoutError:
                        pass
        else:
            await shutdown.wait()
    finally:
        session.stop()


def main() -> None:
    parser = argparse.ArgumentParser(
        description="Fish Tycoon: idle fishing with offline progress",
    )
    parser.add_argument(
        "--slot", metavar="KEY",
        help="Save slot key (default from FISHTYCOON_SAVE_KEY)",
    )
    parser.add_argument(
        "--no-dashboard", action="store_true",
        help="Log to stdout instead of drawing the live dashboard",
    )
    args = parser.parse_args()

    settings = load_settings()
    if args.slot:
        settings.save_key = args.slot
    setup_logging(settings.data_dir / "logs", console=args.no_dashboard)

    session = GameSession(settings)
    try:
        session.load()
        asyncio.run(run(session, show_dashboard=not args.no_dashboard))
    except KeyboardInterrupt:
        logging.getLogger(__name__).info("Interrupted by user.")
    finally:
        session.close()


if __name__ == "__main__":
    main()
