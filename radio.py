"""Console player for 101.ru online radio — entry point."""
import argparse
import asyncio
import logging
import signal
import sys

from rich.logging import RichHandler

from ply101.config import BASE_ORIGIN, ensure_dirs
from ply101.controller import PlaybackController
from ply101.directory import find_channel, load_directory
from ply101.engine import SyncLoop
from ply101.errors import SetupError, format_error
from ply101.fetcher import MetadataFetcher
from ply101.input import HotkeyMap, toggle_source
from ply101.player import MpvBackend
from ply101.preflight import run_preflight
from ply101.ui import (
    choose_channel,
    console,
    print_header,
    print_hotkeys,
    print_playing_channel,
)

logger = logging.getLogger("ply101")


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Console player for 101.ru radio.")
    parser.add_argument("-c", "--channel", type=int, default=0, help="Channel ID.")
    parser.add_argument("--verbose", action="store_true", help="Display debug messages.")
    parser.add_argument("--refresh", action="store_true", help="Ignore the cached channel list.")
    return parser.parse_args(argv)


def setup_logging(verbose: bool):
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, show_path=False)],
    )
    # httpx logs every request at INFO/DEBUG; the loop logs its own fetches
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


async def resolve_channel(channel_id: int, refresh: bool) -> tuple[int, str]:
    groups = await load_directory(refresh=refresh)
    if not channel_id:
        channel_id = choose_channel(groups)
        if channel_id is None:
            raise SetupError("No channel chosen.")
    group, channel = find_channel(groups, channel_id)
    logger.debug("Group %d (%s), channel %d", group.id, group.title, channel.id)
    return channel.id, channel.title


async def run_session(controller: PlaybackController, *coros) -> None:
    """Run coros until the first one ends, then cancel the rest and stop playback."""
    tasks = [asyncio.create_task(c) for c in coros]
    try:
        # The sync loop never finishes; quitting from the keyboard ends the hotkey task
        done, _ = await asyncio.wait(tasks, return_when=asyncio.FIRST_COMPLETED)
        for task in done:
            if not task.cancelled() and task.exception() is not None:
                logger.error("Task %s crashed: %s", task.get_name(), task.exception())
    finally:
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        await controller.shutdown()


async def main(args: argparse.Namespace) -> int:
    print_header()
    ensure_dirs()

    if not await run_preflight():
        return 1

    try:
        channel_id, title = await resolve_channel(args.channel, args.refresh)
    except SetupError as e:
        format_error("directory", str(e), channel_id=args.channel or None, url=BASE_ORIGIN)
        console.print(f"  [red]{e}[/red]")
        return 1

    hotkeys = HotkeyMap()
    print_hotkeys(hotkeys.hotkeys)
    print_playing_channel(title)

    controller = PlaybackController(MpvBackend())
    sync = SyncLoop(channel_id, MetadataFetcher(), controller)

    loop = asyncio.get_running_loop()
    me = asyncio.current_task()
    loop.add_signal_handler(signal.SIGTERM, me.cancel)

    await run_session(controller, sync.run(), toggle_source(controller, hotkeys))

    console.print("\n  [bold cyan]♪[/bold cyan]  See you next time.\n")
    return 0


if __name__ == "__main__":
    args = parse_args()
    setup_logging(args.verbose)
    try:
        sys.exit(asyncio.run(main(args)))
    except (KeyboardInterrupt, asyncio.CancelledError):
        console.print("\n\n  [bold]Stopped.[/bold] Goodbye.\n")
        sys.exit(0)
