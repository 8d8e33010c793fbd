"""Terminal hotkeys — raw key reading, hotkey file, play/pause toggle source."""
import asyncio
import json
import logging
import select as _sel
import sys
import termios
import tty
from pathlib import Path
from typing import Optional

from . import config, ui
from .models import PlaybackState

logger = logging.getLogger(__name__)

QUIT_KEYS = {"q", "\x03", "\x04"}   # q, Ctrl+C, Ctrl+D


def key_to_char(name: str) -> Optional[str]:
    """'space' -> ' ', 'ctrl+p' -> '\\x10', 'x' -> 'x'. None if unknown."""
    name = name.strip()
    lowered = name.lower()
    if lowered == "space":
        return " "
    if lowered.startswith("ctrl+") and len(lowered) == 6 and lowered[5].isalpha():
        return chr(ord(lowered[5]) - ord("a") + 1)
    if len(name) == 1:
        return name
    return None


class HotkeyMap:
    """Toggle keys from hotkey.json, reloaded whenever the file changes."""

    def __init__(self, path: Path = None):
        self.path = path or config.HOTKEY_CONFIG
        self.hotkeys: list[dict] = list(config.DEFAULT_HOTKEYS)
        self.keys: set[str] = self._chars(self.hotkeys)
        self._mtime: Optional[float] = None
        self.reload_if_changed()

    @staticmethod
    def _chars(hotkeys: list[dict]) -> set[str]:
        chars = set()
        for h in hotkeys:
            ch = key_to_char(str(h.get("key", "")))
            if ch is None:
                logger.warning("Unknown hotkey %r ignored", h.get("key"))
            elif ch in QUIT_KEYS:
                logger.warning("Hotkey %r is reserved for quit", h.get("key"))
            else:
                chars.add(ch)
        return chars

    def reload_if_changed(self) -> bool:
        try:
            mtime = self.path.stat().st_mtime
        except OSError:
            return False
        if mtime == self._mtime:
            return False
        self._mtime = mtime
        try:
            hotkeys = json.loads(self.path.read_text())
            if not isinstance(hotkeys, list) or not all(isinstance(h, dict) for h in hotkeys):
                raise ValueError("expected a list of {key, desc} objects")
        except (OSError, ValueError) as e:
            logger.warning("Could not parse hotkey file %s: %s", self.path, e)
            return False
        chars = self._chars(hotkeys)
        if not chars:
            logger.warning("No usable hotkeys in %s, keeping previous ones", self.path)
            return False
        self.hotkeys, self.keys = hotkeys, chars
        logger.debug("Hotkeys loaded from %s: %s", self.path, [h.get("key") for h in hotkeys])
        return True

    def is_toggle(self, ch: str) -> bool:
        return ch in self.keys


def _read_one_char_timeout(timeout: float = 0.3) -> str | None:
    """Read one char if available within timeout, else return None."""
    fd = sys.stdin.fileno()
    old = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        readable, _, _ = _sel.select([sys.stdin], [], [], timeout)
        if readable:
            return sys.stdin.read(1)
        return None
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old)


async def toggle_source(controller, hotkeys: Optional[HotkeyMap] = None, read_key=None):
    """Feed hotkey presses to controller.toggle(). Returns when the user quits."""
    hotkeys = hotkeys or HotkeyMap()
    if read_key is None:
        if not sys.stdin.isatty():
            logger.info("stdin is not a terminal; hotkeys disabled")
            await asyncio.Event().wait()
        read_key = _read_one_char_timeout

    loop = asyncio.get_running_loop()
    while True:
        ch = await loop.run_in_executor(None, read_key)
        if ch is None:
            continue
        if ch == "":
            # EOF on stdin
            return
        if ch in QUIT_KEYS:
            return
        hotkeys.reload_if_changed()
        if hotkeys.is_toggle(ch):
            await controller.toggle()
            ui.print_toggle(controller.state is PlaybackState.PAUSED)
