"""Config & constants"""
import json
import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env from project root (one level up from ply101/)
_ROOT = Path(__file__).parent.parent
load_dotenv(_ROOT / ".env")

# ─── Paths ────────────────────────────────────────────────────────────────────
ROOT_DIR = _ROOT
CONFIG_DIR = Path(os.getenv("PLY101_CONFIG_DIR", Path.home() / ".config" / "101ply")).expanduser()
CACHE_DIR = Path(os.getenv("PLY101_CACHE_DIR", Path.home() / ".cache" / "101ply")).expanduser()
HOTKEY_CONFIG = CONFIG_DIR / "hotkey.json"
DIRECTORY_CACHE = CACHE_DIR / "data.json"
ERRORS_LOG = CACHE_DIR / "errors.log"

# Directory cache is rebuilt once a week
CACHE_TTL = int(os.getenv("CACHE_TTL", str(7 * 24 * 3600)))

# ─── Remote service ───────────────────────────────────────────────────────────
BASE_ORIGIN = os.getenv("PLY101_ORIGIN", "http://101.ru").rstrip("/")
HTTP_TIMEOUT = float(os.getenv("HTTP_TIMEOUT", "10"))

# ─── Audio backend ────────────────────────────────────────────────────────────
MPV_PATH = os.getenv("MPV_PATH", "mpv")
MPV_IPC_SOCKET = os.getenv("MPV_IPC_SOCKET", "/tmp/101ply-mpv.sock")

APP_VERSION = "0.3.0"

# ─── Dev mode ─────────────────────────────────────────────────────────────────
DEV_MODE = os.getenv("DEV_MODE", "0").strip() in ("1", "true", "yes")

DEFAULT_HOTKEYS = [
    {"key": "space", "desc": "Play/pause."},
    {"key": "ctrl+p", "desc": "Play/pause."},
]


def ensure_dirs():
    """Create config and cache directories, plus a default hotkey file."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    CACHE_DIR.mkdir(parents=True, exist_ok=True)
    if not HOTKEY_CONFIG.exists():
        HOTKEY_CONFIG.write_text(json.dumps(DEFAULT_HOTKEYS, indent=2))
