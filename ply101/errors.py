"""Error types and structured error logging — JSON to errors.log."""
import json
import logging
import sys
from datetime import datetime
from typing import Optional

from . import config

logger = logging.getLogger(__name__)

_FRIENDLY_MESSAGES = {
    "playback": "Audio backend hiccup — carrying on.",
    "directory": "Couldn't load the channel list.",
    "preflight": "Startup check failed.",
}


class Ply101Error(Exception):
    """Base class for everything the player raises on purpose."""


class FetchError(Ply101Error):
    """The track-on-air query failed; the caller falls back to a short interval."""


class BackendError(Ply101Error):
    """The audio backend refused a command."""


class SetupError(Ply101Error):
    """Startup could not resolve a channel. Fatal."""


def format_error(
    stage: str,
    raw: str = "",
    channel_id: Optional[int] = None,
    url: Optional[str] = None,
) -> str:
    entry = {
        "timestamp": datetime.now().isoformat(),
        "stage": stage,
        "channel": channel_id,
        "url": url,
        "error": raw,
        "python": sys.version.split()[0],
    }

    _append_to_log(entry)
    logger.error("Error at %s: %s", stage, raw)

    if config.DEV_MODE:
        return json.dumps(entry, indent=2)
    return _FRIENDLY_MESSAGES.get(stage, f"Something went wrong ({stage}).")


def _append_to_log(entry: dict):
    try:
        config.ERRORS_LOG.parent.mkdir(parents=True, exist_ok=True)
        with open(config.ERRORS_LOG, "a") as f:
            f.write(json.dumps(entry) + "\n")
    except OSError:
        pass
