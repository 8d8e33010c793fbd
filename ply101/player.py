"""Audio backend — mpv subprocess, muted/unmuted over its JSON IPC socket."""
import json
import logging
import os
import socket
import subprocess
import time
from typing import Optional

from .config import MPV_PATH, MPV_IPC_SOCKET
from .errors import BackendError

logger = logging.getLogger(__name__)


class MpvBackend:
    """Streams one URL at a time. Pausing is muting: this is live radio."""

    def __init__(self, mpv_path: str = MPV_PATH, ipc_path: str = MPV_IPC_SOCKET):
        self.mpv_path = mpv_path
        self.ipc_path = ipc_path
        self._proc: Optional[subprocess.Popen] = None

    # ── Playback ───────────────────────────────────────────────────────────────

    def play_stream(self, url: str):
        """Start mpv for the given URL. Stops any current playback first."""
        self.stop()
        self._remove_socket()
        try:
            self._proc = subprocess.Popen(
                [
                    self.mpv_path,
                    "--no-video",
                    "--no-terminal",
                    f"--input-ipc-server={self.ipc_path}",
                    url,
                ],
                stdin=subprocess.DEVNULL,
                stdout=subprocess.DEVNULL,
                stderr=subprocess.DEVNULL,
            )
        except OSError as e:
            raise BackendError(f"cannot start {self.mpv_path}: {e}")
        # mpv creates the socket once it's up; mute/unmute need it
        self._wait_for_socket()

    def stop(self):
        """Terminate playback and wait for the process to clean up. Idempotent."""
        proc, self._proc = self._proc, None
        if proc and proc.poll() is None:
            proc.terminate()
            try:
                proc.wait(timeout=2)
            except subprocess.TimeoutExpired:
                proc.kill()
        self._remove_socket()

    def mute(self):
        self._set_property("mute", True)

    def unmute(self):
        self._set_property("mute", False)

    def is_running(self) -> bool:
        return self._proc is not None and self._proc.poll() is None

    # ── IPC ────────────────────────────────────────────────────────────────────

    def _set_property(self, name: str, value):
        if not self.is_running():
            raise BackendError(f"no stream running, cannot set {name}")
        line = json.dumps({"command": ["set_property", name, value]}) + "\n"
        try:
            with socket.socket(socket.AF_UNIX, socket.SOCK_STREAM) as s:
                s.settimeout(2)
                s.connect(self.ipc_path)
                s.sendall(line.encode("utf-8"))
        except OSError as e:
            raise BackendError(f"mpv IPC {name}={value} failed: {e}")

    def _wait_for_socket(self, timeout_s: float = 3.0):
        deadline = time.monotonic() + timeout_s
        while time.monotonic() < deadline:
            if os.path.exists(self.ipc_path):
                return
            if self._proc is None or self._proc.poll() is not None:
                raise BackendError("mpv exited during startup")
            time.sleep(0.05)
        logger.debug("mpv IPC socket %s not ready after %.1fs", self.ipc_path, timeout_s)

    def _remove_socket(self):
        try:
            os.remove(self.ipc_path)
        except FileNotFoundError:
            pass
        except OSError as e:
            logger.debug("Could not remove %s: %s", self.ipc_path, e)
