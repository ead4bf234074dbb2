"""
This module patches the benchmark's binary preferences file.

Only two bytes are touched: the custom thread count and the flag that
enables it. The file is always rewritten whole, so anything else writing
to it while a session runs will lose its changes. There is no locking.
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from types import TracebackType
from typing import Optional, Union

from .config import THREADS_RANGE
from .errors import (
    ConfigurationError,
    PreferencesFormatError,
    PreferencesIOError,
    PreferencesNotFoundError,
)

logger = logging.getLogger(__name__)

THREADS_VALUE_OFFSET = 0x1A3
THREADS_ENABLED_OFFSET = 0x1B2
MIN_BLOB_SIZE = max(THREADS_VALUE_OFFSET, THREADS_ENABLED_OFFSET) + 1

APP_DIR_NAME = "StressBench"
DEFAULT_PREFS_GLOB = f"{APP_DIR_NAME}*/**/*.prefs"

PathLike = Union[str, os.PathLike]


@dataclass(frozen=True)
class PreferenceState:
    """The two preference bytes we control, as found before the session."""

    threads_enabled: int
    threads_value: int


def app_data_dir() -> Path:
    """Per-user application data directory the benchmark keeps its preferences in."""
    if sys.platform == "win32":
        appdata = os.environ.get("APPDATA")
        if appdata:
            return Path(appdata)
        return Path.home() / "AppData" / "Roaming"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return Path(xdg) if xdg else Path.home() / ".config"


def find_preferences_file(
    root: Optional[PathLike] = None, pattern: str = DEFAULT_PREFS_GLOB
) -> Path:
    """
    Locates the preferences file with a glob search under ``root``.

    Args:
        root: Directory to search. Defaults to the per-user app data directory.
        pattern: Glob pattern relative to ``root``.

    Returns:
        The matching file. When several match, the most recently modified one.

    Raises:
        PreferencesNotFoundError: Nothing matched.
    """
    search_root = Path(root) if root is not None else app_data_dir()
    matches = [p for p in search_root.glob(pattern) if p.is_file()]
    if not matches:
        raise PreferencesNotFoundError(
            f"No preferences file matching '{pattern}' under '{search_root}'"
        )
    matches.sort(key=lambda p: p.stat().st_mtime, reverse=True)
    if len(matches) > 1:
        logger.warning(
            f"{len(matches)} preferences files found, using the newest: {matches[0]}"
        )
    return matches[0]


def _check_size(blob: bytes) -> None:
    if len(blob) < MIN_BLOB_SIZE:
        raise PreferencesFormatError(
            f"Preferences blob is {len(blob)} bytes, expected at least {MIN_BLOB_SIZE}"
        )


def read_blob(path: PathLike) -> bytes:
    try:
        blob = Path(path).read_bytes()
    except FileNotFoundError as e:
        raise PreferencesNotFoundError(f"Preferences file not found: {path}") from e
    except OSError as e:
        raise PreferencesIOError(f"Could not read preferences file {path}: {e}") from e
    _check_size(blob)
    return blob


def write_blob(path: PathLike, blob: bytes) -> None:
    try:
        Path(path).write_bytes(blob)
    except OSError as e:
        raise PreferencesIOError(f"Could not write preferences file {path}: {e}") from e


def read_state(blob: bytes) -> PreferenceState:
    _check_size(blob)
    return PreferenceState(
        threads_enabled=blob[THREADS_ENABLED_OFFSET],
        threads_value=blob[THREADS_VALUE_OFFSET],
    )


def load_preferences(path: PathLike) -> PreferenceState:
    """Reads the preferences file and returns the current state of our two fields."""
    return read_state(read_blob(path))


def apply_thread_count(blob: bytes, count: int) -> bytes:
    """
    Returns a copy of ``blob`` with the custom thread count set to ``count``
    and enabled. Counts that do not fit the single byte field are rejected.
    """
    low, high = THREADS_RANGE
    if not low <= count <= high:
        raise ConfigurationError(
            f"Thread count {count} cannot be stored in the preferences file ({low}-{high})"
        )
    _check_size(blob)
    patched = bytearray(blob)
    patched[THREADS_VALUE_OFFSET] = count
    patched[THREADS_ENABLED_OFFSET] = 1
    return bytes(patched)


def restore(blob: bytes, state: PreferenceState) -> bytes:
    """Returns a copy of ``blob`` with the original two bytes written back."""
    _check_size(blob)
    restored = bytearray(blob)
    restored[THREADS_VALUE_OFFSET] = state.threads_value
    restored[THREADS_ENABLED_OFFSET] = state.threads_enabled
    return bytes(restored)


class PreferencesGuard:
    """
    Borrows the preferences file for the duration of a ``with`` block.

    Entering reads the file and snapshots the two bytes. Each
    ``set_thread_count`` call rewrites the file. Leaving the block, by any
    path, writes the original bytes back once if the file was patched.
    """

    def __init__(self, path: PathLike) -> None:
        self.path = Path(path)
        self.original: Optional[PreferenceState] = None
        self._blob: Optional[bytes] = None
        self._patched = False

    def __enter__(self) -> "PreferencesGuard":
        self._blob = read_blob(self.path)
        self.original = read_state(self._blob)
        logger.debug(
            f"Preferences {self.path}: enabled={self.original.threads_enabled} "
            f"threads={self.original.threads_value}"
        )
        return self

    def set_thread_count(self, count: int) -> None:
        if self._blob is None:
            raise RuntimeError("PreferencesGuard used outside of its 'with' block")
        patched = apply_thread_count(self._blob, count)
        # Flag the file as dirty before writing: a failed write may have truncated it.
        self._patched = True
        write_blob(self.path, patched)
        self._blob = patched
        logger.debug(f"Preferences patched to {count} threads")

    def __exit__(
        self,
        exc_type: Optional[type[BaseException]],
        exc: Optional[BaseException],
        tb: Optional[TracebackType],
    ) -> None:
        if not self._patched or self._blob is None or self.original is None:
            return
        self._patched = False
        logger.info(f"Restoring original preferences in {self.path}")
        write_blob(self.path, restore(self._blob, self.original))
