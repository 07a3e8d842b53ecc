from __future__ import annotations

import io
import pathlib
from typing import Any

import joblib
from typing_extensions import Self

from insensitivemap.core.constants import IMAP_EXTENSION, IMAP_FILE_VERSION, IMAP_KIND, IMAP_STATE_TARGET
from insensitivemap.logger import logger

# every saved container ends in ".im.imap"
FILE_SUFFIX = f".{IMAP_KIND}{IMAP_EXTENSION}"


class SerializableMixin:
    """
    Persistence hooks for containers that can describe themselves as a plain dict.

    A subclass supplies `get_state()` and `set_state(state)`; the mixin builds the
    rest on top of them:

    - `from_state(state)` creates a blank instance and hands it the state.
    - `to_bytes()` / `from_bytes(blob)` wrap the state in a compressed joblib \
        payload carrying a small header (file version, kind, class name).
    - `save(path)` / `load(path)` write and read that payload on disk.

    `set_state` is called on an instance whose `__init__` never ran, so it has to
    initialize every attribute it relies on.
    """

    # ================================================
    # Paths
    # ================================================
    def _normalize_save_path(self, path: str | pathlib.Path) -> pathlib.Path:
        path = pathlib.Path(path)
        if path.name.endswith(FILE_SUFFIX):
            return path
        return path.with_suffix("").with_suffix(FILE_SUFFIX)

    # ================================================
    # State
    # ================================================
    def get_state(self) -> dict[str, Any]:
        """
        Describe this object as a dict of plain values plus a `version` entry.

        Passing the result to `set_state()` must give back an equal object.
        """
        raise NotImplementedError

    def set_state(self, state: dict[str, Any]) -> None:
        """Load a dict produced by `get_state()` into this object."""
        raise NotImplementedError

    @classmethod
    def from_state(cls, state: dict[str, Any]) -> Self:
        obj = cls.__new__(cls)
        obj.set_state(state)
        return obj

    # ================================================
    # Bytes
    # ================================================
    def to_bytes(self) -> bytes:
        """Pack the state and its header into one compressed blob."""
        header = {
            "version": IMAP_FILE_VERSION,
            "kind": IMAP_KIND,
            "class": self.__class__.__qualname__,
        }
        buffer = io.BytesIO()
        joblib.dump({IMAP_STATE_TARGET: header, "state": self.get_state()}, buffer, compress=("zlib", 3))
        return buffer.getvalue()

    @classmethod
    def from_bytes(cls, blob: bytes) -> Self:
        """Rebuild an object from the output of `to_bytes()`."""
        payload = joblib.load(io.BytesIO(blob))

        if not isinstance(payload, dict) or IMAP_STATE_TARGET not in payload:
            raise ValueError("Invalid InsensitiveMap file received.")
        header = payload[IMAP_STATE_TARGET]
        if header.get("kind") != IMAP_KIND:
            msg = f"File contains data for a {header.get('class')} but loader expects {cls.__name__}."
            raise TypeError(msg)

        return cls.from_state(payload["state"])

    # ================================================
    # Files
    # ================================================
    def save(self, path: str | pathlib.Path, *, overwrite: bool = False) -> pathlib.Path:
        """
        Write `to_bytes()` to disk.

        Args:
            path (str | Path): Target file. The `.im.imap` suffix is applied \
                if missing.
            overwrite (bool): Replace an existing file instead of raising.

        Returns:
            pathlib.Path: The file that was written.

        Raises:
            FileExistsError: If the file exists and `overwrite` is False.

        """
        path = self._normalize_save_path(path)
        if path.exists() and not overwrite:
            msg = f"File already exists: {path}"
            raise FileExistsError(msg)

        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(self.to_bytes())
        logger.debug("Saved %s to %s", self.__class__.__name__, path)
        return path

    @classmethod
    def load(cls, path: str | pathlib.Path) -> Self:
        """Read a file written by `save()`."""
        path = pathlib.Path(path)
        if not path.exists():
            msg = f"No such file: {path}"
            raise FileNotFoundError(msg)

        logger.debug("Loading %s from %s", cls.__name__, path)
        return cls.from_bytes(path.read_bytes())
