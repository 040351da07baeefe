"""
ChromaSense Snapshot Storage
Pluggable stores for the serialized session and learning snapshot.
The engine only produces and consumes strings; these backends decide where
the string lives.
"""

import logging
import os
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from chromasense.config import Config
from chromasense.exceptions import StorageError

logger = logging.getLogger(__name__)


class StateStore(ABC):
    """Abstract base class for snapshot stores."""

    @abstractmethod
    def load(self) -> Optional[str]:
        """Return the stored snapshot, or None if nothing was saved yet."""
        pass

    @abstractmethod
    def save(self, data: str) -> None:
        """Replace the stored snapshot."""
        pass

    @abstractmethod
    def clear(self) -> None:
        """Delete the stored snapshot."""
        pass


class InMemoryStateStore(StateStore):
    """Keeps the snapshot in process memory (tests, ephemeral sessions)."""

    def __init__(self, initial: Optional[str] = None):
        self._data = initial

    def load(self) -> Optional[str]:
        return self._data

    def save(self, data: str) -> None:
        self._data = data

    def clear(self) -> None:
        self._data = None


class FileStateStore(StateStore):
    """
    Keeps the snapshot in a JSON file.

    Writes go to a temporary file in the same directory which then replaces
    the target, so a crash never leaves a half-written snapshot.
    """

    def __init__(self, path: str):
        self.path = Path(path).expanduser()

    def load(self) -> Optional[str]:
        if not self.path.exists():
            return None
        try:
            return self.path.read_text(encoding="utf-8")
        except OSError as e:
            logger.error(f"Failed to read snapshot {self.path}: {e}")
            raise StorageError(f"Failed to read snapshot: {e}") from e

    def save(self, data: str) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                dir=str(self.path.parent), prefix=".state-", suffix=".json"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(data)
                os.replace(tmp_path, self.path)
            except BaseException:
                if os.path.exists(tmp_path):
                    os.unlink(tmp_path)
                raise
        except OSError as e:
            logger.error(f"Failed to write snapshot {self.path}: {e}")
            raise StorageError(f"Failed to write snapshot: {e}") from e

    def clear(self) -> None:
        try:
            self.path.unlink()
        except FileNotFoundError:
            pass
        except OSError as e:
            raise StorageError(f"Failed to delete snapshot: {e}") from e


def create_state_store(cfg: Config) -> StateStore:
    """Build the store selected by ``STORAGE_BACKEND``."""
    if cfg.STORAGE_BACKEND == "memory":
        return InMemoryStateStore()
    if cfg.STORAGE_BACKEND == "file":
        return FileStateStore(cfg.STATE_PATH)
    raise ValueError(f"Unknown storage backend: {cfg.STORAGE_BACKEND}")
