"""Storage abstraction layer."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import IO


class AbstractStorage(ABC):
    """Interface for storage backends holding avatar files."""

    @abstractmethod
    def save(self, file_obj: IO[bytes], filename: str) -> str:
        """Persist a file and return the stored (relative) path."""

    @abstractmethod
    def path_for(self, path: str) -> Path:
        """Return the absolute location of a relative path."""

    @abstractmethod
    def replace_from(self, source: Path, filename: str) -> str:
        """Atomically move ``source`` into storage, replacing any existing file."""

    @abstractmethod
    def backup(self, filename: str) -> str | None:
        """Copy an existing file aside and return the copy's path, or ``None``."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove a stored file if present."""
