"""Local filesystem storage implementation."""

from __future__ import annotations

import os
import shutil
from pathlib import Path
from typing import IO

from werkzeug.utils import secure_filename

from .abstract_storage import AbstractStorage


class LocalStorage(AbstractStorage):
    """Persist files to a directory on the local filesystem."""

    def __init__(self, base_directory: str | os.PathLike):
        self.base_directory = Path(base_directory)
        os.makedirs(self.base_directory, exist_ok=True)

    def _safe_name(self, filename: str) -> str:
        safe_name = secure_filename(filename)
        if not safe_name:
            raise ValueError("Filename must contain at least one valid character.")
        return safe_name

    def save(self, file_obj: IO[bytes], filename: str) -> str:
        """Save a file and return the relative path within the base directory.

        An existing file with the same name is overwritten.
        """

        destination = self.base_directory / self._safe_name(filename)
        if hasattr(file_obj, "save"):
            file_obj.save(destination)  # type: ignore[arg-type]
        else:
            with open(destination, "wb") as output:
                output.write(file_obj.read())

        return str(destination.relative_to(self.base_directory))

    def path_for(self, path: str) -> Path:
        return self.base_directory / path

    def replace_from(self, source: Path, filename: str) -> str:
        """Move ``source`` into this directory with ``os.replace``.

        Readers of the destination see either the old file or the new one,
        never a partial write. Source and destination must share a filesystem.
        """

        destination = self.base_directory / self._safe_name(filename)
        os.replace(source, destination)
        return str(destination.relative_to(self.base_directory))

    def backup(self, filename: str) -> str | None:
        """Copy ``filename`` to ``<filename>.bak``; the original stays in place."""

        source = self.base_directory / self._safe_name(filename)
        if not source.exists():
            return None
        copy = source.with_name(f"{source.name}.bak")
        shutil.copy2(source, copy)
        return str(copy.relative_to(self.base_directory))

    def delete(self, path: str) -> None:
        try:
            (self.base_directory / path).unlink()
        except FileNotFoundError:
            pass
