"""On-disk persistence for the label index."""

from __future__ import annotations

import logging
import os
import stat
import tempfile
from pathlib import Path

from pydantic import ValidationError

from imagesearch.errors import IndexNotFoundError, IndexParseError, PersistenceError
from imagesearch.index.models import Index

logger = logging.getLogger(__name__)


class IndexStore:
    """Reads and writes an ``Index`` as a single UTF-8 JSON document."""

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def save(self, index: Index) -> None:
        """Write the index, replacing any previous file atomically.

        Raises:
            PersistenceError: If the temporary file cannot be written or moved into place.
        """
        payload = index.model_dump_json()
        directory = self._path.parent
        tmp_name: str | None = None
        try:
            directory.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=directory,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, self._file_mode())
            os.replace(tmp_name, self._path)
        except OSError as exc:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise PersistenceError(f"Could not write index to {self._path}: {exc}") from exc

        logger.info("Saved index with %d terms to %s", len(index), self._path)

    def _file_mode(self) -> int:
        """Mode for the replacement file: the current file's, or 0o666 minus the umask."""
        try:
            return stat.S_IMODE(self._path.stat().st_mode)
        except FileNotFoundError:
            umask = os.umask(0)
            os.umask(umask)
            return 0o666 & ~umask

    def load(self) -> Index:
        """Read the index back in its stored order.

        Raises:
            IndexNotFoundError: If the file does not exist.
            IndexParseError: If the file is not valid JSON or not shaped like an index.
            PersistenceError: If the file exists but cannot be read.
        """
        try:
            raw = self._path.read_bytes()
        except FileNotFoundError as exc:
            raise IndexNotFoundError(f"No index found at {self._path}") from exc
        except OSError as exc:
            raise PersistenceError(f"Could not read index from {self._path}: {exc}") from exc

        try:
            index = Index.model_validate_json(raw)
        except ValidationError as exc:
            raise IndexParseError(f"Malformed index at {self._path}: {exc.error_count()} error(s)") from exc

        logger.debug("Loaded index with %d terms from %s", len(index), self._path)
        return index
