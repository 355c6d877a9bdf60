"""Drawing storage: backend interface and the filesystem implementation."""
from __future__ import annotations

import json
import os
import re
import tempfile
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, List

from .errors import BadRequestError, NotFoundError, SerializationError, StorageError
from .models import DrawingMeta

UNSAFE_ID_CHARS = re.compile(r"[^A-Za-z0-9_-]")
DRAWING_SUFFIX = ".json"
EPOCH = datetime.fromtimestamp(0, tz=timezone.utc)


def sanitize_id(drawing_id: str) -> str:
    """Strip every character that is not safe in a filename component."""
    return UNSAFE_ID_CHARS.sub("", drawing_id)


class DrawingStorage(ABC):
    """Maps drawing identifiers to persisted JSON documents.

    The web layer depends only on this interface so another backend
    (object storage, an embedded database) can be swapped in.
    """

    @abstractmethod
    def save(self, drawing_id: str, document: Any) -> DrawingMeta:
        """Persist ``document`` under ``drawing_id``, replacing any existing one."""

    @abstractmethod
    def load(self, drawing_id: str) -> Any:
        """Return the stored document; raises NotFoundError when absent."""

    @abstractmethod
    def delete(self, drawing_id: str) -> None:
        """Remove the stored document; raises NotFoundError when absent."""

    @abstractmethod
    def list(self) -> List[DrawingMeta]:
        """Metadata for every stored document, newest first."""

    @abstractmethod
    def exists(self, drawing_id: str) -> bool:
        """Report whether a document is stored under ``drawing_id``."""


class FileSystemStorage(DrawingStorage):
    """One ``<id>.json`` file per drawing inside a base directory."""

    def __init__(self, root: str | Path):
        self.root = Path(root)
        try:
            self.root.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise StorageError(f"Cannot create data directory {self.root}: {exc}") from exc
        if not self.root.is_dir():
            raise StorageError(f"Data path is not a directory: {self.root}")
        if not os.access(self.root, os.W_OK | os.X_OK):
            raise StorageError(f"Data directory is not writable: {self.root}")
        self.file_mode = _umask_file_mode()

    def path_for(self, drawing_id: str) -> Path:
        return self.root / f"{sanitize_id(drawing_id)}{DRAWING_SUFFIX}"

    def save(self, drawing_id: str, document: Any) -> DrawingMeta:
        safe_id = sanitize_id(drawing_id)
        if not safe_id:
            raise BadRequestError(f"Invalid drawing id: {drawing_id!r}")
        try:
            payload = json.dumps(
                document, ensure_ascii=False, allow_nan=False, separators=(",", ":")
            ).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise SerializationError(f"Cannot encode drawing {drawing_id}: {exc}") from exc

        path = self.path_for(drawing_id)
        self._write_atomic(path, payload)
        return DrawingMeta(
            id=drawing_id,
            created_at=datetime.now(timezone.utc),
            size_bytes=len(payload),
        )

    def load(self, drawing_id: str) -> Any:
        path = self._existing_path(drawing_id)
        try:
            raw = path.read_bytes()
        except FileNotFoundError as exc:
            raise NotFoundError() from exc
        except OSError as exc:
            raise StorageError(f"Cannot read drawing {drawing_id}: {exc}") from exc
        try:
            return json.loads(raw)
        except ValueError as exc:
            raise SerializationError(f"Stored drawing {drawing_id} is not valid JSON: {exc}") from exc

    def delete(self, drawing_id: str) -> None:
        path = self._existing_path(drawing_id)
        try:
            path.unlink()
        except FileNotFoundError as exc:
            raise NotFoundError() from exc
        except OSError as exc:
            raise StorageError(f"Cannot delete drawing {drawing_id}: {exc}") from exc

    def list(self) -> List[DrawingMeta]:
        drawings: List[DrawingMeta] = []
        try:
            with os.scandir(self.root) as entries:
                for entry in entries:
                    if entry.name.startswith(".") or not entry.name.endswith(DRAWING_SUFFIX):
                        continue
                    try:
                        if not entry.is_file():
                            continue
                        stat = entry.stat()
                    except FileNotFoundError:
                        # deleted between scan and stat
                        continue
                    drawings.append(
                        DrawingMeta(
                            id=entry.name[: -len(DRAWING_SUFFIX)],
                            created_at=_created_at(stat),
                            size_bytes=stat.st_size,
                        )
                    )
        except OSError as exc:
            raise StorageError(f"Cannot list data directory {self.root}: {exc}") from exc

        drawings.sort(key=lambda meta: (meta.created_at, meta.id), reverse=True)
        return drawings

    def exists(self, drawing_id: str) -> bool:
        if not sanitize_id(drawing_id):
            return False
        return self.path_for(drawing_id).is_file()

    def _existing_path(self, drawing_id: str) -> Path:
        if not self.exists(drawing_id):
            raise NotFoundError()
        return self.path_for(drawing_id)

    def _write_atomic(self, path: Path, payload: bytes) -> None:
        try:
            fd, tmp_name = tempfile.mkstemp(dir=self.root, prefix=f".{path.stem}.", suffix=".tmp")
        except OSError as exc:
            raise StorageError(f"Cannot write drawing {path.stem}: {exc}") from exc
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(payload)
                handle.flush()
                os.fsync(handle.fileno())
            os.chmod(tmp_name, self.file_mode)
            os.replace(tmp_name, path)
        except OSError as exc:
            _discard(tmp_name)
            raise StorageError(f"Cannot write drawing {path.stem}: {exc}") from exc


def _created_at(stat: os.stat_result) -> datetime:
    """Creation time from stat; saves replace the file, so this is the last save time."""
    timestamp = getattr(stat, "st_birthtime", None) or stat.st_mtime
    if not timestamp:
        return EPOCH
    return datetime.fromtimestamp(timestamp, tz=timezone.utc)


def _umask_file_mode() -> int:
    """Mode a plain file gets under the process umask (mkstemp always uses 0600)."""
    umask = os.umask(0o022)
    os.umask(umask)
    return 0o666 & ~umask


def _discard(tmp_name: str) -> None:
    try:
        os.unlink(tmp_name)
    except FileNotFoundError:
        pass
