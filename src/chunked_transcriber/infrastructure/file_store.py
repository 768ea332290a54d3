"""JSON-file implementation of the KeyValueStore interface."""

import os
from pathlib import Path

from chunked_transcriber.exceptions import KeyValueStoreError
from chunked_transcriber.logging import setup_logging

from .interfaces import KeyValueStore

logger = setup_logging()


class FileKeyValueStore(KeyValueStore):
    """Stores each key as ``<directory>/<key>.json`` on the local disk."""

    def __init__(self, directory: Path):
        self._directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def get(self, key: str) -> str | None:
        path = self._path(key)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as e:
            logger.exception("File store read failed", extra={"path": str(path)})
            raise KeyValueStoreError(key, "get", cause=e) from e

    def set(self, key: str, value: str) -> None:
        path = self._path(key)
        temp_path = path.with_suffix(".tmp")
        try:
            self._directory.mkdir(parents=True, exist_ok=True)
            temp_path.write_text(value, encoding="utf-8")
            os.replace(temp_path, path)
        except OSError as e:
            logger.exception("File store write failed", extra={"path": str(path)})
            raise KeyValueStoreError(key, "set", cause=e) from e

    def delete(self, key: str) -> None:
        path = self._path(key)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            logger.exception("File store delete failed", extra={"path": str(path)})
            raise KeyValueStoreError(key, "delete", cause=e) from e
