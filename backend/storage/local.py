"""Filesystem-backed storage for development and tests."""

import os
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import BinaryIO
from urllib.parse import quote

from storage.base import Storage, StorageError, StorageObjectNotFoundError


class LocalStorage(Storage):
    provider_type = "local"

    def __init__(self, base_path: str, public_base_url: str):
        super().__init__(public_base_url)
        self.base_path = Path(base_path)

    def _full_path(self, path: str) -> Path:
        full_path = (self.base_path / path).resolve()
        if self.base_path.resolve() not in full_path.parents:
            raise StorageError(f"path escapes storage root: {path}")
        return full_path

    def generate_upload_url(self, path: str, expires: timedelta) -> str:
        expires_at = int((datetime.now(timezone.utc) + expires).timestamp())
        return f"{self.get_public_url(quote(path))}?expires={expires_at}"

    def put_bytes(self, path: str, data: bytes) -> str:
        """Write an object directly; stands in for the client's signed PUT."""
        full_path = self._full_path(path)
        full_path.parent.mkdir(parents=True, exist_ok=True)
        full_path.write_bytes(data)
        return self.get_public_url(path)

    def download(self, path: str) -> BinaryIO:
        full_path = self._full_path(path)
        try:
            return open(full_path, "rb")
        except FileNotFoundError as exc:
            raise StorageObjectNotFoundError(path) from exc
        except OSError as exc:
            raise StorageError(f"failed to open {path}: {exc}") from exc

    def delete(self, path: str) -> None:
        full_path = self._full_path(path)
        try:
            os.remove(full_path)
        except FileNotFoundError:
            # Deleting a missing object is a no-op, as on S3
            return
        except OSError as exc:
            raise StorageError(f"failed to delete {path}: {exc}") from exc
