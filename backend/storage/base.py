"""Object storage contract used by the artifact services."""

from abc import ABC, abstractmethod
from datetime import timedelta
from typing import BinaryIO, Tuple
from urllib.parse import unquote, urlparse


class StorageError(Exception):
    """The storage backend failed or is unreachable."""


class StorageObjectNotFoundError(StorageError):
    """No object exists at the requested path."""


class Storage(ABC):
    """Object storage addressed by slash-separated keys ("paths")."""

    provider_type: str

    def __init__(self, public_base_url: str):
        self.public_base_url = public_base_url.rstrip("/")

    @abstractmethod
    def generate_upload_url(self, path: str, expires: timedelta) -> str:
        """Return a signed URL the client can PUT the file to."""

    @abstractmethod
    def download(self, path: str) -> BinaryIO:
        """Open a readable stream over the object. The caller closes it."""

    @abstractmethod
    def delete(self, path: str) -> None:
        """Remove the object at path."""

    def get_public_url(self, path: str) -> str:
        return f"{self.public_base_url}/{path.lstrip('/')}"

    def extract_storage_path(self, url: str) -> Tuple[str, bool]:
        """
        Map a public URL back to its storage path.

        Returns (path, True) only for URLs under our public base URL; any
        other URL is reported as ("", False) and must never be fetched.
        """
        try:
            parsed = urlparse(url)
            base = urlparse(self.public_base_url)
        except ValueError:
            return "", False

        if parsed.scheme not in ("http", "https") or parsed.scheme != base.scheme:
            return "", False
        if parsed.netloc.lower() != base.netloc.lower():
            return "", False

        base_path = base.path.rstrip("/") + "/"
        if not parsed.path.startswith(base_path):
            return "", False

        path = unquote(parsed.path[len(base_path):])
        segments = path.split("/")
        if not path or any(segment in ("", ".", "..") for segment in segments):
            return "", False
        return path, True
