import logging
from functools import lru_cache

from config import (
    LOCAL_STORAGE_PATH,
    R2_ACCESS_KEY_ID,
    R2_ACCOUNT_ID,
    R2_BUCKET_NAME,
    R2_SECRET_ACCESS_KEY,
    STORAGE_BACKEND,
    STORAGE_PUBLIC_URL,
)
from storage.base import Storage, StorageError, StorageObjectNotFoundError
from storage.local import LocalStorage


logger = logging.getLogger(__name__)


@lru_cache(maxsize=1)
def get_storage() -> Storage:
    """Dependency returning the configured storage backend (built once)."""
    if STORAGE_BACKEND == "r2":
        from storage.r2 import R2Storage

        storage = R2Storage(
            account_id=R2_ACCOUNT_ID,
            access_key_id=R2_ACCESS_KEY_ID,
            secret_access_key=R2_SECRET_ACCESS_KEY,
            bucket_name=R2_BUCKET_NAME,
            public_base_url=STORAGE_PUBLIC_URL,
        )
    else:
        storage = LocalStorage(LOCAL_STORAGE_PATH, STORAGE_PUBLIC_URL)
    logger.info(
        "Storage backend ready",
        extra={"provider": storage.provider_type, "public_url": storage.public_base_url},
    )
    return storage


__all__ = [
    "LocalStorage",
    "Storage",
    "StorageError",
    "StorageObjectNotFoundError",
    "get_storage",
]
