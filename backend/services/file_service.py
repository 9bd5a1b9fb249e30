"""Generic file uploads not tied to a release."""

from services.artifact_service import UploadURL, signed_upload, timestamped_name
from storage.base import Storage


class FileService:
    def __init__(self, storage: Storage):
        self.storage = storage

    def get_upload_url(self, *, user_id, filename: str) -> UploadURL:
        storage_path = f"uploads/{user_id}/{timestamped_name(filename)}"
        return signed_upload(self.storage, storage_path)
