"""Cloudflare R2 storage through its S3-compatible API."""

from datetime import timedelta
from typing import BinaryIO

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from storage.base import Storage, StorageError, StorageObjectNotFoundError


_MISSING_OBJECT_CODES = {"NoSuchKey", "404", "NotFound"}


class R2Storage(Storage):
    provider_type = "r2"

    def __init__(
        self,
        *,
        account_id: str,
        access_key_id: str,
        secret_access_key: str,
        bucket_name: str,
        public_base_url: str = "",
        client=None,
    ):
        if not bucket_name:
            raise RuntimeError("r2 bucket is required")
        self.account_id = account_id
        self.bucket = bucket_name
        # Without a public domain, fall back to the account endpoint URL
        super().__init__(
            public_base_url
            or f"https://{account_id}.r2.cloudflarestorage.com/{bucket_name}"
        )
        self.client = client or boto3.client(
            "s3",
            endpoint_url=f"https://{account_id}.r2.cloudflarestorage.com",
            aws_access_key_id=access_key_id,
            aws_secret_access_key=secret_access_key,
            region_name="auto",  # R2 uses 'auto' for region
        )

    def generate_upload_url(self, path: str, expires: timedelta) -> str:
        try:
            return self.client.generate_presigned_url(
                "put_object",
                Params={
                    "Bucket": self.bucket,
                    "Key": path,
                    "ContentType": "application/octet-stream",
                },
                ExpiresIn=int(expires.total_seconds()),
            )
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"failed to generate signed URL: {exc}") from exc

    def download(self, path: str) -> BinaryIO:
        try:
            response = self.client.get_object(Bucket=self.bucket, Key=path)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _MISSING_OBJECT_CODES:
                raise StorageObjectNotFoundError(path) from exc
            raise StorageError(f"failed to download object {path}: {exc}") from exc
        except BotoCoreError as exc:
            raise StorageError(f"failed to download object {path}: {exc}") from exc
        return response["Body"]

    def delete(self, path: str) -> None:
        try:
            self.client.delete_object(Bucket=self.bucket, Key=path)
        except (BotoCoreError, ClientError) as exc:
            raise StorageError(f"failed to delete object {path}: {exc}") from exc
