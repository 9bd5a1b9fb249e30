"""Pydantic schemas for artifact and upload endpoints."""

import re
import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

SHA256_PATTERN = re.compile(r"^[0-9a-fA-F]{64}$")


class UploadURLRequest(BaseModel):
    release_id: uuid.UUID
    filename: str = Field(min_length=1, max_length=255)


class FileUploadURLRequest(BaseModel):
    filename: str = Field(min_length=1, max_length=255)


class UploadURLResponse(BaseModel):
    upload_url: str
    file_url: str
    path: str

    class Config:
        from_attributes = True


class ArtifactCreateRequest(BaseModel):
    release_id: uuid.UUID
    file_url: str = Field(min_length=1, max_length=512)
    sha256: str
    file_size: int = Field(ge=0)
    file_type: str = Field(min_length=1, max_length=256)
    abi: Optional[str] = Field(default=None, max_length=64)

    @field_validator("sha256")
    @classmethod
    def validate_sha256(cls, v: str) -> str:
        if not SHA256_PATTERN.match(v):
            raise ValueError("sha256 must be 64 hexadecimal characters")
        return v.lower()


class ArtifactMetadataRequest(BaseModel):
    artifact_url: str = Field(min_length=1, max_length=512)


class ArtifactResponse(BaseModel):
    id: uuid.UUID
    file_url: str
    sha256: str
    file_size: int
    file_type: str
    abi: Optional[str] = None
    release_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ApplicationMetadataResponse(BaseModel):
    """What an uploaded APK declares about itself."""

    package_name: str
    version_code: int
    version_name: str
    min_sdk_version: int
    target_sdk_version: int
    platform: str
    architecture: str
    native_abis: List[str] = []
    sha256: str
    file_size: int

    class Config:
        from_attributes = True
