"""Pydantic schemas for release endpoints."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from models.release import ReleaseEnvironment


class ReleaseCreateRequest(BaseModel):
    title: str = Field(min_length=3, max_length=100)
    version_code: int = Field(ge=1, le=2 ** 31 - 1)
    version_name: str = Field(min_length=1, max_length=256)
    release_note: str = Field(default="", max_length=2000)
    environment: ReleaseEnvironment


class ReleaseWithArtifactRequest(BaseModel):
    """Version fields are read from the APK at artifact_url."""

    artifact_url: str = Field(min_length=1, max_length=512)
    release_note: str = Field(default="", max_length=2000)
    environment: ReleaseEnvironment


class ReleaseUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=100)
    release_note: Optional[str] = Field(default=None, max_length=2000)


class ReleasePromoteRequest(BaseModel):
    environment: ReleaseEnvironment


class ReleaseResponse(BaseModel):
    id: uuid.UUID
    title: str
    version_code: int
    version_name: str
    release_note: str
    environment: ReleaseEnvironment
    application_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
