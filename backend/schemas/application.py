"""Pydantic schemas for application endpoints."""

import re
import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field, field_validator

# Java-style package identifier: at least two dot-separated segments
PACKAGE_NAME_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*(\.[A-Za-z][A-Za-z0-9_]*)+$")


class ApplicationCreateRequest(BaseModel):
    title: str = Field(min_length=3, max_length=100)
    package_name: str = Field(min_length=3, max_length=255)
    description: str = Field(default="", max_length=1000)

    @field_validator("package_name")
    @classmethod
    def validate_package_name(cls, v: str) -> str:
        if not PACKAGE_NAME_PATTERN.match(v):
            raise ValueError("Package name must look like com.example.app")
        return v


class ApplicationFromArtifactRequest(BaseModel):
    """Request schema for creating an application from an uploaded APK."""

    project_id: uuid.UUID
    title: str = Field(min_length=3, max_length=100)
    artifact_url: str = Field(min_length=1, max_length=512)
    description: str = Field(default="", max_length=1000)


class ApplicationUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=100)
    description: Optional[str] = Field(default=None, max_length=1000)


class ApplicationResponse(BaseModel):
    id: uuid.UUID
    title: str
    package_name: str
    description: str
    project_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
