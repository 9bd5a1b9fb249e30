"""Pydantic schemas for project endpoints."""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class ProjectCreateRequest(BaseModel):
    title: str = Field(min_length=3, max_length=255)
    description: str = Field(default="", max_length=512)


class ProjectUpdateRequest(BaseModel):
    title: Optional[str] = Field(default=None, min_length=3, max_length=255)
    description: Optional[str] = Field(default=None, max_length=512)


class ProjectTransferRequest(BaseModel):
    new_owner_id: uuid.UUID


class ProjectResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: str
    owner_id: uuid.UUID
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
