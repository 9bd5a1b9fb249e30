"""Versioned releases of an application, one row per environment."""

import enum

from sqlalchemy import Column, Enum, ForeignKey, Index, Integer, String, Text, UniqueConstraint, Uuid

from database import Base
from models.base import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class ReleaseEnvironment(str, enum.Enum):
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class ApplicationRelease(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """A version of an application targeted at one environment."""

    __tablename__ = "application_releases"
    __table_args__ = (
        UniqueConstraint(
            "application_id",
            "version_code",
            "environment",
            name="uq_application_releases_version",
        ),
        Index("ix_application_releases_latest", "application_id", "environment", "version_code"),
    )

    title = Column(String(256), nullable=False)
    version_code = Column(Integer, nullable=False)
    version_name = Column(String(256), nullable=False)
    release_note = Column(Text, nullable=False, default="")
    environment = Column(
        Enum(
            ReleaseEnvironment,
            name="release_environment",
            values_callable=lambda members: [member.value for member in members],
        ),
        nullable=False,
        default=ReleaseEnvironment.DEVELOPMENT,
    )
    application_id = Column(
        Uuid,
        ForeignKey("applications.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
