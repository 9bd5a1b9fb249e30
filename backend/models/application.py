"""Applications are the distributable apps inside a project."""

from sqlalchemy import Column, ForeignKey, String, Text, UniqueConstraint, Uuid

from database import Base
from models.base import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Application(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """An app identified by a globally unique, immutable package name."""

    __tablename__ = "applications"
    __table_args__ = (
        UniqueConstraint("package_name", name="uq_applications_package_name"),
    )

    title = Column(String(256), nullable=False)
    package_name = Column(String(256), nullable=False)
    description = Column(Text, nullable=False, default="")
    project_id = Column(
        Uuid,
        ForeignKey("projects.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
