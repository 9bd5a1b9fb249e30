"""Projects group applications under a single owner."""

from sqlalchemy import Column, ForeignKey, String, Uuid

from database import Base
from models.base import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class Project(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """Owned by exactly one user at a time; ownership can be transferred."""

    __tablename__ = "projects"

    title = Column(String(255), nullable=False)
    description = Column(String(512), nullable=False, default="")
    owner_id = Column(
        Uuid,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
