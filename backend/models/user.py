"""Account records for API users."""

from sqlalchemy import Boolean, Column, Integer, String, UniqueConstraint

from database import Base
from models.base import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin


class User(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """A person who can own projects."""

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("username", name="uq_users_username"),
    )

    email = Column(String(255), nullable=False, index=True)
    username = Column(String(64), nullable=False, index=True)
    hashed_password = Column(String(255), nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    # Bumped to invalidate every issued token at once
    token_version = Column(Integer, default=1, nullable=False)
