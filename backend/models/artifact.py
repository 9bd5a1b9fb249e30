"""Binary files attached to releases."""

from sqlalchemy import BigInteger, Column, ForeignKey, Index, String, UniqueConstraint, Uuid, text

from database import Base
from models.base import SoftDeleteMixin, TimestampMixin, UUIDPrimaryKeyMixin

APK_MIME_TYPE = "application/vnd.android.package-archive"


class Artifact(UUIDPrimaryKeyMixin, TimestampMixin, SoftDeleteMixin, Base):
    """One binary per (release, ABI); a null ABI is the universal build."""

    __tablename__ = "artifacts"
    __table_args__ = (
        UniqueConstraint("release_id", "abi", name="uq_artifacts_release_abi"),
        # NULLs are distinct in unique constraints, so the universal build
        # needs its own partial index to stay unique per release.
        Index(
            "uq_artifacts_release_universal",
            "release_id",
            unique=True,
            postgresql_where=text("abi IS NULL"),
            sqlite_where=text("abi IS NULL"),
        ),
    )

    file_url = Column(String(512), nullable=False)
    sha256 = Column(String(64), nullable=False)
    file_size = Column(BigInteger, nullable=False)
    file_type = Column(String(256), nullable=False)
    abi = Column(String(64), nullable=True)  # e.g. arm64-v8a, x86_64
    release_id = Column(
        Uuid,
        ForeignKey("application_releases.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
