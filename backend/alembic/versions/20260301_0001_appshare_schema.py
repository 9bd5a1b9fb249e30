"""Initial AppShare schema: users, projects, applications, releases, artifacts."""

from alembic import op
import sqlalchemy as sa


revision = "20260301_0001"
down_revision = None
branch_labels = None
depends_on = None


release_environment = sa.Enum(
    "development", "staging", "production", name="release_environment"
)


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("updated_at", sa.DateTime(), server_default=sa.text("CURRENT_TIMESTAMP"), nullable=False),
        sa.Column("deleted_at", sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("username", sa.String(length=64), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("is_active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column("token_version", sa.Integer(), server_default="1", nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("email", name="uq_users_email"),
        sa.UniqueConstraint("username", name="uq_users_username"),
    )
    op.create_index("ix_users_email", "users", ["email"])
    op.create_index("ix_users_username", "users", ["username"])

    op.create_table(
        "projects",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.String(length=512), server_default="", nullable=False),
        sa.Column("owner_id", sa.Uuid(), sa.ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_projects_owner_id", "projects", ["owner_id"])

    op.create_table(
        "applications",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(length=256), nullable=False),
        sa.Column("package_name", sa.String(length=256), nullable=False),
        sa.Column("description", sa.Text(), server_default="", nullable=False),
        sa.Column("project_id", sa.Uuid(), sa.ForeignKey("projects.id", ondelete="CASCADE"), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("package_name", name="uq_applications_package_name"),
    )
    op.create_index("ix_applications_project_id", "applications", ["project_id"])

    op.create_table(
        "application_releases",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("title", sa.String(length=256), nullable=False),
        sa.Column("version_code", sa.Integer(), nullable=False),
        sa.Column("version_name", sa.String(length=256), nullable=False),
        sa.Column("release_note", sa.Text(), server_default="", nullable=False),
        sa.Column("environment", release_environment, nullable=False),
        sa.Column(
            "application_id",
            sa.Uuid(),
            sa.ForeignKey("applications.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint(
            "application_id",
            "version_code",
            "environment",
            name="uq_application_releases_version",
        ),
    )
    op.create_index("ix_application_releases_application_id", "application_releases", ["application_id"])
    # Latest-release lookups filter by environment and sort by version code
    op.create_index(
        "ix_application_releases_latest",
        "application_releases",
        ["application_id", "environment", "version_code"],
    )

    op.create_table(
        "artifacts",
        sa.Column("id", sa.Uuid(), primary_key=True),
        sa.Column("file_url", sa.String(length=512), nullable=False),
        sa.Column("sha256", sa.String(length=64), nullable=False),
        sa.Column("file_size", sa.BigInteger(), nullable=False),
        sa.Column("file_type", sa.String(length=256), nullable=False),
        sa.Column("abi", sa.String(length=64), nullable=True),
        sa.Column(
            "release_id",
            sa.Uuid(),
            sa.ForeignKey("application_releases.id", ondelete="CASCADE"),
            nullable=False,
        ),
        *_timestamps(),
        sa.UniqueConstraint("release_id", "abi", name="uq_artifacts_release_abi"),
    )
    op.create_index("ix_artifacts_release_id", "artifacts", ["release_id"])
    op.create_index(
        "uq_artifacts_release_universal",
        "artifacts",
        ["release_id"],
        unique=True,
        postgresql_where=sa.text("abi IS NULL"),
        sqlite_where=sa.text("abi IS NULL"),
    )


def downgrade() -> None:
    op.drop_index("uq_artifacts_release_universal", table_name="artifacts")
    op.drop_index("ix_artifacts_release_id", table_name="artifacts")
    op.drop_table("artifacts")

    op.drop_index("ix_application_releases_latest", table_name="application_releases")
    op.drop_index("ix_application_releases_application_id", table_name="application_releases")
    op.drop_table("application_releases")
    release_environment.drop(op.get_bind(), checkfirst=True)

    op.drop_index("ix_applications_project_id", table_name="applications")
    op.drop_table("applications")

    op.drop_index("ix_projects_owner_id", table_name="projects")
    op.drop_table("projects")

    op.drop_index("ix_users_username", table_name="users")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
