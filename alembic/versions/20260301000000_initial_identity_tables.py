"""Initial identity tables: person, users, user_details, auth_data.

Revision ID: 20260301000000
Revises:
Create Date: 2026-03-01

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

revision: str = "20260301000000"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "person",
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=True),
        sa.Column("first_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("middle_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("last_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("job_title", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("legal_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("short_name", sa.String(length=255), nullable=False, server_default=""),
        sa.Column("phone", sa.String(length=32), nullable=False, server_default=""),
        sa.Column("birthday_at", sa.Date(), nullable=True),
        sa.Column("gender", sa.String(length=16), nullable=False, server_default="UNSET"),
        sa.Column("bio", sa.Text(), nullable=False, server_default=""),
        sa.Column("avatar", sa.String(length=36), nullable=True),
        sa.Column("is_legal_person", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("uid"),
    )
    op.create_index(op.f("ix_person_email"), "person", ["email"], unique=False)

    op.create_table(
        "users",
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("password", sa.String(length=255), nullable=True),
        sa.Column("role", sa.String(length=32), nullable=False, server_default="PRIVATE"),
        sa.Column("system_status", sa.String(length=32), nullable=False, server_default="SUSPENDED"),
        sa.Column("person_uid", sa.String(length=36), nullable=False),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(["person_uid"], ["person.uid"]),
        sa.PrimaryKeyConstraint("uid"),
        sa.UniqueConstraint("person_uid"),
    )
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)

    op.create_table(
        "user_details",
        sa.Column("uid", sa.String(length=36), nullable=False),
        sa.Column("email_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("email_confirmation_code", sa.String(length=128), nullable=True),
        sa.Column("phone_confirmed", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("phone_confirmation_code", sa.String(length=16), nullable=True),
        sa.Column("password_restoration_code", sa.String(length=128), nullable=True),
        sa.Column(
            "password_restoration_code_created_at", sa.DateTime(timezone=True), nullable=True
        ),
        sa.Column("language", sa.String(length=8), nullable=False, server_default="UA"),
        sa.Column(
            "notify_about_new_poll", sa.Boolean(), nullable=False, server_default=sa.false()
        ),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["uid"], ["users.uid"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("uid"),
    )
    op.create_index(
        op.f("ix_user_details_email_confirmation_code"),
        "user_details",
        ["email_confirmation_code"],
        unique=False,
    )
    op.create_index(
        op.f("ix_user_details_password_restoration_code"),
        "user_details",
        ["password_restoration_code"],
        unique=False,
    )

    op.create_table(
        "auth_data",
        sa.Column("uid", sa.String(length=64), nullable=False),
        sa.Column("username", sa.String(length=255), nullable=False),
        sa.Column("refresh_token_hash", sa.String(length=128), nullable=False),
        sa.Column("header_info", sa.JSON(), nullable=False),
        sa.Column("device_token", sa.String(length=512), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("uid"),
    )
    op.create_index(op.f("ix_auth_data_username"), "auth_data", ["username"], unique=False)
    op.create_index(
        op.f("ix_auth_data_device_token"), "auth_data", ["device_token"], unique=False
    )


def downgrade() -> None:
    op.drop_index(op.f("ix_auth_data_device_token"), table_name="auth_data")
    op.drop_index(op.f("ix_auth_data_username"), table_name="auth_data")
    op.drop_table("auth_data")
    op.drop_index(op.f("ix_user_details_password_restoration_code"), table_name="user_details")
    op.drop_index(op.f("ix_user_details_email_confirmation_code"), table_name="user_details")
    op.drop_table("user_details")
    op.drop_index(op.f("ix_users_username"), table_name="users")
    op.drop_table("users")
    op.drop_index(op.f("ix_person_email"), table_name="person")
    op.drop_table("person")
