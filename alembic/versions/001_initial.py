"""Create accounts, listings and profile_unlocks.

App startup also runs Base.metadata.create_all, so every table is only
created here when it does not exist yet (safe on repeated deploys).

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _has_table(name: str) -> bool:
    return sa.inspect(op.get_bind()).has_table(name)


def upgrade() -> None:
    if not _has_table("accounts"):
        op.create_table(
            "accounts",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("father_name", sa.String(), nullable=True),
            sa.Column("email", sa.String(), nullable=False),
            sa.Column("phone", sa.String(), nullable=False),
            sa.Column("hashed_password", sa.String(), nullable=False),
            sa.Column("role", sa.Enum("USER", "ADMIN", name="account_role"), nullable=False),
            sa.Column("age", sa.Integer(), nullable=True),
            sa.Column("gender", sa.Enum("MALE", "FEMALE", name="account_gender"), nullable=False),
            sa.Column("city", sa.String(), nullable=True),
            sa.Column("caste", sa.String(), nullable=True),
            sa.Column("sect", sa.String(), nullable=True),
            sa.Column("religion", sa.String(), nullable=True),
            sa.Column("nationality", sa.String(), nullable=True),
            sa.Column("mother_tongue", sa.String(), nullable=True),
            sa.Column("height", sa.String(), nullable=True),
            sa.Column("weight", sa.String(), nullable=True),
            sa.Column("marital_status", sa.String(), nullable=True),
            sa.Column("disability", sa.String(), nullable=True),
            sa.Column("education", sa.String(), nullable=True),
            sa.Column("occupation", sa.String(), nullable=True),
            sa.Column("income", sa.String(), nullable=True),
            sa.Column("house_type", sa.String(), nullable=True),
            sa.Column("house_size", sa.String(), nullable=True),
            sa.Column("about", sa.Text(), nullable=True),
            sa.Column("requirements", sa.Text(), nullable=True),
            sa.Column("family_details", sa.Text(), nullable=True),
            sa.Column(
                "package",
                sa.Enum("STANDARD", "BASIC", "GOLD", "DIAMOND", name="package_tier"),
                nullable=False,
            ),
            sa.Column("price", sa.String(), nullable=True),
            sa.Column("payment_screenshot", sa.String(), nullable=True),
            sa.Column("package_expiry", sa.DateTime(), nullable=True),
            sa.Column("credits", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("viewed_count", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("images", sa.JSON(), nullable=False),
            sa.Column("main_image", sa.String(), nullable=True),
            sa.Column("is_approved", sa.Boolean(), nullable=False, server_default=sa.false()),
            sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
            sa.Column("created_at", sa.DateTime(), nullable=False),
            sa.Column("updated_at", sa.DateTime(), nullable=True),
            sa.CheckConstraint("credits >= 0", name="ck_accounts_credits_non_negative"),
        )
        op.create_index("ix_accounts_id", "accounts", ["id"])
        op.create_index("ix_accounts_email", "accounts", ["email"], unique=True)
        op.create_index("ix_accounts_gender", "accounts", ["gender"])
        op.create_index("ix_accounts_is_approved", "accounts", ["is_approved"])
        op.create_index("ix_accounts_created_at", "accounts", ["created_at"])

    if not _has_table("listings"):
        op.create_table(
            "listings",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "account_id",
                sa.Integer(),
                sa.ForeignKey("accounts.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("title", sa.String(), nullable=True),
            sa.Column("name", sa.String(), nullable=False),
            sa.Column("father_name", sa.String(), nullable=True),
            sa.Column("phone", sa.String(), nullable=True),
            sa.Column("age", sa.Integer(), nullable=True),
            sa.Column("gender", sa.Enum("MALE", "FEMALE", name="listing_gender"), nullable=False),
            sa.Column("city", sa.String(), nullable=True),
            sa.Column("caste", sa.String(), nullable=True),
            sa.Column("sect", sa.String(), nullable=True),
            sa.Column("religion", sa.String(), nullable=True),
            sa.Column("nationality", sa.String(), nullable=True),
            sa.Column("height", sa.String(), nullable=True),
            sa.Column("weight", sa.String(), nullable=True),
            sa.Column("marital_status", sa.String(), nullable=True),
            sa.Column("education", sa.String(), nullable=True),
            sa.Column("profession", sa.String(), nullable=True),
            sa.Column("monthly_income", sa.String(), nullable=True),
            sa.Column("mother_tongue", sa.String(), nullable=True),
            sa.Column("disability", sa.String(), nullable=True),
            sa.Column("house_type", sa.String(), nullable=True),
            sa.Column("house_size", sa.String(), nullable=True),
            sa.Column("requirements", sa.Text(), nullable=True),
            sa.Column("about", sa.Text(), nullable=True),
            sa.Column("family_details", sa.Text(), nullable=True),
            sa.Column("main_image", sa.String(), nullable=True),
            sa.Column("gallery", sa.JSON(), nullable=False),
            sa.Column("created_at", sa.DateTime(), nullable=False),
        )
        op.create_index("ix_listings_id", "listings", ["id"])
        # One listing per account; a repeated approval fails on this index
        op.create_index("ix_listings_account_id", "listings", ["account_id"], unique=True)
        op.create_index("ix_listings_gender", "listings", ["gender"])
        op.create_index("ix_listings_created_at", "listings", ["created_at"])

    if not _has_table("profile_unlocks"):
        op.create_table(
            "profile_unlocks",
            sa.Column("id", sa.Integer(), primary_key=True),
            sa.Column(
                "account_id",
                sa.Integer(),
                sa.ForeignKey("accounts.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column(
                "listing_id",
                sa.Integer(),
                sa.ForeignKey("listings.id", ondelete="CASCADE"),
                nullable=False,
            ),
            sa.Column("credits_spent", sa.Integer(), nullable=False, server_default="0"),
            sa.Column("unlocked_at", sa.DateTime(), nullable=False),
            sa.UniqueConstraint("account_id", "listing_id", name="uq_profile_unlocks_account_listing"),
        )
        op.create_index("ix_profile_unlocks_id", "profile_unlocks", ["id"])
        op.create_index("ix_profile_unlocks_account_id", "profile_unlocks", ["account_id"])
        op.create_index("ix_profile_unlocks_listing_id", "profile_unlocks", ["listing_id"])


def downgrade() -> None:
    op.drop_table("profile_unlocks")
    op.drop_table("listings")
    op.drop_table("accounts")
    sa.Enum(name="listing_gender").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="package_tier").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="account_gender").drop(op.get_bind(), checkfirst=True)
    sa.Enum(name="account_role").drop(op.get_bind(), checkfirst=True)
