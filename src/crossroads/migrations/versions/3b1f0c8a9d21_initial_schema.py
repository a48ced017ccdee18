"""Initial schema

Revision ID: 3b1f0c8a9d21
Revises:
Create Date: 2021-04-02 19:12:44.103582

"""
import sqlalchemy as sa
from alembic import op

# revision identifiers, used by Alembic.
revision = "3b1f0c8a9d21"
down_revision = None
branch_labels = None
depends_on = None


def upgrade():
    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("discord_id", sa.BigInteger(), nullable=False),
        sa.Column("gw2_id", sa.String(length=100), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_users_discord_id"), "users", ["discord_id"], unique=True)

    op.create_table(
        "roles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=100), nullable=False),
        sa.Column("repr", sa.String(length=16), nullable=False),
        sa.Column("emoji", sa.String(length=100), nullable=False),
        sa.Column("active", sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("repr"),
    )
    op.create_index(op.f("ix_roles_active"), "roles", ["active"], unique=False)

    op.create_table(
        "tiers",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )

    op.create_table(
        "tier_mappings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("tier_id", sa.Integer(), nullable=False),
        sa.Column("discord_role_id", sa.BigInteger(), nullable=False),
        sa.ForeignKeyConstraint(["tier_id"], ["tiers.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("tier_id", "discord_role_id"),
    )
    op.create_index(op.f("ix_tier_mappings_tier_id"), "tier_mappings", ["tier_id"], unique=False)

    op.create_table(
        "trainings",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("date", sa.DateTime(), nullable=False),
        sa.Column("state", sa.Integer(), server_default=sa.text("1"), nullable=False),
        sa.Column("tier_id", sa.Integer(), nullable=True),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["tier_id"], ["tiers.id"], ondelete="SET NULL"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(op.f("ix_trainings_date"), "trainings", ["date"], unique=False)
    op.create_index(op.f("ix_trainings_state"), "trainings", ["state"], unique=False)
    op.create_index(op.f("ix_trainings_tier_id"), "trainings", ["tier_id"], unique=False)

    op.create_table(
        "training_roles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("training_id", sa.Integer(), nullable=False),
        sa.Column("role_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["training_id"], ["trainings.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("training_id", "role_id"),
    )
    op.create_index(
        op.f("ix_training_roles_training_id"),
        "training_roles",
        ["training_id"],
        unique=False,
    )
    op.create_index(op.f("ix_training_roles_role_id"), "training_roles", ["role_id"], unique=False)

    op.create_table(
        "signups",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("user_id", sa.Integer(), nullable=False),
        sa.Column("training_id", sa.Integer(), nullable=False),
        sa.Column(
            "created_at",
            sa.DateTime(),
            server_default=sa.text("CURRENT_TIMESTAMP"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["training_id"], ["trainings.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("user_id", "training_id"),
    )
    op.create_index(op.f("ix_signups_user_id"), "signups", ["user_id"], unique=False)
    op.create_index(op.f("ix_signups_training_id"), "signups", ["training_id"], unique=False)

    op.create_table(
        "signup_roles",
        sa.Column("id", sa.Integer(), autoincrement=True, nullable=False),
        sa.Column("signup_id", sa.Integer(), nullable=False),
        sa.Column("role_id", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["signup_id"], ["signups.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("signup_id", "role_id"),
    )
    op.create_index(op.f("ix_signup_roles_signup_id"), "signup_roles", ["signup_id"], unique=False)
    op.create_index(op.f("ix_signup_roles_role_id"), "signup_roles", ["role_id"], unique=False)

    op.create_table(
        "configs",
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("value", sa.String(length=255), nullable=False),
        sa.PrimaryKeyConstraint("name"),
    )


def downgrade():
    op.drop_table("configs")
    op.drop_index(op.f("ix_signup_roles_role_id"), table_name="signup_roles")
    op.drop_index(op.f("ix_signup_roles_signup_id"), table_name="signup_roles")
    op.drop_table("signup_roles")
    op.drop_index(op.f("ix_signups_training_id"), table_name="signups")
    op.drop_index(op.f("ix_signups_user_id"), table_name="signups")
    op.drop_table("signups")
    op.drop_index(op.f("ix_training_roles_role_id"), table_name="training_roles")
    op.drop_index(op.f("ix_training_roles_training_id"), table_name="training_roles")
    op.drop_table("training_roles")
    op.drop_index(op.f("ix_trainings_tier_id"), table_name="trainings")
    op.drop_index(op.f("ix_trainings_state"), table_name="trainings")
    op.drop_index(op.f("ix_trainings_date"), table_name="trainings")
    op.drop_table("trainings")
    op.drop_index(op.f("ix_tier_mappings_tier_id"), table_name="tier_mappings")
    op.drop_table("tier_mappings")
    op.drop_table("tiers")
    op.drop_index(op.f("ix_roles_active"), table_name="roles")
    op.drop_table("roles")
    op.drop_index(op.f("ix_users_discord_id"), table_name="users")
    op.drop_table("users")
