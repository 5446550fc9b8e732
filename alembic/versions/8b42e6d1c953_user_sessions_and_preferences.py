"""user sessions, user preferences, one pending verification per user

Revision ID: 8b42e6d1c953
Revises: 3f1a9c2d7e10
Create Date: 2026-10-20 09:41:07.552918

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '8b42e6d1c953'
down_revision: Union[str, Sequence[str], None] = '3f1a9c2d7e10'
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "user_session",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("user_agent", sa.String(), nullable=True),
        sa.Column("ip_address", sa.String(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("revoked_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_user_session_user_id", "user_session", ["user_id"])

    with op.batch_alter_table("user") as batch_op:
        batch_op.add_column(sa.Column("preferences", sa.JSON(), nullable=True))

    op.create_index(
        "uq_courier_verification_pending_user",
        "courier_verification",
        ["user_id"],
        unique=True,
        sqlite_where=sa.text("status = 'pending'"),
        postgresql_where=sa.text("status = 'pending'"),
    )


def downgrade():
    op.drop_index("uq_courier_verification_pending_user", table_name="courier_verification")

    with op.batch_alter_table("user") as batch_op:
        batch_op.drop_column("preferences")

    op.drop_index("ix_user_session_user_id", table_name="user_session")
    op.drop_table("user_session")
