"""initial schema: users, orders, order events, chat, verifications, exchange listings

Revision ID: 3f1a9c2d7e10
Revises:
Create Date: 2026-10-19 10:12:41.318204

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f1a9c2d7e10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade():
    op.create_table(
        "user",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=True),
        sa.Column("password", sa.String(), nullable=False),
        sa.Column("role", sa.String(), nullable=False, server_default="user"),
        sa.Column("email_verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_user_email", "user", ["email"], unique=True)

    op.create_table(
        "order",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("restaurant_location", sa.String(), nullable=False),
        sa.Column("restaurant_type", sa.String(), nullable=False),
        sa.Column("delivery_location", sa.String(), nullable=False),
        sa.Column("full_name", sa.String(), nullable=False),
        sa.Column("phone", sa.String(), nullable=False),
        sa.Column("email", sa.String(), nullable=True),
        sa.Column("order_code", sa.String(), nullable=True),
        sa.Column("extra_notes", sa.String(), nullable=True),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("delivery_person_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("delivery_person_name", sa.String(), nullable=True),
        sa.Column("delivery_person_phone", sa.String(), nullable=True),
        sa.Column("confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("delivered_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_order_user_id", "order", ["user_id"])
    op.create_index("ix_order_status", "order", ["status"])
    op.create_index("ix_order_restaurant_location", "order", ["restaurant_location"])
    op.create_index("ix_order_delivery_person_id", "order", ["delivery_person_id"])
    op.create_index("ix_order_created_at", "order", ["created_at"])

    op.create_table(
        "order_event",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("order_id", sa.String(), sa.ForeignKey("order.id"), nullable=False),
        sa.Column("event_type", sa.String(), nullable=False),
        sa.Column("label", sa.String(), nullable=False),
        sa.Column("meta", sa.JSON(), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("created_by", sa.String(), nullable=False, server_default="system"),
    )
    op.create_index("ix_order_event_order_id", "order_event", ["order_id"])
    op.create_index("ix_order_event_event_type", "order_event", ["event_type"])

    op.create_table(
        "chat_message",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("order_id", sa.String(), sa.ForeignKey("order.id"), nullable=False),
        sa.Column("sender_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("sender_name", sa.String(), nullable=False),
        sa.Column("sender_role", sa.String(), nullable=False),
        sa.Column("message", sa.String(), nullable=False),
        sa.Column("read", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_chat_message_order_id", "chat_message", ["order_id"])

    op.create_table(
        "courier_verification",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("user_name", sa.String(), nullable=False),
        sa.Column("user_email", sa.String(), nullable=False),
        sa.Column("student_card_file_id", sa.String(), nullable=False),
        sa.Column("selfie_file_id", sa.String(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="pending"),
        sa.Column("submitted_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("reviewed_by", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("review_notes", sa.String(), nullable=True),
    )
    op.create_index("ix_courier_verification_user_id", "courier_verification", ["user_id"])
    op.create_index("ix_courier_verification_status", "courier_verification", ["status"])
    op.create_index("ix_courier_verification_submitted_at", "courier_verification", ["submitted_at"])

    op.create_table(
        "exchange_listing",
        sa.Column("id", sa.String(), primary_key=True),
        sa.Column("user_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("user_name", sa.String(), nullable=False),
        sa.Column("user_card_number", sa.String(), nullable=False),
        sa.Column("item_type", sa.String(), nullable=False, server_default="code"),
        sa.Column("item_name", sa.String(), nullable=False),
        sa.Column("description", sa.String(), nullable=False, server_default=""),
        sa.Column("price", sa.Integer(), nullable=False),
        sa.Column("status", sa.String(), nullable=False, server_default="active"),
        sa.Column("buyer_id", sa.Integer(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("flag_count", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("flag_reasons", sa.JSON(), nullable=True),
        sa.Column("code_value", sa.String(), nullable=False),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("payment_confirmed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index("ix_exchange_listing_user_id", "exchange_listing", ["user_id"])
    op.create_index("ix_exchange_listing_status", "exchange_listing", ["status"])
    op.create_index("ix_exchange_listing_buyer_id", "exchange_listing", ["buyer_id"])
    op.create_index("ix_exchange_listing_expires_at", "exchange_listing", ["expires_at"])
    op.create_index("ix_exchange_listing_created_at", "exchange_listing", ["created_at"])


def downgrade():
    op.drop_table("exchange_listing")
    op.drop_table("courier_verification")
    op.drop_table("chat_message")
    op.drop_table("order_event")
    op.drop_table("order")
    op.drop_table("user")
