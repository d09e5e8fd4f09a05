"""create location hierarchy

Revision ID: 4c1e7d2a9b30
Revises:
Create Date: 2026-02-15 17:40:26
"""
from alembic import op
import sqlalchemy as sa

revision = "4c1e7d2a9b30"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "locations",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("parent_id", sa.Integer(), sa.ForeignKey("locations.id", ondelete="RESTRICT"), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
    )
    op.create_index("ix_locations_parent_id", "locations", ["parent_id"])

    op.create_table(
        "boxes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("location_id", sa.Integer(), sa.ForeignKey("locations.id", ondelete="RESTRICT"), nullable=False),
    )
    op.create_index("ix_boxes_location_id", "boxes", ["location_id"])

    op.create_table(
        "items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("box_id", sa.Integer(), sa.ForeignKey("boxes.id", ondelete="SET NULL"), nullable=True),
    )
    op.create_index("ix_items_box_id", "items", ["box_id"])


def downgrade() -> None:
    op.drop_index("ix_items_box_id", table_name="items")
    op.drop_table("items")
    op.drop_index("ix_boxes_location_id", table_name="boxes")
    op.drop_table("boxes")
    op.drop_index("ix_locations_parent_id", table_name="locations")
    op.drop_table("locations")
