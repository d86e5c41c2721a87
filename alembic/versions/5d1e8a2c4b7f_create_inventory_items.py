"""create_inventory_items

Revision ID: 5d1e8a2c4b7f
Revises:
Create Date: 2026-01-20 23:07:37.000000
"""

from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '5d1e8a2c4b7f'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade schema."""

    op.create_table(
        "inventory_items",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("item_name", sa.String(), nullable=False),
        sa.Column("selling_price", sa.Double(), nullable=False),
        sa.Column("current_quantity", sa.Integer(), nullable=False),
        sa.Column("unit_type", sa.String(), nullable=True),
        sa.Column("expiry_date", sa.Date(), nullable=True),
        sa.Column("status", sa.String(), nullable=False, server_default="not yet"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.CheckConstraint("selling_price >= 0", name="ck_inventory_items_price_non_negative"),
        sa.CheckConstraint("current_quantity >= 0", name="ck_inventory_items_quantity_non_negative"),
    )

    op.create_index("ix_inventory_items_id", "inventory_items", ["id"], unique=False)
    op.create_index("ix_inventory_items_item_name", "inventory_items", ["item_name"], unique=False)


def downgrade() -> None:
    """Downgrade schema."""

    op.drop_index("ix_inventory_items_item_name", table_name="inventory_items")
    op.drop_index("ix_inventory_items_id", table_name="inventory_items")
    op.drop_table("inventory_items")
