"""Create key/value settings table.

Revision ID: 001
Revises:
Create Date: 2025-10-02

Tables: settings
"""

import sqlalchemy as sa
from alembic import op

revision = "001"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    """Create settings table."""
    op.create_table(
        "settings",
        sa.Column("id", sa.Integer, primary_key=True, autoincrement=True),
        sa.Column("key", sa.String(100), nullable=False),
        sa.Column("value", sa.Text),
        sa.Column("category", sa.String(50), nullable=False, server_default="general"),
        sa.Column("data_type", sa.String(20), nullable=False, server_default="string"),
        sa.Column("description", sa.Text),
        sa.Column("created_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.Column("updated_by", sa.String(255)),
        sa.UniqueConstraint("key", name="uq_settings_key"),
        sa.CheckConstraint(
            "data_type IN ('string', 'boolean', 'number', 'json', 'array')",
            name="chk_settings_data_type",
        ),
    )
    op.create_index("idx_settings_category", "settings", ["category"])


def downgrade() -> None:
    """Drop settings table."""
    op.drop_index("idx_settings_category", table_name="settings")
    op.drop_table("settings")
