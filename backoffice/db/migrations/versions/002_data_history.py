"""Create data_history table and change tracking trigger function.

Revision ID: 002
Revises: 001
Create Date: 2025-10-02

Tables: data_history
Functions: track_data_changes()

Tracking is switched on per table by creating
``track_<table>_changes`` triggers that execute track_data_changes().
"""

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects.postgresql import JSONB

revision = "002"
down_revision = "001"
branch_labels = None
depends_on = None


TRACK_FUNCTION = """
CREATE OR REPLACE FUNCTION track_data_changes() RETURNS TRIGGER AS $$
DECLARE
    old_json JSONB;
    new_json JSONB;
    fields TEXT[];
    actor TEXT;
    rec_id TEXT;
BEGIN
    actor := NULLIF(current_setting('app.current_user_id', true), '');

    IF TG_OP = 'INSERT' THEN
        new_json := to_jsonb(NEW);
        rec_id := NEW.id::TEXT;
        SELECT array_agg(k ORDER BY k) INTO fields FROM jsonb_object_keys(new_json) AS k;
    ELSIF TG_OP = 'UPDATE' THEN
        old_json := to_jsonb(OLD);
        new_json := to_jsonb(NEW);
        rec_id := NEW.id::TEXT;
        SELECT array_agg(k ORDER BY k) INTO fields
        FROM (
            SELECT jsonb_object_keys(old_json) AS k
            UNION
            SELECT jsonb_object_keys(new_json)
        ) keys
        WHERE old_json -> k IS DISTINCT FROM new_json -> k;
    ELSE
        old_json := to_jsonb(OLD);
        rec_id := OLD.id::TEXT;
        SELECT array_agg(k ORDER BY k) INTO fields FROM jsonb_object_keys(old_json) AS k;
    END IF;

    INSERT INTO data_history (
        table_name, record_id, action, old_data, new_data, changed_fields, changed_by
    ) VALUES (
        TG_TABLE_NAME, rec_id, lower(TG_OP), old_json, new_json,
        COALESCE(fields, ARRAY[]::TEXT[]), actor
    );

    RETURN COALESCE(NEW, OLD);
END;
$$ LANGUAGE plpgsql;
"""


def upgrade() -> None:
    """Create data_history table and trigger function."""
    op.create_table(
        "data_history",
        sa.Column("id", sa.BigInteger, primary_key=True, autoincrement=True),
        sa.Column("table_name", sa.String(100), nullable=False),
        sa.Column("record_id", sa.String(100), nullable=False),
        sa.Column("action", sa.String(10), nullable=False),
        sa.Column("old_data", JSONB),
        sa.Column("new_data", JSONB),
        sa.Column("changed_fields", sa.ARRAY(sa.Text), nullable=False, server_default="{}"),
        sa.Column("changed_by", sa.String(255)),
        sa.Column("changed_at", sa.TIMESTAMP(timezone=True), server_default=sa.text("NOW()")),
        sa.CheckConstraint(
            "action IN ('insert', 'update', 'delete')",
            name="chk_data_history_action",
        ),
        sa.CheckConstraint(
            "old_data IS NOT NULL OR new_data IS NOT NULL",
            name="chk_data_history_has_data",
        ),
    )
    op.create_index("idx_data_history_record", "data_history", ["table_name", "record_id"])
    op.create_index("idx_data_history_changed_at", "data_history", ["changed_at"])
    op.execute(TRACK_FUNCTION)


def downgrade() -> None:
    """Drop trigger function and data_history table."""
    op.execute("DROP FUNCTION IF EXISTS track_data_changes() CASCADE")
    op.drop_index("idx_data_history_changed_at", table_name="data_history")
    op.drop_index("idx_data_history_record", table_name="data_history")
    op.drop_table("data_history")
