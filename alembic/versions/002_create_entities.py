"""002: create entities table (all entity store tables share it)

Revision ID: 002
Revises: 001
Create Date: 2026-10-18
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE entities (
            table_name      VARCHAR(32)     NOT NULL,
            pk              VARCHAR(128)    NOT NULL,
            sk              VARCHAR(128)    NOT NULL DEFAULT '',
            doc             JSONB           NOT NULL,
            version         BIGINT          NOT NULL DEFAULT 1,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_entities PRIMARY KEY (table_name, pk, sk),
            CONSTRAINT ck_entities_table CHECK (
                table_name IN ('items', 'bids', 'purchases', 'buyers', 'sellers')
            ),
            CONSTRAINT ck_entities_version CHECK (version >= 1)
        );
    """)
    # Listing scans filter items by state
    op.execute(
        "CREATE INDEX idx_entities_item_state ON entities ((doc->>'state')) "
        "WHERE table_name = 'items';"
    )
    op.execute("""
        CREATE TRIGGER trg_entities_updated_at
            BEFORE UPDATE ON entities
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute(
        "COMMENT ON TABLE entities IS "
        "'Entity store rows: one JSONB document per (table, partition key, sort key)';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS entities CASCADE;")
