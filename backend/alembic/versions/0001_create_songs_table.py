"""create songs table

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
from sqlalchemy import text

from infra.database.schema import SONGS_SEQUENCE_SQL, SONGS_TABLE_SQL

revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

def upgrade() -> None:
    # init_raw_db で作成済みの場合は何もしない (IF NOT EXISTS)
    op.execute(text(SONGS_SEQUENCE_SQL.rstrip().rstrip(";")))
    op.execute(text(SONGS_TABLE_SQL.strip().rstrip(";")))

def downgrade() -> None:
    op.execute(text("DROP TABLE IF EXISTS songs"))
    op.execute(text("DROP SEQUENCE IF EXISTS seq_songs_id"))
