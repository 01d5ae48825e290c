from sqlalchemy import text
from sqlalchemy.engine import Connection, Engine
from utils.logger import get_logger

logger = get_logger(__name__)

# 現在のスキーマバージョン
CURRENT_SCHEMA_VERSION = 1

SONGS_SEQUENCE_SQL = "CREATE SEQUENCE IF NOT EXISTS seq_songs_id START 1;"

SONGS_TABLE_SQL = """
    CREATE TABLE IF NOT EXISTS songs (
        id INTEGER PRIMARY KEY DEFAULT nextval('seq_songs_id'),
        group_name VARCHAR(255) NOT NULL,
        title VARCHAR(255) NOT NULL,
        release_date VARCHAR(10) DEFAULT '',
        text VARCHAR DEFAULT '',
        link VARCHAR(255) DEFAULT '',
        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
        updated_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
    );
"""

def get_db_schema_sql() -> str:
    """
    DuckDB には SERIAL が無いため、ID はシーケンスの nextval で採番する。
    インデックス付きの列を UPDATE すると DuckDB では制約エラーになりやすいため、
    二次インデックスは作らない (部分一致検索ではどのみち使われない)。
    """
    return f"""
    {SONGS_SEQUENCE_SQL}

    {SONGS_TABLE_SQL}

    CREATE TABLE IF NOT EXISTS schema_info (
        key VARCHAR PRIMARY KEY,
        value VARCHAR NOT NULL
    );
    """

def _split_statements(sql: str):
    return [s.strip() for s in sql.split(';') if s.strip()]

def get_current_schema_version(conn) -> int:
    try:
        result = conn.execute(text("SELECT value FROM schema_info WHERE key = 'version'"))
        row = result.fetchone()
        return int(row[0]) if row else 0
    except Exception: return 0

def set_schema_version(conn, version: int):
    conn.execute(text("""
        INSERT INTO schema_info (key, value) VALUES ('version', :version)
        ON CONFLICT (key) DO UPDATE SET value = :version
    """), {"version": str(version)})

def apply_schema(conn: Connection):
    for stmt in _split_statements(get_db_schema_sql()):
        conn.execute(text(stmt))

def init_raw_db(conn_engine: Engine):
    logger.info("Initializing DuckDB schema...")
    try:
        with conn_engine.begin() as conn:
            apply_schema(conn)

            current_version = get_current_schema_version(conn)
            if current_version < CURRENT_SCHEMA_VERSION:
                set_schema_version(conn, CURRENT_SCHEMA_VERSION)
    except Exception as e:
        logger.error(f"Failed to initialize database schema: {e}")
        raise e

def reset_songs_table(conn):
    """
    songs テーブルを空にし、ID 採番を 1 から振り直す。
    DuckDB は ALTER SEQUENCE ... RESTART に対応しておらず、
    テーブルが参照しているシーケンスは置き換えられないため、
    テーブルごと作り直す。
    """
    statements = [
        "DROP TABLE IF EXISTS songs",
        "DROP SEQUENCE IF EXISTS seq_songs_id",
    ]
    statements += _split_statements(get_db_schema_sql())
    for stmt in statements:
        conn.execute(text(stmt))
