# Database module
from .connection import engine, get_session, init_db, close_db, wait_for_database, db_lock, DB_PATH, DATABASE_URL
from .schema import init_raw_db, reset_songs_table
