from sqlmodel import create_engine, Session, text
from sqlalchemy.exc import OperationalError
import os
import threading
import time
from config import settings
from infra.database.schema import init_raw_db
from utils.logger import get_logger

logger = get_logger(__name__)

# DBパス設定
DB_PATH = settings.DB_PATH
os.makedirs(os.path.dirname(DB_PATH), exist_ok=True)

DATABASE_URL = f"duckdb:///{DB_PATH}"

# エンジン初期化 (設定を固定)
connect_args = {'config': {'worker_threads': 4, 'access_mode': 'READ_WRITE'}}
engine = create_engine(
    DATABASE_URL,
    pool_size=5,
    max_overflow=10,
    connect_args=connect_args
)

db_lock = threading.RLock()

def wait_for_database(conn_engine=None, retries: int = None, delay: float = None):
    """
    DBに接続できるまで待つ。
    別プロセスがDuckDBファイルをロックしている間は接続に失敗するため、
    一定回数リトライしてから諦める。
    """
    conn_engine = conn_engine or engine
    retries = retries if retries is not None else settings.DB_CONNECT_RETRIES
    delay = delay if delay is not None else settings.DB_CONNECT_RETRY_DELAY

    last_error = None
    for attempt in range(1, max(retries, 1) + 1):
        try:
            with conn_engine.connect() as conn:
                conn.execute(text("SELECT 1"))
            logger.info("Successfully connected to database")
            return
        except OperationalError as e:
            last_error = e
            logger.warning(f"Failed to connect to database (attempt {attempt}/{retries}): {e}")
            if attempt < retries:
                time.sleep(delay)

    logger.error("Failed to connect to database after retries")
    raise last_error

def init_db():
    """
    アプリケーション起動時のDB初期化フロー。
    DuckDBの接続競合を避けるため、単一のコネクションを Alembic と共有します。
    """
    from alembic.config import Config
    from alembic import command

    # DBが新規作成かどうかを事前にチェック
    is_new_db = not os.path.exists(DB_PATH) or os.path.getsize(DB_PATH) == 0

    with db_lock:
        try:
            wait_for_database(engine)

            # 1. Raw SQL によるテーブルとシーケンスの作成
            init_raw_db(engine)

            # 2. Alembicマイグレーションの実行
            base_dir = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
            alembic_ini_path = os.path.join(base_dir, "alembic.ini")
            alembic_cfg = Config(alembic_ini_path)
            alembic_cfg.set_main_option("script_location", os.path.join(base_dir, "alembic"))

            # DuckDBのロックエラーを避けるため、既存のコネクションをAlembicに渡す
            with engine.begin() as connection:
                alembic_cfg.attributes["connection"] = connection

                if is_new_db:
                    # 新規DBなら現在のバージョンをスタンプ
                    logger.info("New database detected. Stamping version...")
                    command.stamp(alembic_cfg, "head")
                else:
                    # 既存DBなら差分を適用
                    logger.info("Existing database detected. Running migrations...")
                    command.upgrade(alembic_cfg, "head")

        except Exception as e:
            logger.error(f"Error during database initialization: {e}")
            raise e

def close_db():
    """
    データベース接続を終了する。
    main.py の lifespan イベントから呼び出されます。
    """
    engine.dispose()

def get_session():
    with Session(engine) as session:
        yield session
