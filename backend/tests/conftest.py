import os
import pytest
import sys
import tempfile
import uuid
from typing import Generator
from sqlmodel import Session, create_engine
from alembic.config import Config
from alembic import command

# 1. パス解決: backendディレクトリをsys.pathに追加
CURRENT_DIR = os.path.dirname(os.path.abspath(__file__))
BACKEND_DIR = os.path.dirname(CURRENT_DIR)
if BACKEND_DIR not in sys.path:
    sys.path.insert(0, BACKEND_DIR)

# アプリのモジュールを読み込む前に、DB・ログの出力先をテスト用ディレクトリへ向ける
TEST_ROOT = os.path.join(tempfile.gettempdir(), "song_catalog_tests")
os.environ.setdefault("DB_PATH", os.path.join(TEST_ROOT, "default.duckdb"))
os.environ.setdefault("SONG_CATALOG_LOG_DIR", os.path.join(TEST_ROOT, "logs"))
os.environ.pop("EXTERNAL_API_URL", None)

import infra.database.connection as db_connection
from infra.database.schema import init_raw_db
from app.services.enrichment_service import SongEnricher

@pytest.fixture(name="engine", scope="function")
def engine_fixture(mocker):
    """
    テストごとに完全に独立したDB環境（物理ファイル）を構築する。
    DuckDBの接続競合を避けるため、単一のエンジンを Alembic と共有します。
    """
    # ユニークなDBファイルパスを生成
    unique_id = str(uuid.uuid4())
    test_db_path = os.path.join(tempfile.gettempdir(), f"song_catalog_test_{unique_id}.duckdb")

    # テスト用エンジンの作成 (設定を固定)
    connect_args = {'config': {'worker_threads': 4, 'access_mode': 'READ_WRITE'}}
    engine = create_engine(
        f"duckdb:///{test_db_path}",
        connect_args=connect_args
    )

    # アプリケーション全体で使用されるエンジングローバル変数をテスト用に差し替え
    mocker.patch.object(db_connection, "engine", engine)
    mocker.patch.object(db_connection, "DB_PATH", test_db_path)
    mocker.patch.object(db_connection, "DATABASE_URL", f"duckdb:///{test_db_path}")

    # 1. Raw SQLでテーブルとシーケンスを直接作成
    init_raw_db(engine)

    # 2. Alembicにテスト用エンジンを注入して stamp を実行
    alembic_ini_path = os.path.join(BACKEND_DIR, "alembic.ini")
    alembic_cfg = Config(alembic_ini_path)
    alembic_cfg.set_main_option("script_location", os.path.join(BACKEND_DIR, "alembic"))

    with engine.begin() as connection:
        alembic_cfg.attributes["connection"] = connection
        command.stamp(alembic_cfg, "head")

    yield engine

    # テスト終了後のクリーンアップ
    engine.dispose()
    if os.path.exists(test_db_path):
        try:
            os.remove(test_db_path)
        except OSError:
            pass

@pytest.fixture(name="session", scope="function")
def session_fixture(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session

class StubEnricher(SongEnricher):
    """外部 API を呼ばない SongEnricher。base_url 無しなので常にプレースホルダーを返す"""
    def __init__(self):
        super().__init__(None)
        self.calls = []

    async def enrich(self, group: str, title: str):
        self.calls.append((group, title))
        return await super().enrich(group, title)

@pytest.fixture(name="enricher")
def enricher_fixture() -> StubEnricher:
    return StubEnricher()

@pytest.fixture(name="client")
def client_fixture(session: Session, enricher: StubEnricher, mocker) -> Generator:
    """FastAPIのTestClientを提供し、DBセッションと外部APIをDIで差し替える"""
    from fastapi.testclient import TestClient
    from main import app
    from infra.database.connection import get_session
    from app.services.enrichment_service import get_song_enricher

    # アプリ起動時の init_db / close_db がテスト用DBと競合しないようモック化
    mocker.patch("main.init_db")
    mocker.patch("main.close_db")

    def get_session_override():
        return session

    app.dependency_overrides[get_session] = get_session_override
    app.dependency_overrides[get_song_enricher] = lambda: enricher
    with TestClient(app) as client:
        yield client
    app.dependency_overrides.clear()
