import os
from pydantic_settings import BaseSettings
from pydantic import Field
import platformdirs

APP_NAME = "SongCatalog"
APP_AUTHOR = "SongCatalogDev"

class Settings(BaseSettings):
    # App Info
    APP_NAME: str = APP_NAME
    APP_AUTHOR: str = APP_AUTHOR
    ENV: str = "prod"

    # Paths
    # デフォルトは platformdirs を使用するが、環境変数 DB_PATH があればそれを優先する
    USER_DATA_DIR: str = Field(default_factory=lambda: platformdirs.user_data_dir(APP_NAME, APP_AUTHOR))
    DB_PATH: str | None = None

    # Network
    HOST: str = "127.0.0.1"
    PORT: int = 8080

    # External lookup (歌詞・リリース日の補完元)
    EXTERNAL_API_URL: str | None = None
    EXTERNAL_API_TIMEOUT: float = 10.0

    # Database connection
    DB_CONNECT_RETRIES: int = 10
    DB_CONNECT_RETRY_DELAY: float = 5.0

    # Logging
    LOG_LEVEL: str = "INFO"
    SONG_CATALOG_LOG_DIR: str | None = None

    class Config:
        env_file = ".env"
        extra = "ignore"

    def model_post_init(self, __context):
        # DB_PATHが未設定ならデフォルト値を設定
        if not self.DB_PATH:
            self.DB_PATH = os.path.join(self.USER_DATA_DIR, "song_catalog.duckdb")

        # ログディレクトリ
        if not self.SONG_CATALOG_LOG_DIR:
            self.SONG_CATALOG_LOG_DIR = os.path.join(self.USER_DATA_DIR, "logs")

        # 末尾のスラッシュは URL 組み立て時に二重になるので落とす
        if self.EXTERNAL_API_URL:
            self.EXTERNAL_API_URL = self.EXTERNAL_API_URL.rstrip("/")

    def setup_environment(self):
        """ロガーが参照する環境変数を設定する"""
        if self.SONG_CATALOG_LOG_DIR:
            os.environ["SONG_CATALOG_LOG_DIR"] = self.SONG_CATALOG_LOG_DIR
        os.environ["SONG_CATALOG_LOG_LEVEL"] = self.LOG_LEVEL

settings = Settings()
