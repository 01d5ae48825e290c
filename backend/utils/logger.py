import logging
import os
import sys
from logging.handlers import RotatingFileHandler

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
LOG_FILE_NAME = "song_catalog.log"

def _resolve_log_dir() -> str:
    # Settings.setup_environment() (server.py) が SONG_CATALOG_LOG_DIR を設定する。
    # 未設定なら backend/logs に出力
    log_dir = os.environ.get("SONG_CATALOG_LOG_DIR")
    if not log_dir:
        log_dir = os.path.join(os.path.dirname(os.path.dirname(os.path.abspath(__file__))), "logs")
    os.makedirs(log_dir, exist_ok=True)
    return log_dir

def _resolve_level() -> int:
    level_name = os.environ.get("SONG_CATALOG_LOG_LEVEL", "INFO").upper()
    return getattr(logging, level_name, logging.INFO)

LOG_DIR = _resolve_log_dir()

def get_logger(name: str):
    """
    song_catalog.log (10MB x 5世代) とコンソールの両方に出力するロガーを返す。
    同じ name で何度呼んでもハンドラは1組だけ。
    """
    logger = logging.getLogger(name)
    if logger.handlers:
        return logger

    level = _resolve_level()
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    try:
        file_handler = RotatingFileHandler(
            os.path.join(LOG_DIR, LOG_FILE_NAME),
            maxBytes=10*1024*1024,
            backupCount=5,
            encoding='utf-8'
        )
        file_handler.setFormatter(formatter)
        file_handler.setLevel(level)
        logger.addHandler(file_handler)
    except OSError as e:
        # ログディレクトリに書けない場合はコンソールのみ
        print(f"Failed to set up file logging: {e}", file=sys.stderr)

    console_handler = logging.StreamHandler()
    console_handler.setFormatter(formatter)
    console_handler.setLevel(level)
    logger.addHandler(console_handler)

    return logger
