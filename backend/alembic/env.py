import os
import sys
from logging.config import fileConfig

from alembic import context
from alembic.ddl.impl import DefaultImpl
from sqlalchemy import engine_from_config, pool
from sqlmodel import SQLModel

# alembic コマンドを backend/ 以外から実行しても import できるようにする
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from models import *  # noqa
from infra.database.connection import DATABASE_URL

class DuckDBImpl(DefaultImpl):
    """Alembic に duckdb 方言を認識させる (中身は PostgreSQL 互換の既定実装)"""
    __dialect__ = "duckdb"

config = context.config
config.set_main_option("sqlalchemy.url", DATABASE_URL)

if config.config_file_name is not None:
    # get_logger で作ったロガーを無効化しない
    fileConfig(config.config_file_name, disable_existing_loggers=False)

target_metadata = SQLModel.metadata

def _run(connection) -> None:
    context.configure(connection=connection, target_metadata=target_metadata)
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_offline() -> None:
    context.configure(
        url=config.get_main_option("sqlalchemy.url"),
        target_metadata=target_metadata,
        literal_binds=True,
        dialect_opts={"paramstyle": "named"},
    )
    with context.begin_transaction():
        context.run_migrations()

def run_migrations_online() -> None:
    """
    songs テーブルのマイグレーションを実行する。
    init_db / conftest は DuckDB のファイルロックを避けるため、
    自分の接続を attributes["connection"] で渡してくる。
    """
    injected = config.attributes.get("connection")
    if injected is not None:
        _run(injected)
        return

    # `alembic upgrade head` を直接実行した場合
    connectable = engine_from_config(
        config.get_section(config.config_ini_section, {}),
        prefix="sqlalchemy.",
        poolclass=pool.NullPool,
    )
    with connectable.connect() as connection:
        _run(connection)

if context.is_offline_mode():
    run_migrations_offline()
else:
    run_migrations_online()
