from typing import List, Optional, Dict, Any
from sqlmodel import Session, select, col
from sqlalchemy import update, delete

from domain.models.song import Song, utc_now
from infra.database.schema import reset_songs_table
from utils.logger import get_logger

logger = get_logger(__name__)

# 更新可能な列 (id と created_at 以外)
EDITABLE_FIELDS = ("group", "title", "release_date", "text", "link")

# バックスラッシュはダイアレクトごとにエスケープ規則が異なるので使わない
LIKE_ESCAPE = "/"

def _like_pattern(value: str) -> str:
    """部分一致用のパターン。ユーザー入力の % と _ はワイルドカードとして扱わない"""
    escaped = (
        value.replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"

class SongRepository:
    def __init__(self, session: Session):
        self.session = session

    def insert(self, song: Song) -> int:
        self.session.add(song)
        self.session.commit()
        self.session.refresh(song)
        logger.debug(f"Song inserted: id={song.id}")
        return song.id

    def get_by_id(self, song_id: int) -> Optional[Song]:
        return self.session.get(Song, song_id)

    def find_filtered(
        self,
        group: Optional[str] = None,
        title: Optional[str] = None,
        release_date: Optional[str] = None,
        limit: int = 10,
        offset: int = 0
    ) -> List[Song]:
        query = select(Song)

        # group / title は大文字小文字を区別しない部分一致、release_date は完全一致
        if group: query = query.where(col(Song.group).ilike(_like_pattern(group), escape=LIKE_ESCAPE))
        if title: query = query.where(col(Song.title).ilike(_like_pattern(title), escape=LIKE_ESCAPE))
        if release_date: query = query.where(Song.release_date == release_date)

        query = query.order_by(col(Song.id)).offset(offset).limit(limit)
        return self.session.exec(query).all()

    def update(self, song_id: int, fields: Dict[str, Any]) -> int:
        """
        指定IDの楽曲を全項目置き換える。戻り値は更新された行数。
        存在確認は UPDATE 自身の RETURNING 結果で行い、事前の SELECT はしない。
        """
        values = {getattr(Song, key): fields[key] for key in EDITABLE_FIELDS}
        values[col(Song.updated_at)] = utc_now()

        statement = (
            update(Song)
            .where(col(Song.id) == song_id)
            .values(values)
            .returning(col(Song.id))
        )
        updated_ids = self.session.exec(statement).all()
        self.session.commit()
        # ORM 側に古い値が残らないようにする
        self.session.expire_all()
        return len(updated_ids)

    def delete(self, song_id: int) -> int:
        statement = delete(Song).where(col(Song.id) == song_id).returning(col(Song.id))
        deleted_ids = self.session.exec(statement).all()
        self.session.commit()
        self.session.expire_all()
        return len(deleted_ids)

    def truncate(self):
        """全件削除し、ID の採番を初期値に戻す"""
        connection = self.session.connection()
        reset_songs_table(connection)
        self.session.commit()
        self.session.expunge_all()
