from typing import List, Optional
from sqlmodel import Session

from domain.constants import (
    GROUP_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    RELEASE_DATE_MAX_LENGTH,
    LINK_MAX_LENGTH,
    MAX_PAGING_VALUE,
)
from domain.exceptions import SongValidationError, SongNotFoundError
from domain.models.song import Song, Verse
from domain.services.verse_splitter import paginate_verses
from infra.repositories.song_repository import SongRepository
from app.services.enrichment_service import SongEnricher
from utils.logger import get_logger

logger = get_logger(__name__)

def _require_text(name: str, value: Optional[str], max_length: int):
    if value is None or not value.strip():
        raise SongValidationError(f"{name} must not be empty")
    if len(value) > max_length:
        raise SongValidationError(f"{name} must be at most {max_length} characters")

def _limit_length(name: str, value: Optional[str], max_length: int):
    if value is not None and len(value) > max_length:
        raise SongValidationError(f"{name} must be at most {max_length} characters")

def _require_paging(page: int, limit: int):
    if page < 1:
        raise SongValidationError("Invalid page number")
    if limit < 1 or limit > MAX_PAGING_VALUE:
        raise SongValidationError("Invalid limit")
    if (page - 1) * limit > MAX_PAGING_VALUE:
        raise SongValidationError("Invalid page number")

class SongAppService:
    def __init__(self, session: Session, enricher: Optional[SongEnricher] = None):
        self.session = session
        self.repository = SongRepository(session)
        self.enricher = enricher

    async def add_song(self, group: str, title: str) -> int:
        """
        楽曲を登録する。外部 API で補完できなくてもプレースホルダーで登録は成功させる。
        DB の失敗はそのまま呼び出し元へ伝播する。
        """
        _require_text("group", group, GROUP_MAX_LENGTH)
        _require_text("title", title, TITLE_MAX_LENGTH)
        if self.enricher is None:
            raise RuntimeError("SongAppService.add_song requires an enricher")

        logger.info(f"Adding song: group={group!r} title={title!r}")
        info = await self.enricher.enrich(group, title)

        song = Song(
            group=group,
            title=title,
            release_date=info.release_date,
            text=info.text,
            link=info.link,
        )
        try:
            song_id = self.repository.insert(song)
        except Exception as e:
            logger.error(f"Failed to add song to database: {e}")
            self.session.rollback()
            raise

        logger.info(f"Song added: id={song_id} (source={info.source})")
        return song_id

    def get_songs(
        self,
        group: Optional[str] = None,
        title: Optional[str] = None,
        release_date: Optional[str] = None,
        page: int = 1,
        limit: int = 10
    ) -> List[Song]:
        _require_paging(page, limit)
        logger.debug(f"Fetching songs: group={group!r} title={title!r} release_date={release_date!r} page={page} limit={limit}")

        songs = self.repository.find_filtered(
            group=group,
            title=title,
            release_date=release_date,
            limit=limit,
            offset=(page - 1) * limit
        )
        logger.info(f"Songs fetched: count={len(songs)}")
        return songs

    def get_verses(self, song_id: int, page: int = 1, limit: int = 1) -> List[Verse]:
        _require_paging(page, limit)
        logger.debug(f"Fetching verses for song {song_id}: page={page} limit={limit}")

        song = self.repository.get_by_id(song_id)
        if not song:
            logger.warning(f"Song not found: id={song_id}")
            raise SongNotFoundError(song_id)

        verses = paginate_verses(song.text, page, limit)
        logger.info(f"Verses retrieved for song {song_id}: count={len(verses)}")
        return verses

    def update_song(
        self,
        song_id: int,
        group: str,
        title: str,
        release_date: str = "",
        text: str = "",
        link: str = ""
    ):
        """5項目すべてを置き換える。対象が存在しなければ SongNotFoundError"""
        _require_text("group", group, GROUP_MAX_LENGTH)
        _require_text("title", title, TITLE_MAX_LENGTH)
        _limit_length("release_date", release_date, RELEASE_DATE_MAX_LENGTH)
        _limit_length("link", link, LINK_MAX_LENGTH)

        logger.debug(f"Updating song {song_id}")
        fields = {
            "group": group,
            "title": title,
            "release_date": release_date or "",
            "text": text or "",
            "link": link or "",
        }
        try:
            affected = self.repository.update(song_id, fields)
        except Exception as e:
            logger.error(f"Failed to update song {song_id}: {e}")
            self.session.rollback()
            raise

        if affected == 0:
            logger.warning(f"Song not found: id={song_id}")
            raise SongNotFoundError(song_id)
        logger.info(f"Song updated: id={song_id}")

    def delete_song(self, song_id: int):
        logger.debug(f"Deleting song {song_id}")
        try:
            affected = self.repository.delete(song_id)
        except Exception as e:
            logger.error(f"Failed to delete song {song_id}: {e}")
            self.session.rollback()
            raise

        if affected == 0:
            logger.warning(f"Song not found: id={song_id}")
            raise SongNotFoundError(song_id)
        logger.info(f"Song deleted: id={song_id}")

    def truncate_songs(self):
        logger.debug("Truncating songs table")
        try:
            self.repository.truncate()
        except Exception as e:
            logger.error(f"Failed to truncate songs table: {e}")
            self.session.rollback()
            raise
        logger.info("Songs table truncated and ID sequence reset")
