from fastapi import APIRouter, Depends, Query
from sqlmodel import Session
from typing import List, Optional
from infra.database.connection import get_session
from api.schemas.song import SongCreate, SongUpdate, SongRead, SongCreated, VerseRead, MessageResponse
from app.services.song_app_service import SongAppService
from app.services.enrichment_service import SongEnricher, get_song_enricher
from domain.constants import DEFAULT_SONGS_LIMIT, DEFAULT_VERSES_LIMIT

router = APIRouter()

# SongValidationError / SongNotFoundError は main.py の例外ハンドラで 400 / 404 に変換する

@router.get("/songs", response_model=List[SongRead])
def get_songs(
    group: Optional[str] = Query(None, description="Case-insensitive substring of the group name"),
    title: Optional[str] = Query(None, description="Case-insensitive substring of the song title"),
    release_date: Optional[str] = Query(None, description="Exact release date (YYYY-MM-DD)"),
    page: int = Query(1),
    limit: int = Query(DEFAULT_SONGS_LIMIT),
    session: Session = Depends(get_session)
):
    service = SongAppService(session)
    return service.get_songs(group, title, release_date, page, limit)

@router.post("/songs", response_model=SongCreated)
async def add_song(
    song: SongCreate,
    session: Session = Depends(get_session),
    enricher: SongEnricher = Depends(get_song_enricher)
):
    """
    楽曲を登録する。リリース日・歌詞・リンクは外部 API から補完し、
    取得できない場合はプレースホルダーを保存する。
    """
    service = SongAppService(session, enricher)
    song_id = await service.add_song(song.group, song.title)
    return {"id": song_id}

@router.post("/songs/truncate", response_model=MessageResponse)
def truncate_songs(session: Session = Depends(get_session)):
    service = SongAppService(session)
    service.truncate_songs()
    return {"message": "Table truncated and ID sequence reset"}

@router.get("/songs/{song_id}/verses", response_model=List[VerseRead])
def get_verses(
    song_id: int,
    page: int = Query(1),
    limit: int = Query(DEFAULT_VERSES_LIMIT),
    session: Session = Depends(get_session)
):
    """歌詞を空行で節に分け、page/limit でページングして返す"""
    service = SongAppService(session)
    return service.get_verses(song_id, page, limit)

@router.put("/songs/{song_id}", response_model=MessageResponse)
def update_song(song_id: int, song: SongUpdate, session: Session = Depends(get_session)):
    service = SongAppService(session)
    service.update_song(song_id, song.group, song.title, song.release_date, song.text, song.link)
    return {"message": "Song updated"}

@router.delete("/songs/{song_id}", response_model=MessageResponse)
def delete_song(song_id: int, session: Session = Depends(get_session)):
    service = SongAppService(session)
    service.delete_song(song_id)
    return {"message": "Song deleted"}
