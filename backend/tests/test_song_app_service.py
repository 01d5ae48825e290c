import pytest
from aiohttp import test_utils
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from app.services.song_app_service import SongAppService
from app.services.enrichment_service import SongEnricher
from dev.mock_api import create_app, MOCK_SONG_INFO
from domain.constants import FALLBACK_RELEASE_DATE, FALLBACK_TEXT, FALLBACK_LINK
from domain.exceptions import SongValidationError, SongNotFoundError
from domain.models.song import Song


@pytest.mark.asyncio
async def test_add_song_with_lookup_unavailable_scenario(session: Session):
    """外部 API が使えなくても登録でき、プレースホルダーの歌詞を節で取得できる"""
    service = SongAppService(session, SongEnricher(None))

    song_id = await service.add_song("Muse", "Supermassive Black Hole")
    assert song_id == 1

    song = session.get(Song, song_id)
    assert song.release_date == FALLBACK_RELEASE_DATE
    assert song.text == FALLBACK_TEXT
    assert song.link == FALLBACK_LINK

    page1 = service.get_verses(song_id, page=1, limit=2)
    assert [(v.number, v.text) for v in page1] == [(1, "Verse 1"), (2, "Verse 2")]

    page2 = service.get_verses(song_id, page=2, limit=2)
    assert [(v.number, v.text) for v in page2] == [(3, "Verse 3")]


@pytest.mark.asyncio
async def test_add_song_with_mock_lookup(session: Session):
    server = test_utils.TestServer(create_app())
    await server.start_server()
    try:
        enricher = SongEnricher(f"http://{server.host}:{server.port}", timeout=5)
        song_id = await SongAppService(session, enricher).add_song("Muse", "Supermassive Black Hole")
    finally:
        await server.close()

    song = session.get(Song, song_id)
    assert song.release_date == MOCK_SONG_INFO["release_date"]
    assert song.text == MOCK_SONG_INFO["text"]
    assert song.link == MOCK_SONG_INFO["link"]


@pytest.mark.asyncio
@pytest.mark.parametrize("group,title", [
    ("", "Uprising"),
    ("Muse", ""),
    ("   ", "Uprising"),
    ("x" * 256, "Uprising"),
    ("Muse", "y" * 256),
])
async def test_add_song_validation(session: Session, mocker, group, title):
    enricher = SongEnricher(None)
    enrich_spy = mocker.spy(enricher, "enrich")

    with pytest.raises(SongValidationError):
        await SongAppService(session, enricher).add_song(group, title)

    # 検証エラーは外部 API 呼び出しより前に検出される
    enrich_spy.assert_not_called()


@pytest.mark.asyncio
async def test_add_song_propagates_store_failure(session: Session, mocker):
    service = SongAppService(session, SongEnricher(None))
    failure = OperationalError("INSERT", {}, Exception("disk full"))
    mocker.patch.object(service.repository, "insert", side_effect=failure)

    with pytest.raises(OperationalError) as exc_info:
        await service.add_song("Muse", "Uprising")
    assert exc_info.value is failure


def test_get_songs_filters_and_paginates(session: Session):
    session.add(Song(group="Muse", title="Uprising", release_date="2009-09-07"))
    session.add(Song(group="Radiohead", title="Creep", release_date="1992-09-21"))
    session.add(Song(group="Muse", title="Hysteria", release_date="2003-12-01"))
    session.commit()

    service = SongAppService(session)
    assert [s.title for s in service.get_songs(group="muse", page=1, limit=10)] == ["Uprising", "Hysteria"]
    assert [s.title for s in service.get_songs(group="muse", page=2, limit=1)] == ["Hysteria"]
    assert service.get_songs(group="muse", page=3, limit=1) == []
    assert [s.title for s in service.get_songs(release_date="1992-09-21")] == ["Creep"]
    assert len(service.get_songs()) == 3


@pytest.mark.parametrize("page,limit", [(0, 10), (-1, 10), (1, 0), (1, -5), (10**19, 10), (1, 10**19), (2**62, 4)])
def test_get_songs_rejects_bad_paging(session: Session, page, limit):
    with pytest.raises(SongValidationError):
        SongAppService(session).get_songs(page=page, limit=limit)


def test_get_verses_not_found(session: Session):
    with pytest.raises(SongNotFoundError):
        SongAppService(session).get_verses(404, page=1, limit=1)


@pytest.mark.parametrize("page,limit", [(0, 1), (1, 0), (10**19, 1), (1, 10**19)])
def test_get_verses_rejects_bad_paging(session: Session, page, limit):
    with pytest.raises(SongValidationError):
        SongAppService(session).get_verses(1, page=page, limit=limit)


def test_get_verses_beyond_last_page_is_empty(session: Session):
    song = Song(group="Muse", title="Uprising", text="A\n\nB")
    session.add(song)
    session.commit()
    session.refresh(song)

    assert SongAppService(session).get_verses(song.id, page=3, limit=1) == []


def test_update_song_replaces_all_fields(session: Session):
    song = Song(group="Muse", title="Uprising", release_date="2009-09-07", text="A", link="https://a")
    session.add(song)
    session.commit()
    session.refresh(song)
    song_id = song.id

    SongAppService(session).update_song(song_id, "MUSE", "Uprising (Remastered)", "", "New\n\nText", "")

    stored = session.get(Song, song_id)
    assert stored.group == "MUSE"
    assert stored.title == "Uprising (Remastered)"
    assert stored.release_date == ""
    assert stored.text == "New\n\nText"
    assert stored.link == ""


def test_update_song_not_found(session: Session):
    with pytest.raises(SongNotFoundError):
        SongAppService(session).update_song(77, "Muse", "Uprising")


@pytest.mark.parametrize("kwargs", [
    {"group": "", "title": "t"},
    {"group": "g", "title": ""},
    {"group": "g", "title": "t", "release_date": "2009-09-07T00"},
    {"group": "g", "title": "t", "link": "l" * 256},
])
def test_update_song_validation(session: Session, kwargs):
    with pytest.raises(SongValidationError):
        SongAppService(session).update_song(1, **kwargs)


def test_delete_song(session: Session):
    song = Song(group="Muse", title="Uprising")
    session.add(song)
    session.commit()
    session.refresh(song)
    song_id = song.id

    service = SongAppService(session)
    service.delete_song(song_id)
    assert session.get(Song, song_id) is None

    # 2回目は存在しないので NotFound
    with pytest.raises(SongNotFoundError):
        service.delete_song(song_id)


@pytest.mark.asyncio
async def test_truncate_then_add_starts_from_one(session: Session):
    service = SongAppService(session, SongEnricher(None))
    await service.add_song("Muse", "Uprising")
    await service.add_song("Muse", "Starlight")

    service.truncate_songs()
    assert service.get_songs(group="Muse") == []

    assert await service.add_song("Muse", "Hysteria") == 1
