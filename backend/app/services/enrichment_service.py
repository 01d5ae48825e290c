from typing import Optional

from config import settings
from domain.constants import FALLBACK_RELEASE_DATE, FALLBACK_TEXT, FALLBACK_LINK
from domain.exceptions import LookupUnavailableError
from domain.models.song import EnrichmentResult
from utils.external_metadata import fetch_song_info
from utils.logger import get_logger

logger = get_logger(__name__)

def fallback_result(reason: str) -> EnrichmentResult:
    return EnrichmentResult(
        release_date=FALLBACK_RELEASE_DATE,
        text=FALLBACK_TEXT,
        link=FALLBACK_LINK,
        source="fallback",
        fallback_reason=reason,
    )

class SongEnricher:
    """
    (group, title) から外部 API でリリース日・歌詞・リンクを補完する。
    外部 API の障害は呼び出し元に伝播させず、常にプレースホルダーで結果を返す。
    """
    def __init__(self, base_url: Optional[str], timeout: float = 10.0):
        self.base_url = base_url.rstrip("/") if base_url else None
        self.timeout = timeout

    async def enrich(self, group: str, title: str) -> EnrichmentResult:
        if not self.base_url:
            logger.warning("EXTERNAL_API_URL is not set, using fallback data")
            return fallback_result("not_configured")

        try:
            data = await fetch_song_info(self.base_url, group, title, timeout=self.timeout)
        except LookupUnavailableError as e:
            logger.warning(f"External API unavailable ({e.reason}), using fallback data: {e}")
            return fallback_result(e.reason)

        # 一部の項目が空のレスポンスは使えないものとして扱う
        if not data["release_date"] or not data["text"] or not data["link"]:
            logger.warning(f"External API returned incomplete data for {group!r} - {title!r}, using fallback data")
            return fallback_result("incomplete")

        logger.info(f"Fetched song info from external API: {group!r} - {title!r}")
        return EnrichmentResult(**data, source="external")

def get_song_enricher() -> SongEnricher:
    """FastAPI の依存関数。テストでは dependency_overrides で差し替える"""
    return SongEnricher(settings.EXTERNAL_API_URL, timeout=settings.EXTERNAL_API_TIMEOUT)
