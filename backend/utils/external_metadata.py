import asyncio
import aiohttp
from typing import Dict
from pydantic import BaseModel, AliasChoices, Field, ValidationError, ConfigDict

from domain.exceptions import LookupUnavailableError
from utils.logger import get_logger

logger = get_logger(__name__)

class SongInfoPayload(BaseModel):
    """
    外部 API の /info レスポンス。
    モックサーバーによっては releaseDate (camelCase) で返すため両方受け付ける。
    """
    model_config = ConfigDict(strict=True)

    release_date: str = Field(validation_alias=AliasChoices("release_date", "releaseDate"))
    text: str
    link: str

async def fetch_song_info(
    base_url: str,
    group: str,
    title: str,
    timeout: float = 10.0
) -> Dict[str, str]:
    """
    Fetch release date, lyrics and link for a song from the lookup API.
    Any failure is raised as LookupUnavailableError with a reason code:
    transport_error, bad_status or bad_body.
    """
    url = f"{base_url}/info"
    # aiohttp がクエリ文字列のエスケープを行う
    params = {"group": group, "title": title}
    client_timeout = aiohttp.ClientTimeout(total=timeout)

    try:
        logger.debug(f"Fetching data from external API: {url} group={group!r} title={title!r}")
        async with aiohttp.ClientSession(timeout=client_timeout) as session:
            async with session.get(url, params=params) as response:
                if not 200 <= response.status < 300:
                    raise LookupUnavailableError(
                        "bad_status", f"External API returned status {response.status}"
                    )
                # Content-Type が application/json でない場合もあるので content_type=None
                data = await response.json(content_type=None)
    except LookupUnavailableError:
        raise
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        raise LookupUnavailableError("transport_error", f"Failed to fetch data from external API: {e!r}") from e
    except ValueError as e:
        # JSON デコード失敗
        raise LookupUnavailableError("bad_body", f"Failed to decode external API response: {e}") from e

    try:
        payload = SongInfoPayload.model_validate(data)
    except ValidationError as e:
        raise LookupUnavailableError("bad_body", f"Unexpected external API response shape: {e}") from e

    return payload.model_dump()
