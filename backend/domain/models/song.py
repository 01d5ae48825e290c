from typing import Optional
from datetime import datetime, timezone
from sqlmodel import Field, SQLModel
from sqlalchemy import Column, String

from domain.constants import (
    GROUP_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    RELEASE_DATE_MAX_LENGTH,
    LINK_MAX_LENGTH,
)

def utc_now() -> datetime:
    return datetime.now(timezone.utc)

class Song(SQLModel, table=True):
    """
    楽曲レコード。
    group は SQL の予約語なので列名は group_name とする。
    """
    __tablename__ = "songs"

    id: Optional[int] = Field(default=None, primary_key=True)
    group: str = Field(sa_column=Column("group_name", String(GROUP_MAX_LENGTH), nullable=False))
    title: str = Field(sa_column=Column("title", String(TITLE_MAX_LENGTH), nullable=False))

    # 補完データ (取得できない場合も NULL ではなく空文字)
    release_date: str = Field(default="", max_length=RELEASE_DATE_MAX_LENGTH)
    text: str = Field(default="")
    link: str = Field(default="", max_length=LINK_MAX_LENGTH)

    # タイムスタンプは UTC (timezone 付き) で扱う
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

class Verse(SQLModel):
    """歌詞の1節。保存はせず、読み出しのたびに Song.text から組み立てる"""
    number: int
    text: str

class EnrichmentResult(SQLModel):
    release_date: str
    text: str
    link: str
    # "external" or "fallback"
    source: str = "external"
    fallback_reason: Optional[str] = None

    @property
    def is_fallback(self) -> bool:
        return self.source == "fallback"
