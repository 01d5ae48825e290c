from pydantic import BaseModel, Field
from datetime import datetime

from domain.constants import (
    GROUP_MAX_LENGTH,
    TITLE_MAX_LENGTH,
    RELEASE_DATE_MAX_LENGTH,
    LINK_MAX_LENGTH,
)

class SongCreate(BaseModel):
    group: str = Field(min_length=1, max_length=GROUP_MAX_LENGTH)
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)

class SongUpdate(BaseModel):
    group: str = Field(min_length=1, max_length=GROUP_MAX_LENGTH)
    title: str = Field(min_length=1, max_length=TITLE_MAX_LENGTH)
    release_date: str = Field(default="", max_length=RELEASE_DATE_MAX_LENGTH)
    text: str = ""
    link: str = Field(default="", max_length=LINK_MAX_LENGTH)

class SongRead(BaseModel):
    id: int
    group: str
    title: str
    release_date: str
    text: str
    link: str
    created_at: datetime
    updated_at: datetime

class SongCreated(BaseModel):
    id: int

class VerseRead(BaseModel):
    number: int
    text: str

class MessageResponse(BaseModel):
    message: str
