"""Pydantic schemas for mood tracking."""

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .models import (
    JOURNAL_ENTRY_MAX_LENGTH,
    MOOD_SCORE_MAX,
    MOOD_SCORE_MIN,
    MoodEntry,
    MoodType,
)


class MoodEntryCreate(BaseModel):
    """Mood check-in submitted by a patient."""

    mood_type: MoodType
    mood_score: int = Field(..., ge=MOOD_SCORE_MIN, le=MOOD_SCORE_MAX)
    journal_entry: str | None = Field(None, max_length=JOURNAL_ENTRY_MAX_LENGTH)
    content_item_id: UUID | None = None

    @field_validator("journal_entry")
    @classmethod
    def blank_journal_is_none(cls, v: str | None) -> str | None:
        if v is not None and not v.strip():
            return None
        return v


class MoodEntryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    mood_type: MoodType
    mood_score: int
    journal_entry: str | None = None
    content_item_id: UUID | None = None
    entry_timestamp: datetime

    @classmethod
    def from_entity(cls, entity: MoodEntry) -> "MoodEntryResponse":
        return cls.model_validate(entity)


class MoodEntryListResponse(BaseModel):
    items: list[MoodEntryResponse]
    total: int
