"""Database models for patient mood tracking.

Mood types:
- HAPPY, CALM, NEUTRAL: settled moods
- STRESSED, SAD, ANGRY, ANXIOUS: moods worth following up
"""

from datetime import datetime
from enum import Enum
from typing import Any
from uuid import UUID, uuid4

from rehabtrack.core.dates import ensure_utc_aware, utcnow


# ==============================================================================
# Constants
# ==============================================================================

MOOD_SCORE_MIN = 1
MOOD_SCORE_MAX = 10
JOURNAL_ENTRY_MAX_LENGTH = 5_000


class MoodType(str, Enum):
    """Self-reported mood."""

    HAPPY = "happy"
    CALM = "calm"
    NEUTRAL = "neutral"
    STRESSED = "stressed"
    SAD = "sad"
    ANGRY = "angry"
    ANXIOUS = "anxious"


# ==============================================================================
# CQL Table Definitions
# ==============================================================================

# Partitioned by patient, newest entry first
MOOD_ENTRIES_TABLE_CQL = """
CREATE TABLE IF NOT EXISTS {keyspace}.mood_entries (
    patient_id UUID,
    entry_timestamp TIMESTAMP,
    id UUID,
    content_item_id UUID,
    mood_type TEXT,
    mood_score INT,
    journal_entry TEXT,
    created_at TIMESTAMP,
    PRIMARY KEY ((patient_id), entry_timestamp, id)
) WITH CLUSTERING ORDER BY (entry_timestamp DESC, id ASC)
"""

MOOD_TABLES_CQL = [MOOD_ENTRIES_TABLE_CQL]


# ==============================================================================
# Entity Classes
# ==============================================================================


class MoodEntry:
    """One mood check-in of a patient.

    Attributes:
        id: Entry UUID
        patient_id: Patient who reported the mood
        mood_type: MoodType value
        mood_score: Intensity from 1 to 10
        journal_entry: Optional free text
        content_item_id: Content item the check-in followed, if any
        entry_timestamp: When the mood was reported
    """

    def __init__(
        self,
        patient_id: UUID,
        mood_type: str,
        mood_score: int,
        id: UUID | None = None,
        journal_entry: str | None = None,
        content_item_id: UUID | None = None,
        entry_timestamp: datetime | None = None,
        created_at: datetime | None = None,
    ):
        self.id = id or uuid4()
        self.patient_id = patient_id
        self.mood_type = mood_type
        self.mood_score = mood_score
        self.journal_entry = journal_entry
        self.content_item_id = content_item_id
        self.entry_timestamp = ensure_utc_aware(entry_timestamp) or utcnow()
        self.created_at = ensure_utc_aware(created_at) or self.entry_timestamp

    @classmethod
    def from_row(cls, row: Any) -> "MoodEntry":
        """Create MoodEntry from Cassandra row."""
        return cls(
            id=row.id,
            patient_id=row.patient_id,
            mood_type=row.mood_type,
            mood_score=row.mood_score,
            journal_entry=row.journal_entry,
            content_item_id=row.content_item_id,
            entry_timestamp=row.entry_timestamp,
            created_at=row.created_at,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "patient_id": self.patient_id,
            "mood_type": self.mood_type,
            "mood_score": self.mood_score,
            "journal_entry": self.journal_entry,
            "content_item_id": self.content_item_id,
            "entry_timestamp": self.entry_timestamp,
        }

    def __repr__(self) -> str:
        return f"<MoodEntry {self.id} {self.mood_type}={self.mood_score}>"
