"""Mood tracking service.

Patients record how they feel, optionally after a piece of content, and
read back their latest check-ins. Entries are append-only.
"""

import structlog

from rehabtrack.auth.permissions import require_patient
from rehabtrack.auth.schemas import Principal
from rehabtrack.core.errors import InvalidInputError

from .models import MoodEntry
from .repository import MoodRepository
from .schemas import MoodEntryCreate


logger = structlog.get_logger(__name__)

DEFAULT_ENTRY_LIMIT = 10
MAX_ENTRY_LIMIT = 100


class InvalidLimitError(InvalidInputError):
    def __init__(self, message: str = f"Limit must be between 1 and {MAX_ENTRY_LIMIT}"):
        super().__init__(message, "invalid_limit")


class MoodService:
    """Service for recording and listing mood entries."""

    def __init__(self, repository: MoodRepository):
        self.repository = repository

    async def submit_entry(self, principal: Principal, data: MoodEntryCreate) -> MoodEntry:
        """Record a mood check-in for the calling patient.

        Raises:
            UnauthenticatedError: No principal
            UnauthorizedError: Principal is not a patient
        """
        require_patient(principal)
        entry = await self.repository.create_entry(
            MoodEntry(
                patient_id=principal.id,
                mood_type=data.mood_type.value,
                mood_score=data.mood_score,
                journal_entry=data.journal_entry,
                content_item_id=data.content_item_id,
            )
        )
        logger.info(
            "mood_entry_recorded",
            entry_id=str(entry.id),
            patient_id=str(principal.id),
            mood_type=entry.mood_type,
            mood_score=entry.mood_score,
            has_journal=entry.journal_entry is not None,
        )
        return entry

    async def list_entries(
        self, principal: Principal, limit: int = DEFAULT_ENTRY_LIMIT
    ) -> list[MoodEntry]:
        """Latest mood entries of the calling patient, newest first.

        Raises:
            InvalidLimitError: limit outside 1..MAX_ENTRY_LIMIT
        """
        require_patient(principal)
        if not 1 <= limit <= MAX_ENTRY_LIMIT:
            raise InvalidLimitError
        return await self.repository.list_patient_entries(principal.id, limit)
