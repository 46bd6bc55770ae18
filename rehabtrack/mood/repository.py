"""Persistence for mood entries."""

from uuid import UUID

from rehabtrack.core.database.repository import CassandraRepository

from .models import MoodEntry


class MoodRepository(CassandraRepository):
    """Mood entries table."""

    def _prepare_statements(self) -> None:
        """Prepare CQL statements for efficient execution."""
        self._insert_entry = self.session.prepare(f"""
            INSERT INTO {self.keyspace}.mood_entries
            (patient_id, entry_timestamp, id, content_item_id, mood_type,
             mood_score, journal_entry, created_at)
            VALUES (?, ?, ?, ?, ?, ?, ?, ?)
        """)

        self._get_entries = self.session.prepare(f"""
            SELECT * FROM {self.keyspace}.mood_entries
            WHERE patient_id = ?
            LIMIT ?
        """)

    async def create_entry(self, entry: MoodEntry) -> MoodEntry:
        await self._execute(
            self._insert_entry,
            [
                entry.patient_id,
                entry.entry_timestamp,
                entry.id,
                entry.content_item_id,
                entry.mood_type,
                entry.mood_score,
                entry.journal_entry,
                entry.created_at,
            ],
            operation="create_mood_entry",
        )
        return entry

    async def list_patient_entries(self, patient_id: UUID, limit: int) -> list[MoodEntry]:
        """Latest entries of a patient, newest first (clustering order)."""
        rows = await self._fetch_all(
            self._get_entries, [patient_id, limit], operation="list_mood_entries"
        )
        return [MoodEntry.from_row(r) for r in rows]
