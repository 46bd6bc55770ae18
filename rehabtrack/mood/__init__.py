"""Patient mood tracking.

Provides:
- Mood check-ins with a type and a 1-10 score
- Optional journal text and link to the content item that prompted it
"""

from .models import MOOD_TABLES_CQL, MoodEntry, MoodType


__all__ = ["MOOD_TABLES_CQL", "MoodEntry", "MoodType"]
