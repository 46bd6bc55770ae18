"""Enrollment and progress tracking.

Provides:
- Enrollment lifecycle (assigned, in progress, completed, dropped)
- Per-module progress with program roll-up from required modules
- Admin category assignment and enrollment management
"""

from .models import (
    PROGRESS_TABLES_CQL,
    Enrollment,
    EnrollmentStatus,
    ModuleProgress,
    ModuleProgressStatus,
)


__all__ = [
    "PROGRESS_TABLES_CQL",
    "Enrollment",
    "EnrollmentStatus",
    "ModuleProgress",
    "ModuleProgressStatus",
]
