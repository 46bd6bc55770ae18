"""Category/enrollment gate for patient-facing operations."""

from .models import ACCESS_TABLES_CQL, PatientCategory


__all__ = ["ACCESS_TABLES_CQL", "PatientCategory"]
