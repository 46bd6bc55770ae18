"""Pydantic schemas for authentication."""

from uuid import UUID

from pydantic import BaseModel, ConfigDict


class Principal(BaseModel):
    """Authenticated caller passed explicitly into every engine operation."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    role: str
    email: str | None = None
