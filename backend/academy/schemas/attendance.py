"""
Schémas Pydantic pour l'appel (présences) d'une séance.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

VALID_ATTENDANCE_STATUSES = {"PRESENT", "ABSENT", "LATE", "EXCUSED"}


class AttendanceEntry(BaseModel):
    student_id: uuid.UUID
    status: str
    notes: Optional[str] = None

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: str) -> str:
        if v not in VALID_ATTENDANCE_STATUSES:
            raise ValueError(f"Statut invalide. Valeurs acceptées : {VALID_ATTENDANCE_STATUSES}")
        return v


class AttendanceBatch(BaseModel):
    """Appel groupé : une ligne existante pour (séance, élève) est mise à jour."""
    attendances: List[AttendanceEntry]

    @field_validator("attendances")
    @classmethod
    def not_empty(cls, v: List[AttendanceEntry]) -> List[AttendanceEntry]:
        if not v:
            raise ValueError("La liste des présences ne peut pas être vide.")
        return v


class AttendanceResponse(BaseModel):
    id: uuid.UUID
    session_id: uuid.UUID
    student_id: uuid.UUID
    status: str
    notes: Optional[str] = None
    checked_by: Optional[uuid.UUID] = None
    checked_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
