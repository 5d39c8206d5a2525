"""
Schémas Pydantic pour les séances de cours.
"""

import re
import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator, model_validator

from academy.schemas.tag import TagSummary

VALID_SESSION_STATUSES = {"SCHEDULED", "COMPLETED", "CANCELLED"}
_TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")


def _check_time(v: Optional[str]) -> Optional[str]:
    if v is not None and not _TIME_PATTERN.match(v):
        raise ValueError("Heure invalide, format attendu HH:MM.")
    return v


class SessionCreate(BaseModel):
    class_id: uuid.UUID
    session_date: date
    start_time: str
    end_time: str
    location: Optional[str] = None
    notes: Optional[str] = None
    tag_ids: List[uuid.UUID] = []

    @field_validator("start_time", "end_time")
    @classmethod
    def valid_time(cls, v: str) -> str:
        return _check_time(v)

    @model_validator(mode="after")
    def end_after_start(self) -> "SessionCreate":
        # "HH:MM" zéro-paddé : l'ordre lexicographique suit l'ordre horaire
        if self.end_time <= self.start_time:
            raise ValueError("L'heure de fin doit être postérieure à l'heure de début.")
        return self


class SessionUpdate(BaseModel):
    session_date: Optional[date] = None
    start_time: Optional[str] = None
    end_time: Optional[str] = None
    location: Optional[str] = None
    status: Optional[str] = None
    notes: Optional[str] = None
    tag_ids: Optional[List[uuid.UUID]] = None  # si fourni, remplace les tags

    @field_validator("start_time", "end_time")
    @classmethod
    def valid_time(cls, v: Optional[str]) -> Optional[str]:
        return _check_time(v)

    @field_validator("status")
    @classmethod
    def valid_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in VALID_SESSION_STATUSES:
            raise ValueError(f"Statut invalide. Valeurs acceptées : {VALID_SESSION_STATUSES}")
        return v


class SessionResponse(BaseModel):
    id: uuid.UUID
    class_id: uuid.UUID
    class_name: Optional[str] = None
    session_date: date
    start_time: str
    end_time: str
    location: Optional[str] = None
    status: str
    notes: Optional[str] = None
    created_by: Optional[uuid.UUID] = None
    attendance_count: int = 0
    assignment_count: int = 0
    tags: List[TagSummary] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class SessionMaterialLink(BaseModel):
    material_id: uuid.UUID


class SessionMaterialResponse(BaseModel):
    session_id: uuid.UUID
    material_id: uuid.UUID
    added_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
