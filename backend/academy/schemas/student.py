"""
Schémas Pydantic pour les élèves, leur statut de suivi et leur fiche détaillée.
"""

import uuid
from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from academy.schemas.tag import TagSummary

VALID_GENDERS = {"MALE", "FEMALE"}
VALID_ENROLLMENT_STATUSES = {"ENROLLED", "WAITING", "LEFT"}
VALID_MANAGEMENT_STATUSES = {"NORMAL", "CAUTION"}


class StudentCreate(BaseModel):
    """Inscription d'un élève : l'identifiant et le mot de passe sont générés."""
    name: str
    birth_date: date
    gender: str  # MALE, FEMALE
    phone: str
    school: Optional[str] = None
    parent_id: Optional[uuid.UUID] = None
    tag_ids: List[uuid.UUID] = []

    @field_validator("name", "phone")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip()

    @field_validator("gender")
    @classmethod
    def valid_gender(cls, v: str) -> str:
        if v not in VALID_GENDERS:
            raise ValueError(f"Sexe invalide. Valeurs acceptées : {VALID_GENDERS}")
        return v


class StudentUpdate(BaseModel):
    """
    Mise à jour partielle d'un élève.
    Le statut de suivi n'est pas modifiable ici : il passe par POST /students/{id}/status.
    """
    name: Optional[str] = None
    school: Optional[str] = None
    phone: Optional[str] = None
    enrollment_status: Optional[str] = None
    parent_id: Optional[uuid.UUID] = None
    tag_ids: Optional[List[uuid.UUID]] = None  # si fourni, remplace les tags

    @field_validator("name", "phone")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip() if v else v

    @field_validator("enrollment_status")
    @classmethod
    def valid_enrollment_status(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and v not in VALID_ENROLLMENT_STATUSES:
            raise ValueError(f"Statut invalide. Valeurs acceptées : {VALID_ENROLLMENT_STATUSES}")
        return v


class StatusChangeRequest(BaseModel):
    """
    Changement du statut de suivi. La validation métier (statut connu, motif non vide,
    statut différent de l'actuel) est faite par status_service.
    """
    new_status: str
    reason: str = ""


class ParentSummary(BaseModel):
    id: uuid.UUID
    name: str
    phone: Optional[str] = None
    relation: Optional[str] = None

    model_config = {"from_attributes": True}


class StudentResponse(BaseModel):
    id: uuid.UUID
    login_id: str
    name: str
    birth_date: date
    gender: str
    school: Optional[str] = None
    phone: str
    grade: str  # calculé à chaque lecture
    enrollment_status: str
    management_status: str
    parent: Optional[ParentSummary] = None
    tags: List[TagSummary] = []
    class_count: int = 0
    attendance_count: int = 0
    created_at: Optional[datetime] = None


class StudentCreatedResponse(BaseModel):
    """Réponse d'inscription : les identifiants générés ne sont communiqués qu'une fois."""
    student: StudentResponse
    generated_login_id: str
    generated_password: str


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    has_next: bool


class StudentListResponse(BaseModel):
    students: List[StudentResponse]
    pagination: Pagination


class StatusLogResponse(BaseModel):
    id: uuid.UUID
    student_id: Optional[uuid.UUID] = None
    previous_status: str
    new_status: str
    reason: str
    changed_by: uuid.UUID
    changed_at: Optional[datetime] = None

    model_config = {"from_attributes": True}


class StatusChangeResponse(BaseModel):
    student: StudentResponse
    status_log: StatusLogResponse


class EnrollmentSummary(BaseModel):
    class_id: uuid.UUID
    class_name: str
    is_active: bool
    enrolled_at: Optional[datetime] = None


class StudentAttendanceEntry(BaseModel):
    id: uuid.UUID
    session_id: uuid.UUID
    session_date: date
    class_name: str
    status: str
    notes: Optional[str] = None


class StudentSubmissionEntry(BaseModel):
    id: uuid.UUID
    assignment_id: uuid.UUID
    title: str
    status: str
    score: Optional[int] = None
    max_score: Optional[int] = None
    submitted_at: Optional[datetime] = None
    due_date: datetime


class StudentDetailResponse(BaseModel):
    student: StudentResponse
    enrollments: List[EnrollmentSummary]
    attendance_rate: float  # pourcentage de PRESENT sur les présences listées
    attendances: List[StudentAttendanceEntry]
    submissions: List[StudentSubmissionEntry]
    status_logs: List[StatusLogResponse]
