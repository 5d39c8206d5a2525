"""
Schémas Pydantic pour les classes.
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, field_validator

from academy.schemas.tag import TagSummary
from academy.schemas.teacher import TeacherSummary


class ClassCreate(BaseModel):
    name: str
    main_teacher_id: uuid.UUID
    description: Optional[str] = None
    cost: Optional[Decimal] = None
    assistant_teacher_ids: List[uuid.UUID] = []
    recurring_schedules: Optional[List[Dict[str, Any]]] = None
    tag_ids: List[uuid.UUID] = []

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom de la classe ne peut pas être vide.")
        return v.strip()

    @field_validator("cost")
    @classmethod
    def cost_positive(cls, v: Optional[Decimal]) -> Optional[Decimal]:
        if v is not None and v < 0:
            raise ValueError("Le coût ne peut pas être négatif.")
        return v


class ClassUpdate(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    cost: Optional[Decimal] = None
    main_teacher_id: Optional[uuid.UUID] = None
    recurring_schedules: Optional[List[Dict[str, Any]]] = None
    is_active: Optional[bool] = None
    assistant_teacher_ids: Optional[List[uuid.UUID]] = None  # si fourni, remplace les assistants
    tag_ids: Optional[List[uuid.UUID]] = None  # si fourni, remplace les tags

    @field_validator("name")
    @classmethod
    def name_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le nom de la classe ne peut pas être vide.")
        return v.strip() if v else v


class ClassResponse(BaseModel):
    id: uuid.UUID
    name: str
    description: Optional[str] = None
    cost: Optional[Decimal] = None
    is_active: bool
    main_teacher: Optional[TeacherSummary] = None
    assistant_teachers: List[TeacherSummary] = []
    recurring_schedules: Optional[List[Dict[str, Any]]] = None
    student_count: int
    session_count: int
    tags: List[TagSummary] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ClassStudentSummary(BaseModel):
    id: uuid.UUID
    login_id: str
    name: str
    grade: str
    school: Optional[str] = None
    enrollment_status: str
    management_status: str
    enrolled_at: Optional[datetime] = None


class ClassSessionSummary(BaseModel):
    id: uuid.UUID
    session_date: date
    start_time: str
    end_time: str
    status: str
    attendance_count: int


class ClassDetailResponse(ClassResponse):
    students: List[ClassStudentSummary] = []
    recent_sessions: List[ClassSessionSummary] = []


class ClassEnrollRequest(BaseModel):
    """Corps de requête pour inscrire un élève dans une classe."""
    student_id: uuid.UUID


class EnrollmentResponse(BaseModel):
    class_id: uuid.UUID
    student_id: uuid.UUID
    enrolled_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
