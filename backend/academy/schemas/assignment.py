"""
Schémas Pydantic pour les devoirs et les rendus.
"""

import uuid
from datetime import datetime
from typing import Optional

from pydantic import BaseModel, field_validator

VALID_SUBMISSION_STATUSES = {"SUBMITTED", "GRADED"}


class AssignmentCreate(BaseModel):
    session_id: uuid.UUID
    title: str
    due_date: datetime
    description: Optional[str] = None
    max_score: Optional[int] = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le titre du devoir ne peut pas être vide.")
        return v.strip()

    @field_validator("max_score")
    @classmethod
    def max_score_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("La note maximale doit être strictement positive.")
        return v


class AssignmentUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    due_date: Optional[datetime] = None
    max_score: Optional[int] = None

    @field_validator("title")
    @classmethod
    def title_not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le titre du devoir ne peut pas être vide.")
        return v.strip() if v else v

    @field_validator("max_score")
    @classmethod
    def max_score_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v <= 0:
            raise ValueError("La note maximale doit être strictement positive.")
        return v


class AssignmentResponse(BaseModel):
    id: uuid.UUID
    session_id: uuid.UUID
    title: str
    description: Optional[str] = None
    due_date: datetime
    max_score: Optional[int] = None
    created_by: Optional[uuid.UUID] = None
    submission_count: int = 0
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class AssignmentDeleteResult(BaseModel):
    id: uuid.UUID
    removed_submissions: int


class SubmissionCreate(BaseModel):
    student_id: uuid.UUID
    file_url: Optional[str] = None


class GradeRequest(BaseModel):
    score: Optional[int] = None
    feedback: Optional[str] = None

    @field_validator("score")
    @classmethod
    def score_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("La note ne peut pas être négative.")
        return v


class SubmissionResponse(BaseModel):
    id: uuid.UUID
    assignment_id: uuid.UUID
    student_id: uuid.UUID
    status: str
    file_url: Optional[str] = None
    score: Optional[int] = None
    feedback: Optional[str] = None
    submitted_at: Optional[datetime] = None
    graded_at: Optional[datetime] = None
    graded_by: Optional[uuid.UUID] = None

    model_config = {"from_attributes": True}
