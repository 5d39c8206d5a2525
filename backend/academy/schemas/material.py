"""
Schémas Pydantic pour les supports de cours.
"""

import uuid
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, field_validator

from academy.schemas.tag import TagSummary


class MaterialCreate(BaseModel):
    title: str
    file_url: str
    description: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    tag_ids: List[uuid.UUID] = []

    @field_validator("title", "file_url")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le titre et l'URL du fichier sont obligatoires.")
        return v.strip()

    @field_validator("file_size")
    @classmethod
    def size_positive(cls, v: Optional[int]) -> Optional[int]:
        if v is not None and v < 0:
            raise ValueError("La taille du fichier ne peut pas être négative.")
        return v


class MaterialUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    file_url: Optional[str] = None
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    tag_ids: Optional[List[uuid.UUID]] = None

    @field_validator("title", "file_url")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip() if v else v


class MaterialResponse(BaseModel):
    id: uuid.UUID
    title: str
    description: Optional[str] = None
    file_url: str
    file_type: Optional[str] = None
    file_size: Optional[int] = None
    created_by: Optional[uuid.UUID] = None
    session_count: int = 0
    tags: List[TagSummary] = []
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
