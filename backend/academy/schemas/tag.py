"""
Schémas Pydantic pour les tags et leurs statistiques d'utilisation.
"""

import uuid
from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, field_validator


class TagCreate(BaseModel):
    name: str
    color: str
    category: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name", "color")
    @classmethod
    def not_empty(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Le nom et la couleur du tag sont obligatoires.")
        return v.strip()


class TagUpdate(BaseModel):
    name: Optional[str] = None
    color: Optional[str] = None
    category: Optional[str] = None
    description: Optional[str] = None

    @field_validator("name", "color")
    @classmethod
    def not_empty(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            raise ValueError("Le champ ne peut pas être vide.")
        return v.strip() if v else v


class TagSummary(BaseModel):
    """Tag tel qu'attaché aux élèves, classes, séances et supports."""
    id: uuid.UUID
    name: str
    color: str
    category: Optional[str] = None

    model_config = {"from_attributes": True}


class TagResponse(TagSummary):
    description: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class KindCounts(BaseModel):
    """Compteurs par type d'entité taguable."""
    students: int = 0
    classes: int = 0
    sessions: int = 0
    materials: int = 0

    def grand_total(self) -> int:
        return self.students + self.classes + self.sessions + self.materials


class TagUsageResponse(BaseModel):
    id: uuid.UUID
    name: str
    color: str
    category: Optional[str] = None
    description: Optional[str] = None
    usage_count: int
    breakdown: KindCounts
    created_at: Optional[datetime] = None


class UntaggedCounts(BaseModel):
    students: int = 0
    classes: int = 0
    sessions: int = 0
    materials: int = 0
    total: int = 0


class TagStatsBreakdown(BaseModel):
    totals: KindCounts
    tagged: KindCounts


class TagStatsResponse(BaseModel):
    total_tags: int
    total_tagged_items: int
    untagged_count: UntaggedCounts
    avg_tags_per_item: float
    top_tags: List[TagUsageResponse]
    category_stats: Dict[str, int]
    breakdown: TagStatsBreakdown
