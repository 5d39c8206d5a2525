"""
Schémas Pydantic pour les enseignants.
"""

import uuid
from typing import List, Optional

from pydantic import BaseModel


class TeacherSummary(BaseModel):
    id: uuid.UUID
    name: str

    model_config = {"from_attributes": True}


class TeacherResponse(BaseModel):
    id: uuid.UUID
    user_id: uuid.UUID
    name: str
    phone: Optional[str] = None
    specialties: List[str] = []
    email: str
    role: str
    main_class_count: int
    assistant_class_count: int
