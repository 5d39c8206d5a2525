"""
Router pour la consultation des enseignants.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.auth.dependencies import require_authenticated
from academy.auth.principal import Principal
from academy.auth.roles import Role
from academy.database import get_db
from academy.schemas.teacher import TeacherResponse
from academy.services import teacher_service

router = APIRouter(prefix="/api/v1/teachers", tags=["Enseignants"])


@router.get("", response_model=List[TeacherResponse], summary="Lister les enseignants")
def list_teachers(
    search: Optional[str] = None,
    role: Optional[Role] = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_authenticated()),
):
    return teacher_service.get_teachers(db, search=search, role=role.value if role else None)
