"""
Router pour la gestion des classes.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.auth.dependencies import require_any_role, require_authenticated, require_role
from academy.auth.principal import Principal
from academy.auth.roles import MANAGERS, Role
from academy.database import get_db
from academy.schemas.deletion import DeletionResult
from academy.schemas.school_class import (
    ClassCreate,
    ClassDetailResponse,
    ClassEnrollRequest,
    ClassResponse,
    ClassUpdate,
    EnrollmentResponse,
)
from academy.services import class_service

router = APIRouter(prefix="/api/v1/classes", tags=["Classes"])

require_managers = require_any_role(*MANAGERS)
require_teaching_staff = require_role(Role.TEACHER)


@router.post("", response_model=ClassResponse, status_code=201, summary="Créer une classe")
def create_class(data: ClassCreate, db: Session = Depends(get_db), _: Principal = Depends(require_teaching_staff)):
    """Crée une classe avec son enseignant principal, ses assistants et ses tags."""
    return class_service.create_class(db, data)


@router.get("", response_model=List[ClassResponse], summary="Lister les classes")
def list_classes(
    search: Optional[str] = None,
    teacher_id: Optional[uuid.UUID] = None,
    is_active: Optional[bool] = None,
    tag_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_authenticated()),
):
    return class_service.get_classes(db, search=search, teacher_id=teacher_id, is_active=is_active, tag_id=tag_id)


@router.get("/{class_id}", response_model=ClassDetailResponse, summary="Détail d'une classe")
def get_class(class_id: uuid.UUID, db: Session = Depends(get_db), _: Principal = Depends(require_authenticated())):
    return class_service.get_class(db, class_id)


@router.put("/{class_id}", response_model=ClassResponse, summary="Modifier une classe")
def update_class(
    class_id: uuid.UUID,
    data: ClassUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_teaching_staff),
):
    return class_service.update_class(db, class_id, data)


@router.delete("/{class_id}", response_model=DeletionResult, summary="Supprimer une classe")
def delete_class(class_id: uuid.UUID, db: Session = Depends(get_db), _: Principal = Depends(require_managers)):
    """
    Supprime une classe définitivement.
    Une classe avec des élèves inscrits ou des séances est désactivée à la place.
    """
    return class_service.delete_class(db, class_id)


# --- Inscriptions ---

@router.post("/{class_id}/students", response_model=EnrollmentResponse, status_code=201, summary="Inscrire un élève")
def enroll_student(
    class_id: uuid.UUID,
    data: ClassEnrollRequest,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_teaching_staff),
):
    return class_service.enroll_student(db, class_id, data)


@router.delete("/{class_id}/students/{student_id}", status_code=204, summary="Désinscrire un élève")
def unenroll_student(
    class_id: uuid.UUID,
    student_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_teaching_staff),
):
    class_service.unenroll_student(db, class_id, student_id)
