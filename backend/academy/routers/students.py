"""
Router pour la gestion des élèves.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from academy.auth.dependencies import require_any_role, require_authenticated, require_role
from academy.auth.principal import Principal
from academy.auth.provisioning import IdentityProvider, get_identity_provider
from academy.auth.roles import MANAGERS, Role
from academy.config import settings
from academy.database import get_db
from academy.schemas.student import (
    StatusChangeRequest,
    StatusChangeResponse,
    StudentCreate,
    StudentCreatedResponse,
    StudentDetailResponse,
    StudentListResponse,
    StudentResponse,
    StudentUpdate,
)
from academy.services import status_service, student_service

router = APIRouter(prefix="/api/v1/students", tags=["Élèves"])

require_managers = require_any_role(*MANAGERS)


@router.post("", response_model=StudentCreatedResponse, status_code=201, summary="Inscrire un élève")
def create_student(
    data: StudentCreate,
    db: Session = Depends(get_db),
    identities: IdentityProvider = Depends(get_identity_provider),
    _: Principal = Depends(require_managers),
):
    """
    Inscrit un élève et crée son compte de connexion.
    L'identifiant (nom + 5 derniers chiffres du téléphone) et le mot de passe initial
    (date de naissance AAMMJJ + chiffre du sexe) sont retournés une seule fois.
    """
    return student_service.create_student(db, data, identities)


@router.get("", response_model=StudentListResponse, summary="Lister les élèves")
def list_students(
    search: Optional[str] = None,
    status: Optional[str] = None,
    tags: Optional[List[uuid.UUID]] = Query(default=None),
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=settings.DEFAULT_PAGE_SIZE, ge=1, le=settings.MAX_PAGE_SIZE),
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_authenticated()),
):
    """Liste paginée, restreinte selon le rôle (élève : lui-même, parent : ses enfants, assistant : ses classes)."""
    return student_service.get_students(
        db,
        principal,
        search=search,
        enrollment_status=status,
        tag_ids=tags or [],
        page=page,
        limit=limit,
    )


@router.get("/{student_id}", response_model=StudentDetailResponse, summary="Fiche d'un élève")
def get_student(
    student_id: uuid.UUID,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_authenticated()),
):
    return student_service.get_student_detail(db, principal, student_id)


@router.put("/{student_id}", response_model=StudentResponse, summary="Modifier un élève")
def update_student(
    student_id: uuid.UUID,
    data: StudentUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_managers),
):
    return student_service.update_student(db, student_id, data)


@router.delete("/{student_id}", status_code=204, summary="Supprimer un élève")
def delete_student(
    student_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_role(Role.ADMIN)),
):
    student_service.delete_student(db, student_id)


@router.post("/{student_id}/status", response_model=StatusChangeResponse, summary="Changer le statut de suivi")
def change_status(
    student_id: uuid.UUID,
    data: StatusChangeRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_managers),
):
    """Passe un élève de NORMAL à CAUTION (ou l'inverse). Le motif est obligatoire et journalisé."""
    return status_service.change_management_status(db, student_id, data.new_status, data.reason, principal)
