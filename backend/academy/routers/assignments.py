"""
Router pour les devoirs, les rendus et la notation.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.auth.dependencies import require_any_role, require_authenticated, require_role
from academy.auth.principal import Principal
from academy.auth.roles import Role
from academy.database import get_db
from academy.schemas.assignment import (
    AssignmentCreate,
    AssignmentDeleteResult,
    AssignmentResponse,
    AssignmentUpdate,
    GradeRequest,
    SubmissionCreate,
    SubmissionResponse,
)
from academy.services import assignment_service

router = APIRouter(prefix="/api/v1/assignments", tags=["Devoirs"])


@router.post("", response_model=AssignmentResponse, status_code=201, summary="Créer un devoir")
def create_assignment(
    data: AssignmentCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(Role.TEACHER)),
):
    return assignment_service.create_assignment(db, data, principal)


@router.get("", response_model=List[AssignmentResponse], summary="Lister les devoirs")
def list_assignments(
    session_id: Optional[uuid.UUID] = None,
    class_id: Optional[uuid.UUID] = None,
    search: Optional[str] = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_authenticated()),
):
    return assignment_service.get_assignments(db, session_id=session_id, class_id=class_id, search=search)


@router.get("/{assignment_id}", response_model=AssignmentResponse, summary="Détail d'un devoir")
def get_assignment(assignment_id: uuid.UUID, db: Session = Depends(get_db), _: Principal = Depends(require_authenticated())):
    return assignment_service.get_assignment(db, assignment_id)


@router.put("/{assignment_id}", response_model=AssignmentResponse, summary="Modifier un devoir")
def update_assignment(
    assignment_id: uuid.UUID,
    data: AssignmentUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_role(Role.TEACHER)),
):
    return assignment_service.update_assignment(db, assignment_id, data)


@router.delete("/{assignment_id}", response_model=AssignmentDeleteResult, summary="Supprimer un devoir")
def delete_assignment(
    assignment_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_role(Role.TEACHER)),
):
    """Supprime le devoir et tous ses rendus."""
    return assignment_service.delete_assignment(db, assignment_id)


# --- Rendus ---

@router.post(
    "/{assignment_id}/submissions",
    response_model=SubmissionResponse,
    status_code=201,
    summary="Déposer un rendu",
)
def submit(
    assignment_id: uuid.UUID,
    data: SubmissionCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_any_role(
        Role.ADMIN, Role.SENIOR_TEACHER, Role.TEACHER, Role.ASSISTANT, Role.STUDENT,
    )),
):
    """Un élève ne peut déposer que son propre rendu ; le personnel peut déposer pour un élève."""
    return assignment_service.submit(db, assignment_id, data, principal)


@router.get("/{assignment_id}/submissions", response_model=List[SubmissionResponse], summary="Lister les rendus")
def list_submissions(
    assignment_id: uuid.UUID,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_role(Role.ASSISTANT)),
):
    return assignment_service.get_submissions(db, assignment_id, status=status)


@router.put(
    "/{assignment_id}/submissions/{submission_id}",
    response_model=SubmissionResponse,
    summary="Noter un rendu",
)
def grade(
    assignment_id: uuid.UUID,
    submission_id: uuid.UUID,
    data: GradeRequest,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(Role.ASSISTANT)),
):
    return assignment_service.grade(db, assignment_id, submission_id, data, principal)
