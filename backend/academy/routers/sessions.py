"""
Router pour les séances de cours : planification, appel, supports.
"""

import uuid
from datetime import date
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.auth.dependencies import require_any_role, require_authenticated, require_role
from academy.auth.principal import Principal
from academy.auth.roles import MANAGERS, Role
from academy.database import get_db
from academy.schemas.attendance import AttendanceBatch, AttendanceResponse
from academy.schemas.class_session import (
    SessionCreate,
    SessionMaterialLink,
    SessionMaterialResponse,
    SessionResponse,
    SessionUpdate,
)
from academy.schemas.deletion import DeletionResult
from academy.services import attendance_service, session_service

router = APIRouter(prefix="/api/v1/sessions", tags=["Séances"])


@router.post("", response_model=SessionResponse, status_code=201, summary="Planifier une séance")
def create_session(
    data: SessionCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(Role.TEACHER)),
):
    return session_service.create_session(db, data, principal)


@router.get("", response_model=List[SessionResponse], summary="Lister les séances")
def list_sessions(
    class_id: Optional[uuid.UUID] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    status: Optional[str] = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_authenticated()),
):
    return session_service.get_sessions(db, class_id=class_id, date_from=date_from, date_to=date_to, status=status)


@router.get("/{session_id}", response_model=SessionResponse, summary="Détail d'une séance")
def get_session(session_id: uuid.UUID, db: Session = Depends(get_db), _: Principal = Depends(require_authenticated())):
    return session_service.get_session(db, session_id)


@router.put("/{session_id}", response_model=SessionResponse, summary="Modifier une séance")
def update_session(
    session_id: uuid.UUID,
    data: SessionUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_role(Role.TEACHER)),
):
    return session_service.update_session(db, session_id, data)


@router.delete("/{session_id}", response_model=DeletionResult, summary="Supprimer une séance")
def delete_session(
    session_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_any_role(*MANAGERS)),
):
    """Une séance avec des présences ou des devoirs est annulée au lieu d'être supprimée."""
    return session_service.delete_session(db, session_id)


# --- Appel ---

@router.post("/{session_id}/attendance", response_model=List[AttendanceResponse], summary="Faire l'appel")
def record_attendance(
    session_id: uuid.UUID,
    data: AttendanceBatch,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(Role.ASSISTANT)),
):
    return attendance_service.record_attendance(db, session_id, data, principal)


@router.get("/{session_id}/attendance", response_model=List[AttendanceResponse], summary="Présences d'une séance")
def get_attendance(session_id: uuid.UUID, db: Session = Depends(get_db), _: Principal = Depends(require_role(Role.ASSISTANT))):
    return attendance_service.get_attendance(db, session_id)


# --- Supports ---

@router.post(
    "/{session_id}/materials",
    response_model=SessionMaterialResponse,
    status_code=201,
    summary="Associer un support",
)
def add_material(
    session_id: uuid.UUID,
    data: SessionMaterialLink,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_role(Role.ASSISTANT)),
):
    return session_service.add_material(db, session_id, data.material_id)


@router.delete("/{session_id}/materials/{material_id}", status_code=204, summary="Retirer un support")
def remove_material(
    session_id: uuid.UUID,
    material_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_role(Role.ASSISTANT)),
):
    session_service.remove_material(db, session_id, material_id)
