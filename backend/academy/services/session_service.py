"""
Service métier pour les séances de cours et leurs supports.
"""

import logging
import uuid
from datetime import date
from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy.auth.principal import Principal
from academy.errors import Conflict, InvalidInput, NotFound
from academy.models.assignment import Assignment
from academy.models.attendance import Attendance
from academy.models.class_session import ClassSession
from academy.models.material import Material, SessionMaterial
from academy.models.school_class import SchoolClass
from academy.schemas.class_session import (
    SessionCreate,
    SessionMaterialResponse,
    SessionResponse,
    SessionUpdate,
)
from academy.schemas.deletion import DeletionResult
from academy.schemas.tag import TagSummary
from academy.services.lifecycle import SESSION_DELETION_POLICY, delete_or_deactivate
from academy.services.tag_filter import TargetKind
from academy.services.tag_links import ensure_tags_exist, load_tags, replace_tags
from academy.services.teacher_service import get_teacher_profile

logger = logging.getLogger(__name__)


def create_session(db: Session, data: SessionCreate, principal: Principal) -> SessionResponse:
    """
    Planifie une séance pour une classe active.
    Le créateur est le profil enseignant du principal (NotFound s'il n'en a pas).
    """
    school_class = db.get(SchoolClass, data.class_id)
    if school_class is None:
        raise NotFound("Classe introuvable.")
    if not school_class.is_active:
        raise Conflict("Impossible de planifier une séance pour une classe désactivée.")

    teacher = get_teacher_profile(db, principal.id)
    tag_ids = ensure_tags_exist(db, data.tag_ids)

    session = ClassSession(
        id=uuid.uuid4(),
        class_id=data.class_id,
        session_date=data.session_date,
        start_time=data.start_time,
        end_time=data.end_time,
        location=data.location,
        notes=data.notes,
        status="SCHEDULED",
        created_by=teacher.id,
    )
    db.add(session)
    db.flush()
    replace_tags(db, TargetKind.SESSIONS, session.id, tag_ids)
    db.commit()
    db.refresh(session)
    return _to_response(db, session)


def get_sessions(
    db: Session,
    class_id: Optional[uuid.UUID] = None,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    status: Optional[str] = None,
) -> List[SessionResponse]:
    """Liste les séances, les plus récentes d'abord."""
    query = select(ClassSession).order_by(ClassSession.session_date.desc(), ClassSession.start_time)
    if class_id is not None:
        query = query.where(ClassSession.class_id == class_id)
    if date_from is not None:
        query = query.where(ClassSession.session_date >= date_from)
    if date_to is not None:
        query = query.where(ClassSession.session_date <= date_to)
    if status:
        query = query.where(ClassSession.status == status)

    sessions = db.execute(query).scalars().all()
    tags = load_tags(db, TargetKind.SESSIONS, [s.id for s in sessions])
    return [_to_response(db, s, tags.get(s.id, [])) for s in sessions]


def get_session(db: Session, session_id: uuid.UUID) -> SessionResponse:
    return _to_response(db, get_or_404(db, session_id))


def update_session(db: Session, session_id: uuid.UUID, data: SessionUpdate) -> SessionResponse:
    """Met à jour les champs fournis ; les tags éventuels sont remplacés dans le même commit."""
    session = get_or_404(db, session_id)

    update_data = data.model_dump(exclude_unset=True)
    tag_ids = update_data.pop("tag_ids", None)

    start = update_data.get("start_time", session.start_time)
    end = update_data.get("end_time", session.end_time)
    if end <= start:
        raise InvalidInput("L'heure de fin doit être postérieure à l'heure de début.")

    for field, value in update_data.items():
        setattr(session, field, value)
    if tag_ids is not None:
        replace_tags(db, TargetKind.SESSIONS, session_id, tag_ids)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(session)
    return _to_response(db, session)


def delete_session(db: Session, session_id: uuid.UUID) -> DeletionResult:
    """Supprime la séance, ou l'annule si elle a des présences ou des devoirs."""
    return delete_or_deactivate(db, get_or_404(db, session_id), SESSION_DELETION_POLICY)


def add_material(db: Session, session_id: uuid.UUID, material_id: uuid.UUID) -> SessionMaterialResponse:
    """Associe un support à une séance. Lève Conflict si le lien existe déjà."""
    get_or_404(db, session_id)
    if db.get(Material, material_id) is None:
        raise NotFound("Support introuvable.")
    if db.get(SessionMaterial, (session_id, material_id)) is not None:
        raise Conflict("Ce support est déjà associé à cette séance.")

    link = SessionMaterial(session_id=session_id, material_id=material_id)
    db.add(link)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Ce support est déjà associé à cette séance.")
    db.refresh(link)
    return SessionMaterialResponse.model_validate(link)


def remove_material(db: Session, session_id: uuid.UUID, material_id: uuid.UUID) -> None:
    link = db.get(SessionMaterial, (session_id, material_id))
    if link is None:
        raise NotFound("Ce support n'est pas associé à cette séance.")
    db.delete(link)
    db.commit()


def get_or_404(db: Session, session_id: uuid.UUID) -> ClassSession:
    session = db.get(ClassSession, session_id)
    if session is None:
        raise NotFound("Séance introuvable.")
    return session


def _to_response(db: Session, session: ClassSession, tags: Optional[List[TagSummary]] = None) -> SessionResponse:
    """Convertit un modèle ClassSession en SessionResponse."""
    if tags is None:
        tags = load_tags(db, TargetKind.SESSIONS, [session.id]).get(session.id, [])

    class_name = db.execute(
        select(SchoolClass.name).where(SchoolClass.id == session.class_id)
    ).scalar()
    attendance_count = db.execute(
        select(func.count()).select_from(Attendance).where(Attendance.session_id == session.id)
    ).scalar() or 0
    assignment_count = db.execute(
        select(func.count()).select_from(Assignment).where(Assignment.session_id == session.id)
    ).scalar() or 0

    return SessionResponse(
        id=session.id,
        class_id=session.class_id,
        class_name=class_name,
        session_date=session.session_date,
        start_time=session.start_time,
        end_time=session.end_time,
        location=session.location,
        status=session.status,
        notes=session.notes,
        created_by=session.created_by,
        attendance_count=attendance_count,
        assignment_count=assignment_count,
        tags=tags,
        created_at=session.created_at,
        updated_at=session.updated_at,
    )
