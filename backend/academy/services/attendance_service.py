"""
Service métier pour l'appel des séances (saisie groupée des présences).
"""

import logging
import uuid
from typing import List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from academy.auth.principal import Principal
from academy.errors import InvalidInput
from academy.models.attendance import Attendance
from academy.models.school_class import ClassStudent
from academy.schemas.attendance import AttendanceBatch, AttendanceResponse
from academy.services.session_service import get_or_404
from academy.services.teacher_service import get_teacher_profile

logger = logging.getLogger(__name__)


def record_attendance(
    db: Session,
    session_id: uuid.UUID,
    data: AttendanceBatch,
    principal: Principal,
) -> List[AttendanceResponse]:
    """
    Enregistre l'appel d'une séance.
    Une présence déjà saisie pour (séance, élève) est mise à jour, sinon elle est créée.
    Tous les élèves doivent être inscrits dans la classe de la séance.
    """
    session = get_or_404(db, session_id)
    teacher = get_teacher_profile(db, principal.id)

    student_ids = [entry.student_id for entry in data.attendances]
    if len(set(student_ids)) != len(student_ids):
        raise InvalidInput("Un élève apparaît plusieurs fois dans l'appel.")

    enrolled = set(db.execute(
        select(ClassStudent.student_id).where(ClassStudent.class_id == session.class_id)
    ).scalars().all())
    not_enrolled = [str(sid) for sid in student_ids if sid not in enrolled]
    if not_enrolled:
        raise InvalidInput(
            "Élève(s) non inscrit(s) dans la classe de cette séance.",
            details={"student_ids": not_enrolled},
        )

    existing = {
        a.student_id: a
        for a in db.execute(
            select(Attendance).where(
                Attendance.session_id == session_id,
                Attendance.student_id.in_(student_ids),
            )
        ).scalars().all()
    }

    records = []
    for entry in data.attendances:
        record = existing.get(entry.student_id)
        if record is None:
            record = Attendance(id=uuid.uuid4(), session_id=session_id, student_id=entry.student_id)
            db.add(record)
        record.status = entry.status
        record.notes = entry.notes
        record.checked_by = teacher.id
        record.checked_at = func.now()
        records.append(record)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info("Appel enregistré pour la séance %s (%d élève(s))", session_id, len(records))
    for record in records:
        db.refresh(record)
    return [AttendanceResponse.model_validate(r) for r in records]


def get_attendance(db: Session, session_id: uuid.UUID) -> List[AttendanceResponse]:
    get_or_404(db, session_id)
    records = db.execute(
        select(Attendance)
        .where(Attendance.session_id == session_id)
        .order_by(Attendance.created_at)
    ).scalars().all()
    return [AttendanceResponse.model_validate(r) for r in records]
