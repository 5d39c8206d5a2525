"""
Transition du statut de suivi d'un élève (NORMAL ↔ CAUTION).

Le nouveau statut et la ligne de journal sont validés dans un seul commit :
un statut ne change jamais sans sa trace, et une trace n'existe jamais sans changement.
"""

import logging
import uuid

from sqlalchemy.orm import Session

from academy.auth.principal import Principal
from academy.errors import InvalidInput, NotFound
from academy.models.student import StatusLog, Student
from academy.schemas.student import StatusChangeResponse, StatusLogResponse, VALID_MANAGEMENT_STATUSES
from academy.services import student_service

logger = logging.getLogger(__name__)


def change_management_status(
    db: Session,
    student_id: uuid.UUID,
    new_status: str,
    reason: str,
    actor: Principal,
) -> StatusChangeResponse:
    """
    Change le statut de suivi et journalise le changement.
    Lève InvalidInput (motif vide, statut inconnu, statut inchangé) ou NotFound.
    """
    if not reason or not reason.strip():
        raise InvalidInput("Le motif du changement est obligatoire.")
    if new_status not in VALID_MANAGEMENT_STATUSES:
        raise InvalidInput(
            f"Statut invalide. Valeurs acceptées : {sorted(VALID_MANAGEMENT_STATUSES)}"
        )

    student = db.get(Student, student_id)
    if student is None:
        raise NotFound("Élève introuvable.")

    previous_status = student.management_status
    if previous_status == new_status:
        raise InvalidInput(f"L'élève est déjà au statut {new_status}.")

    log = StatusLog(
        id=uuid.uuid4(),
        student_id=student.id,
        previous_status=previous_status,
        new_status=new_status,
        reason=reason.strip(),
        changed_by=actor.id,
    )
    student.management_status = new_status
    db.add(log)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise

    logger.info(
        "Statut de l'élève %s : %s → %s (par %s)",
        student.id, previous_status, new_status, actor.email,
    )
    db.refresh(student)
    db.refresh(log)
    return StatusChangeResponse(
        student=student_service._to_response(db, student),
        status_log=StatusLogResponse.model_validate(log),
    )
