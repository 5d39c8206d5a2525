"""
Politique « supprimer ou désactiver » commune aux classes et aux séances.

Une entité qui possède des enregistrements dépendants (inscriptions, séances,
présences, devoirs) n'est jamais supprimée : elle est désactivée et l'appelant
en est informé. Sans dépendants, la suppression est définitive.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from academy.models.assignment import Assignment
from academy.models.attendance import Attendance
from academy.models.class_session import ClassSession
from academy.models.school_class import ClassStudent
from academy.schemas.deletion import DeletionResult

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeletionPolicy:
    label: str
    count_dependents: Callable[[Session, Any], int]
    deactivate: Callable[[Any], None]
    deactivated_message: str


def delete_or_deactivate(db: Session, entity: Any, policy: DeletionPolicy) -> DeletionResult:
    dependents = policy.count_dependents(db, entity)

    if dependents > 0:
        policy.deactivate(entity)
        db.commit()
        logger.info(
            "%s %s désactivé(e) au lieu d'être supprimé(e) (%d dépendant(s))",
            policy.label, entity.id, dependents,
        )
        return DeletionResult(
            id=entity.id,
            deleted=False,
            deactivated=True,
            dependents=dependents,
            message=policy.deactivated_message,
        )

    entity_id = entity.id
    db.delete(entity)
    db.commit()
    logger.info("%s %s supprimé(e) définitivement", policy.label, entity_id)
    return DeletionResult(
        id=entity_id,
        deleted=True,
        deactivated=False,
        dependents=0,
        message=f"{policy.label} supprimé(e) définitivement.",
    )


def _count(db: Session, column, value) -> int:
    return db.execute(
        select(func.count()).select_from(column.table).where(column == value)
    ).scalar() or 0


def _class_dependents(db: Session, school_class) -> int:
    return (
        _count(db, ClassStudent.class_id, school_class.id)
        + _count(db, ClassSession.class_id, school_class.id)
    )


def _session_dependents(db: Session, session) -> int:
    return (
        _count(db, Attendance.session_id, session.id)
        + _count(db, Assignment.session_id, session.id)
    )


def _deactivate_class(school_class) -> None:
    school_class.is_active = False


def _cancel_session(session) -> None:
    session.status = "CANCELLED"


CLASS_DELETION_POLICY = DeletionPolicy(
    label="Classe",
    count_dependents=_class_dependents,
    deactivate=_deactivate_class,
    deactivated_message="La classe a des élèves inscrits ou des séances : elle a été désactivée au lieu d'être supprimée.",
)

SESSION_DELETION_POLICY = DeletionPolicy(
    label="Séance",
    count_dependents=_session_dependents,
    deactivate=_cancel_session,
    deactivated_message="La séance a des présences ou des devoirs : elle a été annulée au lieu d'être supprimée.",
)
