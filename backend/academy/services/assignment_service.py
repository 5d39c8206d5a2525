"""
Service métier pour les devoirs : création, rendus des élèves et notation.
"""

import logging
import uuid
from datetime import datetime
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy.auth.principal import Principal
from academy.auth.roles import Role
from academy.errors import Conflict, Forbidden, InvalidInput, NotFound
from academy.models.assignment import Assignment, Submission
from academy.models.class_session import ClassSession
from academy.models.school_class import ClassStudent
from academy.models.student import Student
from academy.schemas.assignment import (
    AssignmentCreate,
    AssignmentDeleteResult,
    AssignmentResponse,
    AssignmentUpdate,
    GradeRequest,
    SubmissionCreate,
    SubmissionResponse,
)
from academy.services.session_service import get_or_404 as get_session_or_404
from academy.services.teacher_service import get_teacher_profile

logger = logging.getLogger(__name__)


def create_assignment(db: Session, data: AssignmentCreate, principal: Principal) -> AssignmentResponse:
    get_session_or_404(db, data.session_id)
    teacher = get_teacher_profile(db, principal.id)

    assignment = Assignment(
        id=uuid.uuid4(),
        session_id=data.session_id,
        title=data.title,
        description=data.description,
        due_date=data.due_date,
        max_score=data.max_score,
        created_by=teacher.id,
    )
    db.add(assignment)
    db.commit()
    db.refresh(assignment)
    return _to_response(db, assignment)


def get_assignments(
    db: Session,
    session_id: Optional[uuid.UUID] = None,
    class_id: Optional[uuid.UUID] = None,
    search: Optional[str] = None,
) -> List[AssignmentResponse]:
    """Liste les devoirs par échéance décroissante."""
    query = select(Assignment).order_by(Assignment.due_date.desc())
    if session_id is not None:
        query = query.where(Assignment.session_id == session_id)
    if class_id is not None:
        query = query.where(Assignment.session_id.in_(
            select(ClassSession.id).where(ClassSession.class_id == class_id)
        ))
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Assignment.title.ilike(pattern), Assignment.description.ilike(pattern)))

    return [_to_response(db, a) for a in db.execute(query).scalars().all()]


def get_assignment(db: Session, assignment_id: uuid.UUID) -> AssignmentResponse:
    return _to_response(db, _get_or_404(db, assignment_id))


def update_assignment(db: Session, assignment_id: uuid.UUID, data: AssignmentUpdate) -> AssignmentResponse:
    assignment = _get_or_404(db, assignment_id)
    for field, value in data.model_dump(exclude_unset=True).items():
        setattr(assignment, field, value)
    db.commit()
    db.refresh(assignment)
    return _to_response(db, assignment)


def delete_assignment(db: Session, assignment_id: uuid.UUID) -> AssignmentDeleteResult:
    """Supprime le devoir et ses rendus ; retourne le nombre de rendus supprimés."""
    assignment = _get_or_404(db, assignment_id)
    removed = _count_submissions(db, assignment_id)
    db.delete(assignment)
    db.commit()
    logger.info("Devoir %s supprimé (%d rendu(s))", assignment_id, removed)
    return AssignmentDeleteResult(id=assignment_id, removed_submissions=removed)


def submit(db: Session, assignment_id: uuid.UUID, data: SubmissionCreate, principal: Principal) -> SubmissionResponse:
    """
    Dépose le rendu d'un élève. Un élève ne peut rendre que pour lui-même ;
    l'élève doit être inscrit dans la classe de la séance. Un second dépôt est refusé.
    """
    assignment = _get_or_404(db, assignment_id)
    student = db.get(Student, data.student_id)
    if student is None:
        raise NotFound("Élève introuvable.")
    if principal.role == Role.STUDENT and student.user_id != principal.id:
        raise Forbidden("Un élève ne peut déposer un rendu que pour lui-même.")

    session = get_session_or_404(db, assignment.session_id)
    if db.get(ClassStudent, (session.class_id, student.id)) is None:
        raise InvalidInput("L'élève n'est pas inscrit dans la classe de ce devoir.")

    submission = Submission(
        id=uuid.uuid4(),
        assignment_id=assignment_id,
        student_id=student.id,
        status="SUBMITTED",
        file_url=data.file_url,
        submitted_at=datetime.now(),
    )
    db.add(submission)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Un rendu existe déjà pour cet élève.")
    db.refresh(submission)
    return SubmissionResponse.model_validate(submission)


def grade(
    db: Session,
    assignment_id: uuid.UUID,
    submission_id: uuid.UUID,
    data: GradeRequest,
    principal: Principal,
) -> SubmissionResponse:
    """Note un rendu. La note ne peut pas dépasser la note maximale du devoir."""
    assignment = _get_or_404(db, assignment_id)
    submission = db.get(Submission, submission_id)
    if submission is None or submission.assignment_id != assignment_id:
        raise NotFound("Rendu introuvable.")
    if data.score is not None and assignment.max_score is not None and data.score > assignment.max_score:
        raise InvalidInput(f"La note ne peut pas dépasser {assignment.max_score}.")

    teacher = get_teacher_profile(db, principal.id)
    submission.score = data.score
    submission.feedback = data.feedback
    submission.status = "GRADED"
    submission.graded_at = datetime.now()
    submission.graded_by = teacher.id
    db.commit()
    db.refresh(submission)
    return SubmissionResponse.model_validate(submission)


def get_submissions(db: Session, assignment_id: uuid.UUID, status: Optional[str] = None) -> List[SubmissionResponse]:
    _get_or_404(db, assignment_id)
    query = (
        select(Submission)
        .where(Submission.assignment_id == assignment_id)
        .order_by(Submission.submitted_at.desc())
    )
    if status:
        query = query.where(Submission.status == status)
    return [SubmissionResponse.model_validate(s) for s in db.execute(query).scalars().all()]


def _get_or_404(db: Session, assignment_id: uuid.UUID) -> Assignment:
    assignment = db.get(Assignment, assignment_id)
    if assignment is None:
        raise NotFound("Devoir introuvable.")
    return assignment


def _count_submissions(db: Session, assignment_id: uuid.UUID) -> int:
    return db.execute(
        select(func.count()).select_from(Submission).where(Submission.assignment_id == assignment_id)
    ).scalar() or 0


def _to_response(db: Session, assignment: Assignment) -> AssignmentResponse:
    return AssignmentResponse(
        id=assignment.id,
        session_id=assignment.session_id,
        title=assignment.title,
        description=assignment.description,
        due_date=assignment.due_date,
        max_score=assignment.max_score,
        created_by=assignment.created_by,
        submission_count=_count_submissions(db, assignment.id),
        created_at=assignment.created_at,
        updated_at=assignment.updated_at,
    )
