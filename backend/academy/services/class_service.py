"""
Service métier pour les classes : création, mise à jour, inscriptions,
suppression ou désactivation.
"""

import logging
import uuid
from typing import List, Optional

from sqlalchemy import delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy.errors import Conflict, NotFound
from academy.models.attendance import Attendance
from academy.models.class_session import ClassSession
from academy.models.school_class import ClassAssistant, ClassStudent, SchoolClass
from academy.models.student import Student
from academy.models.tag import ClassTag
from academy.models.teacher import Teacher
from academy.schemas.deletion import DeletionResult
from academy.schemas.school_class import (
    ClassCreate,
    ClassDetailResponse,
    ClassEnrollRequest,
    ClassResponse,
    ClassSessionSummary,
    ClassStudentSummary,
    ClassUpdate,
    EnrollmentResponse,
)
from academy.schemas.tag import TagSummary
from academy.schemas.teacher import TeacherSummary
from academy.services.grade import calculate_grade
from academy.services.lifecycle import CLASS_DELETION_POLICY, delete_or_deactivate
from academy.services.tag_filter import TargetKind
from academy.services.tag_links import ensure_tags_exist, load_tags, replace_tags
from academy.services.teacher_service import ensure_teachers_exist

logger = logging.getLogger(__name__)

RECENT_SESSIONS_LIMIT = 10


def create_class(db: Session, data: ClassCreate) -> ClassResponse:
    """
    Crée une classe avec ses assistants et ses tags (un seul commit).
    Lève NotFound si l'enseignant principal, un assistant ou un tag n'existe pas.
    """
    if db.get(Teacher, data.main_teacher_id) is None:
        raise NotFound("Enseignant principal introuvable.")
    assistant_ids = ensure_teachers_exist(db, data.assistant_teacher_ids)
    tag_ids = ensure_tags_exist(db, data.tag_ids)

    school_class = SchoolClass(
        id=uuid.uuid4(),
        name=data.name,
        description=data.description,
        cost=data.cost,
        main_teacher_id=data.main_teacher_id,
        recurring_schedules=data.recurring_schedules,
    )
    db.add(school_class)
    db.flush()
    _replace_assistants(db, school_class.id, assistant_ids)
    replace_tags(db, TargetKind.CLASSES, school_class.id, tag_ids)
    db.commit()
    db.refresh(school_class)
    logger.info("Classe créée : %s (%s)", school_class.name, school_class.id)
    return _to_response(db, school_class)


def get_classes(
    db: Session,
    search: Optional[str] = None,
    teacher_id: Optional[uuid.UUID] = None,
    is_active: Optional[bool] = None,
    tag_id: Optional[uuid.UUID] = None,
) -> List[ClassResponse]:
    """Liste les classes, triées par nom. teacher_id couvre l'enseignant principal et les assistants."""
    query = select(SchoolClass).order_by(SchoolClass.name)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(SchoolClass.name.ilike(pattern), SchoolClass.description.ilike(pattern)))
    if teacher_id is not None:
        query = query.where(or_(
            SchoolClass.main_teacher_id == teacher_id,
            SchoolClass.id.in_(select(ClassAssistant.class_id).where(ClassAssistant.teacher_id == teacher_id)),
        ))
    if is_active is not None:
        query = query.where(SchoolClass.is_active.is_(is_active))
    if tag_id is not None:
        query = query.where(SchoolClass.id.in_(select(ClassTag.class_id).where(ClassTag.tag_id == tag_id)))

    classes = db.execute(query).scalars().all()
    tags = load_tags(db, TargetKind.CLASSES, [c.id for c in classes])
    return [_to_response(db, c, tags.get(c.id, [])) for c in classes]


def get_class(db: Session, class_id: uuid.UUID) -> ClassDetailResponse:
    """Fiche d'une classe avec ses élèves et ses dernières séances."""
    school_class = _get_or_404(db, class_id)
    base = _to_response(db, school_class)

    students = [
        ClassStudentSummary(
            id=student.id,
            login_id=student.login_id,
            name=student.name,
            grade=calculate_grade(student.birth_date),
            school=student.school,
            enrollment_status=student.enrollment_status,
            management_status=student.management_status,
            enrolled_at=enrolled_at,
        )
        for student, enrolled_at in db.execute(
            select(Student, ClassStudent.enrolled_at)
            .join(ClassStudent, ClassStudent.student_id == Student.id)
            .where(ClassStudent.class_id == class_id)
            .order_by(Student.name)
        ).all()
    ]

    attendance_count = (
        select(func.count())
        .select_from(Attendance)
        .where(Attendance.session_id == ClassSession.id)
        .scalar_subquery()
    )
    sessions = [
        ClassSessionSummary(
            id=session.id,
            session_date=session.session_date,
            start_time=session.start_time,
            end_time=session.end_time,
            status=session.status,
            attendance_count=count or 0,
        )
        for session, count in db.execute(
            select(ClassSession, attendance_count)
            .where(ClassSession.class_id == class_id)
            .order_by(ClassSession.session_date.desc())
            .limit(RECENT_SESSIONS_LIMIT)
        ).all()
    ]

    return ClassDetailResponse(**base.model_dump(), students=students, recent_sessions=sessions)


def update_class(db: Session, class_id: uuid.UUID, data: ClassUpdate) -> ClassResponse:
    """Met à jour les champs fournis ; assistants et tags sont remplacés dans le même commit."""
    school_class = _get_or_404(db, class_id)

    update_data = data.model_dump(exclude_unset=True)
    assistant_ids = update_data.pop("assistant_teacher_ids", None)
    tag_ids = update_data.pop("tag_ids", None)

    if update_data.get("main_teacher_id") is not None and db.get(Teacher, update_data["main_teacher_id"]) is None:
        raise NotFound("Enseignant principal introuvable.")

    for field, value in update_data.items():
        setattr(school_class, field, value)
    if assistant_ids is not None:
        _replace_assistants(db, class_id, ensure_teachers_exist(db, assistant_ids))
    if tag_ids is not None:
        replace_tags(db, TargetKind.CLASSES, class_id, tag_ids)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(school_class)
    return _to_response(db, school_class)


def delete_class(db: Session, class_id: uuid.UUID) -> DeletionResult:
    """Supprime la classe, ou la désactive si des élèves y sont inscrits ou si elle a des séances."""
    return delete_or_deactivate(db, _get_or_404(db, class_id), CLASS_DELETION_POLICY)


def enroll_student(db: Session, class_id: uuid.UUID, data: ClassEnrollRequest) -> EnrollmentResponse:
    """Inscrit un élève. Lève Conflict s'il est déjà inscrit dans cette classe."""
    school_class = _get_or_404(db, class_id)
    if not school_class.is_active:
        raise Conflict("Impossible d'inscrire un élève dans une classe désactivée.")
    if db.get(Student, data.student_id) is None:
        raise NotFound("Élève introuvable.")
    if db.get(ClassStudent, (class_id, data.student_id)) is not None:
        raise Conflict("Cet élève est déjà inscrit dans cette classe.")

    link = ClassStudent(class_id=class_id, student_id=data.student_id)
    db.add(link)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Cet élève est déjà inscrit dans cette classe.")
    db.refresh(link)
    return EnrollmentResponse.model_validate(link)


def unenroll_student(db: Session, class_id: uuid.UUID, student_id: uuid.UUID) -> None:
    """Désinscrit un élève ; NotFound si le lien n'existe pas."""
    link = db.get(ClassStudent, (class_id, student_id))
    if link is None:
        raise NotFound("Cet élève n'est pas inscrit dans cette classe.")
    db.delete(link)
    db.commit()


def _get_or_404(db: Session, class_id: uuid.UUID) -> SchoolClass:
    school_class = db.get(SchoolClass, class_id)
    if school_class is None:
        raise NotFound("Classe introuvable.")
    return school_class


def _replace_assistants(db: Session, class_id: uuid.UUID, teacher_ids: List[uuid.UUID]) -> None:
    db.execute(delete(ClassAssistant).where(ClassAssistant.class_id == class_id))
    if teacher_ids:
        db.bulk_insert_mappings(ClassAssistant, [
            {"class_id": class_id, "teacher_id": tid}
            for tid in teacher_ids
        ])


def _to_response(db: Session, school_class: SchoolClass, tags: Optional[List[TagSummary]] = None) -> ClassResponse:
    """Convertit un modèle SchoolClass en ClassResponse (compteurs, enseignants, tags)."""
    if tags is None:
        tags = load_tags(db, TargetKind.CLASSES, [school_class.id]).get(school_class.id, [])

    main_teacher = db.get(Teacher, school_class.main_teacher_id)
    assistants = db.execute(
        select(Teacher)
        .join(ClassAssistant, ClassAssistant.teacher_id == Teacher.id)
        .where(ClassAssistant.class_id == school_class.id)
        .order_by(Teacher.name)
    ).scalars().all()

    student_count = db.execute(
        select(func.count()).select_from(ClassStudent).where(ClassStudent.class_id == school_class.id)
    ).scalar() or 0
    session_count = db.execute(
        select(func.count()).select_from(ClassSession).where(ClassSession.class_id == school_class.id)
    ).scalar() or 0

    return ClassResponse(
        id=school_class.id,
        name=school_class.name,
        description=school_class.description,
        cost=school_class.cost,
        is_active=school_class.is_active,
        main_teacher=TeacherSummary.model_validate(main_teacher) if main_teacher else None,
        assistant_teachers=[TeacherSummary.model_validate(t) for t in assistants],
        recurring_schedules=school_class.recurring_schedules,
        student_count=student_count,
        session_count=session_count,
        tags=tags,
        created_at=school_class.created_at,
        updated_at=school_class.updated_at,
    )
