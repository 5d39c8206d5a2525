"""
Service métier pour les élèves : inscription, consultation, mise à jour, suppression.

L'inscription enchaîne deux étapes qui ne partagent pas de transaction :
  1. création du compte de connexion (IdentityProvider, session propre)
  2. enregistrement de la fiche élève et de ses tags (session de la requête)
Si l'étape 2 échoue, le compte créé à l'étape 1 est supprimé (compensation).
"""

import logging
import uuid
from typing import List, Optional, Sequence

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from academy.auth.gate import can_view_all_students, ensure_can_view_student
from academy.auth.principal import Principal
from academy.auth.provisioning import IdentityProvider, release_identity
from academy.auth.roles import Role
from academy.config import settings
from academy.errors import DependencyFailure, DuplicateIdentifier, NotFound
from academy.models.assignment import Assignment, Submission
from academy.models.attendance import Attendance
from academy.models.class_session import ClassSession
from academy.models.parent import Parent
from academy.models.school_class import ClassAssistant, ClassStudent, SchoolClass
from academy.models.student import StatusLog, Student
from academy.models.tag import StudentTag
from academy.models.teacher import Teacher
from academy.models.user import User
from academy.schemas.student import (
    EnrollmentSummary,
    Pagination,
    ParentSummary,
    StatusLogResponse,
    StudentAttendanceEntry,
    StudentCreate,
    StudentCreatedResponse,
    StudentDetailResponse,
    StudentListResponse,
    StudentResponse,
    StudentSubmissionEntry,
    StudentUpdate,
)
from academy.schemas.tag import TagSummary
from academy.services.credentials import generate_student_credentials
from academy.services.grade import calculate_grade
from academy.services.tag_filter import TargetKind
from academy.services.tag_links import ensure_tags_exist, load_tags, replace_tags

logger = logging.getLogger(__name__)

RECENT_ATTENDANCE_LIMIT = 50


def student_email(login_id: str) -> str:
    """E-mail technique du compte de connexion d'un élève."""
    return f"{login_id}@{settings.STUDENT_EMAIL_DOMAIN}"


def create_student(db: Session, data: StudentCreate, identities: IdentityProvider) -> StudentCreatedResponse:
    """
    Inscrit un élève : génère ses identifiants, crée son compte puis sa fiche.
    Lève DuplicateIdentifier si l'identifiant généré est déjà pris,
    DependencyFailure si la fiche ne peut pas être enregistrée (le compte est alors supprimé).
    """
    credentials = generate_student_credentials(data.name, data.phone, data.birth_date, data.gender)

    taken = db.execute(
        select(Student.id).where(Student.login_id == credentials.login_id)
    ).scalar()
    if taken:
        raise DuplicateIdentifier(f"L'identifiant '{credentials.login_id}' est déjà attribué.")

    # Vérifications faites avant de créer le compte : rien à compenser si elles échouent
    tag_ids = ensure_tags_exist(db, data.tag_ids)
    if data.parent_id is not None and db.get(Parent, data.parent_id) is None:
        raise NotFound("Parent introuvable.")

    user_id = identities.create_identity(
        student_email(credentials.login_id),
        credentials.initial_password,
        data.name,
        Role.STUDENT,
    )

    try:
        student = Student(
            id=uuid.uuid4(),
            user_id=user_id,
            login_id=credentials.login_id,
            name=data.name,
            birth_date=data.birth_date,
            gender=data.gender,
            school=data.school,
            phone=data.phone,
            parent_id=data.parent_id,
        )
        db.add(student)
        db.flush()
        replace_tags(db, TargetKind.STUDENTS, student.id, tag_ids)
        db.commit()
    except Exception as exc:
        db.rollback()
        release_identity(identities, user_id)
        raise DependencyFailure("Enregistrement de la fiche élève impossible.") from exc

    logger.info("Élève inscrit : %s (%s)", credentials.login_id, student.id)
    db.refresh(student)
    return StudentCreatedResponse(
        student=_to_response(db, student),
        generated_login_id=credentials.login_id,
        generated_password=credentials.initial_password,
    )



def get_students(
    db: Session,
    principal: Principal,
    search: Optional[str] = None,
    enrollment_status: Optional[str] = None,
    tag_ids: Sequence[uuid.UUID] = (),
    page: int = 1,
    limit: int = 20,
) -> StudentListResponse:
    """
    Liste paginée des élèves visibles par le principal, les plus récents d'abord.
    Le filtre par tags retient les élèves portant au moins un des tags donnés.
    """
    conditions = _visibility_conditions(principal)
    if search:
        pattern = f"%{search}%"
        conditions.append(or_(Student.name.ilike(pattern), Student.school.ilike(pattern)))
    if enrollment_status:
        conditions.append(Student.enrollment_status == enrollment_status)
    if tag_ids:
        conditions.append(Student.id.in_(
            select(StudentTag.student_id).where(StudentTag.tag_id.in_(list(tag_ids)))
        ))

    total = db.execute(
        select(func.count()).select_from(Student).where(*conditions)
    ).scalar() or 0

    offset = (page - 1) * limit
    students = db.execute(
        select(Student)
        .where(*conditions)
        .order_by(Student.created_at.desc())
        .offset(offset)
        .limit(limit)
    ).scalars().all()

    tags = load_tags(db, TargetKind.STUDENTS, [s.id for s in students])
    return StudentListResponse(
        students=[_to_response(db, s, tags.get(s.id, [])) for s in students],
        pagination=Pagination(total=total, page=page, limit=limit, has_next=offset + limit < total),
    )


def _visibility_conditions(principal: Principal) -> list:
    """Restrictions de visibilité selon le rôle (aucune pour ADMIN/SENIOR_TEACHER/TEACHER)."""
    if can_view_all_students(principal):
        return []

    if principal.role == Role.STUDENT:
        return [Student.user_id == principal.id]

    if principal.role == Role.PARENT:
        return [Student.parent_id.in_(
            select(Parent.id).where(Parent.user_id == principal.id)
        )]

    if principal.role == Role.ASSISTANT:
        assisted_classes = (
            select(ClassAssistant.class_id)
            .join(Teacher, Teacher.id == ClassAssistant.teacher_id)
            .where(Teacher.user_id == principal.id)
        )
        return [Student.id.in_(
            select(ClassStudent.student_id).where(ClassStudent.class_id.in_(assisted_classes))
        )]

    return [Student.id.is_(None)]


def parent_child_ids(db: Session, principal: Principal) -> List[uuid.UUID]:
    """IDs des enfants rattachés au compte parent (liste vide pour les autres rôles)."""
    if principal.role != Role.PARENT:
        return []
    return list(db.execute(
        select(Student.id)
        .join(Parent, Parent.id == Student.parent_id)
        .where(Parent.user_id == principal.id)
    ).scalars().all())


def get_student_detail(db: Session, principal: Principal, student_id: uuid.UUID) -> StudentDetailResponse:
    """Fiche complète d'un élève : inscriptions, présences récentes, rendus, historique de statut."""
    student = db.get(Student, student_id)
    if student is None:
        raise NotFound("Élève introuvable.")
    ensure_can_view_student(principal, student.user_id, student.id, parent_child_ids(db, principal))

    enrollments = [
        EnrollmentSummary(
            class_id=school_class.id,
            class_name=school_class.name,
            is_active=school_class.is_active,
            enrolled_at=link.enrolled_at,
        )
        for link, school_class in db.execute(
            select(ClassStudent, SchoolClass)
            .join(SchoolClass, SchoolClass.id == ClassStudent.class_id)
            .where(ClassStudent.student_id == student_id)
            .order_by(ClassStudent.enrolled_at.desc())
        ).all()
    ]

    attendances = [
        StudentAttendanceEntry(
            id=attendance.id,
            session_id=session.id,
            session_date=session.session_date,
            class_name=class_name,
            status=attendance.status,
            notes=attendance.notes,
        )
        for attendance, session, class_name in db.execute(
            select(Attendance, ClassSession, SchoolClass.name)
            .join(ClassSession, ClassSession.id == Attendance.session_id)
            .join(SchoolClass, SchoolClass.id == ClassSession.class_id)
            .where(Attendance.student_id == student_id)
            .order_by(ClassSession.session_date.desc())
            .limit(RECENT_ATTENDANCE_LIMIT)
        ).all()
    ]

    submissions = [
        StudentSubmissionEntry(
            id=submission.id,
            assignment_id=assignment.id,
            title=assignment.title,
            status=submission.status,
            score=submission.score,
            max_score=assignment.max_score,
            submitted_at=submission.submitted_at,
            due_date=assignment.due_date,
        )
        for submission, assignment in db.execute(
            select(Submission, Assignment)
            .join(Assignment, Assignment.id == Submission.assignment_id)
            .where(Submission.student_id == student_id)
            .order_by(Assignment.due_date.desc())
        ).all()
    ]

    logs = db.execute(
        select(StatusLog)
        .where(StatusLog.student_id == student_id)
        .order_by(StatusLog.changed_at.desc())
    ).scalars().all()

    return StudentDetailResponse(
        student=_to_response(db, student),
        enrollments=enrollments,
        attendance_rate=attendance_rate([a.status for a in attendances]),
        attendances=attendances,
        submissions=submissions,
        status_logs=[StatusLogResponse.model_validate(log) for log in logs],
    )


def attendance_rate(statuses: Sequence[str]) -> float:
    """Pourcentage de présences (PRESENT) ; 0 sans aucune présence enregistrée."""
    if not statuses:
        return 0.0
    present = sum(1 for s in statuses if s == "PRESENT")
    return round(present * 100 / len(statuses), 1)


def update_student(db: Session, student_id: uuid.UUID, data: StudentUpdate) -> StudentResponse:
    """Met à jour les champs fournis ; les tags éventuels sont remplacés dans le même commit."""
    student = db.get(Student, student_id)
    if student is None:
        raise NotFound("Élève introuvable.")

    update_data = data.model_dump(exclude_unset=True)
    tag_ids = update_data.pop("tag_ids", None)

    if update_data.get("parent_id") is not None and db.get(Parent, update_data["parent_id"]) is None:
        raise NotFound("Parent introuvable.")

    for field, value in update_data.items():
        setattr(student, field, value)
    if tag_ids is not None:
        replace_tags(db, TargetKind.STUDENTS, student.id, tag_ids)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(student)
    return _to_response(db, student)


def delete_student(db: Session, student_id: uuid.UUID) -> None:
    """
    Suppression définitive (ADMIN) de la fiche et du compte de connexion, dans le même commit.
    Le journal de statut est conservé (student_id passe à NULL).
    """
    student = db.get(Student, student_id)
    if student is None:
        raise NotFound("Élève introuvable.")
    login_id = student.login_id
    user = db.get(User, student.user_id)

    db.delete(student)
    # la fiche référence le compte : elle doit partir avant lui
    db.flush()
    if user is not None:
        db.delete(user)
    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    logger.info("Élève %s (%s) supprimé définitivement", login_id, student_id)


def _to_response(db: Session, student: Student, tags: Optional[List[TagSummary]] = None) -> StudentResponse:
    """Convertit un modèle Student en StudentResponse, niveau scolaire recalculé."""
    if tags is None:
        tags = load_tags(db, TargetKind.STUDENTS, [student.id]).get(student.id, [])

    parent = db.get(Parent, student.parent_id) if student.parent_id else None

    class_count = db.execute(
        select(func.count()).select_from(ClassStudent).where(ClassStudent.student_id == student.id)
    ).scalar() or 0
    attendance_count = db.execute(
        select(func.count()).select_from(Attendance).where(Attendance.student_id == student.id)
    ).scalar() or 0

    return StudentResponse(
        id=student.id,
        login_id=student.login_id,
        name=student.name,
        birth_date=student.birth_date,
        gender=student.gender,
        school=student.school,
        phone=student.phone,
        grade=calculate_grade(student.birth_date),
        enrollment_status=student.enrollment_status,
        management_status=student.management_status,
        parent=ParentSummary.model_validate(parent) if parent else None,
        tags=tags,
        class_count=class_count,
        attendance_count=attendance_count,
        created_at=student.created_at,
    )
