"""
Service métier pour les enseignants (profils du personnel).
"""

import uuid
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from academy.errors import NotFound
from academy.models.school_class import ClassAssistant, SchoolClass
from academy.models.teacher import Teacher
from academy.models.user import User
from academy.schemas.teacher import TeacherResponse


def get_teachers(
    db: Session,
    search: Optional[str] = None,
    role: Optional[str] = None,
) -> List[TeacherResponse]:
    """Liste les enseignants actifs, filtrés par nom/e-mail et par rôle, triés par nom."""
    query = (
        select(Teacher, User)
        .join(User, User.id == Teacher.user_id)
        .where(User.is_active.is_(True))
        .order_by(Teacher.name)
    )
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Teacher.name.ilike(pattern), User.email.ilike(pattern)))
    if role:
        query = query.where(User.role == role)

    rows = db.execute(query).all()
    return [_to_response(db, teacher, user) for teacher, user in rows]


def get_teacher_profile(db: Session, user_id: uuid.UUID) -> Teacher:
    """Profil enseignant lié à un compte ; NotFound si le compte n'en a pas."""
    teacher = db.execute(select(Teacher).where(Teacher.user_id == user_id)).scalar()
    if teacher is None:
        raise NotFound("Aucun profil enseignant pour ce compte.")
    return teacher


def ensure_teachers_exist(db: Session, teacher_ids) -> List[uuid.UUID]:
    wanted = list(dict.fromkeys(teacher_ids))
    if not wanted:
        return []
    found = set(db.execute(select(Teacher.id).where(Teacher.id.in_(wanted))).scalars().all())
    missing = [str(t) for t in wanted if t not in found]
    if missing:
        raise NotFound(f"Enseignant(s) introuvable(s) : {', '.join(missing)}")
    return wanted


def _to_response(db: Session, teacher: Teacher, user: User) -> TeacherResponse:
    main_count = db.execute(
        select(func.count()).select_from(SchoolClass).where(SchoolClass.main_teacher_id == teacher.id)
    ).scalar() or 0
    assistant_count = db.execute(
        select(func.count()).select_from(ClassAssistant).where(ClassAssistant.teacher_id == teacher.id)
    ).scalar() or 0
    return TeacherResponse(
        id=teacher.id,
        user_id=teacher.user_id,
        name=teacher.name,
        phone=teacher.phone,
        specialties=teacher.specialties or [],
        email=user.email,
        role=user.role,
        main_class_count=main_count,
        assistant_class_count=assistant_count,
    )
