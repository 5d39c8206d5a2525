"""
Recherche d'entités par tags (POST /api/v1/search/by-tags).

La table entité → tags est chargée depuis la base, la sélection ET/OU est
faite par tag_filter.match_entities, puis les entités retenues sont
chargées et converties avec leurs tags.
"""

import uuid
from typing import Iterable, List

from sqlalchemy import select
from sqlalchemy.orm import Session

from academy.models.class_session import ClassSession
from academy.models.material import Material
from academy.models.school_class import SchoolClass
from academy.models.student import Student
from academy.schemas.search import TagSearchQuery, TagSearchResponse
from academy.services import class_service, material_service, session_service, student_service
from academy.services.tag_filter import TargetKind, match_entities, parse_query
from academy.services.tag_links import load_tags, tag_map


def search_by_tags(db: Session, tag_ids: Iterable[uuid.UUID], logic: str, target_type: str) -> TagSearchResponse:
    """
    Retourne les entités de `target_type` portant tous (AND) ou au moins un (OR) des tags.
    Lève InvalidInput si la requête est mal formée.
    """
    wanted, parsed_logic, target = parse_query(tag_ids, logic, target_type)

    matched_ids = match_entities(tag_map(db, target), wanted, parsed_logic)
    results = _load(db, target, matched_ids) if matched_ids else []

    return TagSearchResponse(
        results=results,
        count=len(results),
        query=TagSearchQuery(
            tag_ids=sorted(wanted, key=str),
            logic=parsed_logic.value,
            target_type=target.value,
        ),
    )


def _load(db: Session, target: TargetKind, ids: List[uuid.UUID]) -> list:
    tags = load_tags(db, target, ids)

    if target is TargetKind.STUDENTS:
        students = db.execute(
            select(Student).where(Student.id.in_(ids)).order_by(Student.name)
        ).scalars().all()
        return [student_service._to_response(db, s, tags.get(s.id, [])) for s in students]

    if target is TargetKind.CLASSES:
        classes = db.execute(
            select(SchoolClass).where(SchoolClass.id.in_(ids)).order_by(SchoolClass.name)
        ).scalars().all()
        return [class_service._to_response(db, c, tags.get(c.id, [])) for c in classes]

    if target is TargetKind.SESSIONS:
        sessions = db.execute(
            select(ClassSession).where(ClassSession.id.in_(ids)).order_by(ClassSession.session_date.desc())
        ).scalars().all()
        return [session_service._to_response(db, s, tags.get(s.id, [])) for s in sessions]

    materials = db.execute(
        select(Material).where(Material.id.in_(ids)).order_by(Material.created_at.desc())
    ).scalars().all()
    return [material_service._to_response(db, m, tags.get(m.id, [])) for m in materials]
