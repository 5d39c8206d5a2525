"""
Service métier pour les tags : CRUD, règle de suppression et statistiques.

Un tag encore attaché à un élève, une classe, une séance ou un support
ne peut pas être supprimé (Conflict avec le détail par type d'entité).
"""

import logging
import uuid
from typing import Dict, List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from academy.config import settings
from academy.errors import Conflict, NotFound
from academy.models.class_session import ClassSession
from academy.models.material import Material
from academy.models.school_class import SchoolClass
from academy.models.student import Student
from academy.models.tag import Tag
from academy.schemas.tag import KindCounts, TagCreate, TagResponse, TagStatsResponse, TagUpdate, TagUsageResponse
from academy.services.tag_filter import TargetKind, summarize_tag_usage
from academy.services.tag_links import LINK_TABLES

logger = logging.getLogger(__name__)

ENTITY_MODELS = {
    TargetKind.STUDENTS: Student,
    TargetKind.CLASSES: SchoolClass,
    TargetKind.SESSIONS: ClassSession,
    TargetKind.MATERIALS: Material,
}

TAG_SORTS = {"name", "usage"}


def create_tag(db: Session, data: TagCreate) -> TagResponse:
    """Crée un tag. Lève Conflict si le nom existe déjà."""
    if db.execute(select(Tag.id).where(Tag.name == data.name)).scalar():
        raise Conflict(f"Un tag nommé '{data.name}' existe déjà.")

    tag = Tag(
        id=uuid.uuid4(),
        name=data.name,
        color=data.color,
        category=data.category,
        description=data.description,
    )
    db.add(tag)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict(f"Un tag nommé '{data.name}' existe déjà.")
    db.refresh(tag)
    return TagResponse.model_validate(tag)


def get_tags(
    db: Session,
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: str = "name",
) -> List[TagUsageResponse]:
    """Liste les tags avec leur utilisation, triés par nom ou par utilisation décroissante."""
    query = select(Tag).order_by(Tag.name)
    if category:
        query = query.where(Tag.category == category)
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Tag.name.ilike(pattern), Tag.description.ilike(pattern)))

    usage = _usage_by_kind(db)
    tags = [_to_usage(tag, usage) for tag in db.execute(query).scalars().all()]
    if sort == "usage":
        tags.sort(key=lambda t: t.usage_count, reverse=True)
    return tags


def get_tag(db: Session, tag_id: uuid.UUID) -> TagUsageResponse:
    return _to_usage(_get_or_404(db, tag_id), _usage_by_kind(db, tag_id))


def update_tag(db: Session, tag_id: uuid.UUID, data: TagUpdate) -> TagResponse:
    tag = _get_or_404(db, tag_id)
    update_data = data.model_dump(exclude_unset=True)

    new_name = update_data.get("name")
    if new_name and new_name != tag.name:
        if db.execute(select(Tag.id).where(Tag.name == new_name, Tag.id != tag_id)).scalar():
            raise Conflict(f"Un tag nommé '{new_name}' existe déjà.")

    for field, value in update_data.items():
        setattr(tag, field, value)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("Un tag avec ce nom existe déjà.")
    db.refresh(tag)
    return TagResponse.model_validate(tag)


def delete_tag(db: Session, tag_id: uuid.UUID) -> None:
    """Supprime un tag inutilisé ; sinon Conflict avec l'utilisation par type d'entité."""
    tag = _get_or_404(db, tag_id)
    breakdown = _breakdown(_usage_by_kind(db, tag_id), tag_id)
    usage_count = breakdown.grand_total()
    if usage_count > 0:
        raise Conflict(
            f"Le tag '{tag.name}' est utilisé {usage_count} fois et ne peut pas être supprimé.",
            details={"usage_count": usage_count, "breakdown": breakdown.model_dump()},
        )

    name = tag.name
    db.delete(tag)
    db.commit()
    logger.info("Tag '%s' (%s) supprimé", name, tag_id)


def get_stats(db: Session, top_n: Optional[int] = None) -> TagStatsResponse:
    """Statistiques globales d'utilisation des tags."""
    usage = _usage_by_kind(db)
    tags = db.execute(select(Tag).order_by(Tag.created_at)).scalars().all()

    totals = KindCounts(**{
        kind.value: db.execute(select(func.count()).select_from(model)).scalar() or 0
        for kind, model in ENTITY_MODELS.items()
    })
    tagged = KindCounts(**{
        kind.value: db.execute(
            select(func.count(func.distinct(getattr(link, column))))
        ).scalar() or 0
        for kind, (link, column) in LINK_TABLES.items()
    })

    return summarize_tag_usage(
        [_to_usage(tag, usage) for tag in tags],
        totals,
        tagged,
        top_n=top_n or settings.TAG_STATS_TOP_N,
    )


def _get_or_404(db: Session, tag_id: uuid.UUID) -> Tag:
    tag = db.get(Tag, tag_id)
    if tag is None:
        raise NotFound("Tag introuvable.")
    return tag


def _usage_by_kind(db: Session, tag_id: Optional[uuid.UUID] = None) -> Dict[TargetKind, Dict[uuid.UUID, int]]:
    """Nombre d'associations par type d'entité puis par tag (limité à un tag si tag_id est fourni)."""
    usage = {}
    for kind, (link, _) in LINK_TABLES.items():
        query = select(link.tag_id, func.count()).group_by(link.tag_id)
        if tag_id is not None:
            query = query.where(link.tag_id == tag_id)
        usage[kind] = dict(db.execute(query).all())
    return usage


def _breakdown(usage: Dict[TargetKind, Dict[uuid.UUID, int]], tag_id: uuid.UUID) -> KindCounts:
    return KindCounts(**{kind.value: counts.get(tag_id, 0) for kind, counts in usage.items()})


def _to_usage(tag: Tag, usage: Dict[TargetKind, Dict[uuid.UUID, int]]) -> TagUsageResponse:
    breakdown = _breakdown(usage, tag.id)
    return TagUsageResponse(
        id=tag.id,
        name=tag.name,
        color=tag.color,
        category=tag.category,
        description=tag.description,
        usage_count=breakdown.grand_total(),
        breakdown=breakdown,
        created_at=tag.created_at,
    )
