"""
Accès aux associations tag ↔ entité (élèves, classes, séances, supports).

replace_tags ne valide pas la transaction : l'appelant regroupe la suppression
et la réinsertion des liens avec ses propres modifications dans un seul commit.
"""

import uuid
from collections import defaultdict
from typing import Dict, Iterable, List, Set

from sqlalchemy import delete, select
from sqlalchemy.orm import Session

from academy.errors import NotFound
from academy.models.tag import ClassTag, MaterialTag, SessionTag, StudentTag, Tag
from academy.schemas.tag import TagSummary
from academy.services.tag_filter import TargetKind

# type d'entité → (modèle d'association, nom de la colonne entité)
LINK_TABLES = {
    TargetKind.STUDENTS: (StudentTag, "student_id"),
    TargetKind.CLASSES: (ClassTag, "class_id"),
    TargetKind.SESSIONS: (SessionTag, "session_id"),
    TargetKind.MATERIALS: (MaterialTag, "material_id"),
}


def _link(kind: TargetKind):
    model, column_name = LINK_TABLES[kind]
    return model, getattr(model, column_name), column_name


def ensure_tags_exist(db: Session, tag_ids: Iterable[uuid.UUID]) -> List[uuid.UUID]:
    """Dédoublonne les IDs (ordre conservé) et vérifie qu'ils existent tous."""
    wanted = list(dict.fromkeys(tag_ids))
    if not wanted:
        return []
    found = set(db.execute(select(Tag.id).where(Tag.id.in_(wanted))).scalars().all())
    missing = [str(t) for t in wanted if t not in found]
    if missing:
        raise NotFound(f"Tag(s) introuvable(s) : {', '.join(missing)}")
    return wanted


def replace_tags(db: Session, kind: TargetKind, entity_id: uuid.UUID, tag_ids: Iterable[uuid.UUID]) -> None:
    """Remplace l'ensemble des tags d'une entité (suppression puis réinsertion)."""
    model, column, column_name = _link(kind)
    wanted = ensure_tags_exist(db, tag_ids)

    db.execute(delete(model).where(column == entity_id))
    if wanted:
        db.bulk_insert_mappings(model, [
            {column_name: entity_id, "tag_id": tid}
            for tid in wanted
        ])


def load_tags(db: Session, kind: TargetKind, entity_ids: Iterable[uuid.UUID]) -> Dict[uuid.UUID, List[TagSummary]]:
    """Retourne les tags de chaque entité demandée, triés par nom."""
    ids = list(entity_ids)
    result: Dict[uuid.UUID, List[TagSummary]] = defaultdict(list)
    if not ids:
        return result

    model, column, _ = _link(kind)
    rows = db.execute(
        select(column, Tag)
        .join(Tag, Tag.id == model.tag_id)
        .where(column.in_(ids))
        .order_by(Tag.name)
    ).all()
    for entity_id, tag in rows:
        result[entity_id].append(TagSummary.model_validate(tag))
    return result


def tag_map(db: Session, kind: TargetKind) -> Dict[uuid.UUID, Set[uuid.UUID]]:
    """Table entité → ensemble des IDs de tags, pour toutes les entités taguées du type."""
    model, column, _ = _link(kind)
    rows = db.execute(select(column, model.tag_id).order_by(model.created_at)).all()
    result: Dict[uuid.UUID, Set[uuid.UUID]] = {}
    for entity_id, tag_id in rows:
        result.setdefault(entity_id, set()).add(tag_id)
    return result
