"""
Service métier pour les supports de cours.

Seules les métadonnées sont gérées ici (titre, URL, type, taille) :
le stockage des fichiers est externe.
"""

import uuid
from typing import List, Optional

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from academy.auth.principal import Principal
from academy.errors import NotFound
from academy.models.material import Material, SessionMaterial
from academy.models.tag import MaterialTag
from academy.schemas.material import MaterialCreate, MaterialResponse, MaterialUpdate
from academy.schemas.tag import TagSummary
from academy.services.tag_filter import TargetKind
from academy.services.tag_links import ensure_tags_exist, load_tags, replace_tags
from academy.services.teacher_service import get_teacher_profile


def create_material(db: Session, data: MaterialCreate, principal: Principal) -> MaterialResponse:
    teacher = get_teacher_profile(db, principal.id)
    tag_ids = ensure_tags_exist(db, data.tag_ids)

    material = Material(
        id=uuid.uuid4(),
        title=data.title,
        description=data.description,
        file_url=data.file_url,
        file_type=data.file_type,
        file_size=data.file_size,
        created_by=teacher.id,
    )
    db.add(material)
    db.flush()
    replace_tags(db, TargetKind.MATERIALS, material.id, tag_ids)
    db.commit()
    db.refresh(material)
    return _to_response(db, material)


def get_materials(
    db: Session,
    search: Optional[str] = None,
    file_type: Optional[str] = None,
    tag_id: Optional[uuid.UUID] = None,
    session_id: Optional[uuid.UUID] = None,
) -> List[MaterialResponse]:
    """Liste les supports, les plus récents d'abord."""
    query = select(Material).order_by(Material.created_at.desc())
    if search:
        pattern = f"%{search}%"
        query = query.where(or_(Material.title.ilike(pattern), Material.description.ilike(pattern)))
    if file_type:
        query = query.where(Material.file_type == file_type)
    if tag_id is not None:
        query = query.where(Material.id.in_(select(MaterialTag.material_id).where(MaterialTag.tag_id == tag_id)))
    if session_id is not None:
        query = query.where(Material.id.in_(
            select(SessionMaterial.material_id).where(SessionMaterial.session_id == session_id)
        ))

    materials = db.execute(query).scalars().all()
    tags = load_tags(db, TargetKind.MATERIALS, [m.id for m in materials])
    return [_to_response(db, m, tags.get(m.id, [])) for m in materials]


def get_material(db: Session, material_id: uuid.UUID) -> MaterialResponse:
    return _to_response(db, _get_or_404(db, material_id))


def update_material(db: Session, material_id: uuid.UUID, data: MaterialUpdate) -> MaterialResponse:
    material = _get_or_404(db, material_id)

    update_data = data.model_dump(exclude_unset=True)
    tag_ids = update_data.pop("tag_ids", None)
    for field, value in update_data.items():
        setattr(material, field, value)
    if tag_ids is not None:
        replace_tags(db, TargetKind.MATERIALS, material_id, tag_ids)

    try:
        db.commit()
    except Exception:
        db.rollback()
        raise
    db.refresh(material)
    return _to_response(db, material)


def delete_material(db: Session, material_id: uuid.UUID) -> None:
    """Suppression définitive ; les liens séance et tags partent en cascade."""
    material = _get_or_404(db, material_id)
    db.delete(material)
    db.commit()


def _get_or_404(db: Session, material_id: uuid.UUID) -> Material:
    material = db.get(Material, material_id)
    if material is None:
        raise NotFound("Support introuvable.")
    return material


def _to_response(db: Session, material: Material, tags: Optional[List[TagSummary]] = None) -> MaterialResponse:
    if tags is None:
        tags = load_tags(db, TargetKind.MATERIALS, [material.id]).get(material.id, [])
    session_count = db.execute(
        select(func.count()).select_from(SessionMaterial).where(SessionMaterial.material_id == material.id)
    ).scalar() or 0
    return MaterialResponse(
        id=material.id,
        title=material.title,
        description=material.description,
        file_url=material.file_url,
        file_type=material.file_type,
        file_size=material.file_size,
        created_by=material.created_by,
        session_count=session_count,
        tags=tags,
        created_at=material.created_at,
        updated_at=material.updated_at,
    )
