"""
Router pour les tags et leurs statistiques.
"""

import uuid
from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from academy.auth.dependencies import require_any_role, require_authenticated
from academy.auth.principal import Principal
from academy.auth.roles import MANAGERS
from academy.database import get_db
from academy.schemas.tag import TagCreate, TagResponse, TagStatsResponse, TagUpdate, TagUsageResponse
from academy.services import tag_service

router = APIRouter(prefix="/api/v1/tags", tags=["Tags"])

require_managers = require_any_role(*MANAGERS)


@router.get("", response_model=List[TagUsageResponse], summary="Lister les tags")
def list_tags(
    category: Optional[str] = None,
    search: Optional[str] = None,
    sort: Literal["name", "usage"] = "name",
    db: Session = Depends(get_db),
    _: Principal = Depends(require_authenticated()),
):
    return tag_service.get_tags(db, category=category, search=search, sort=sort)


@router.post("", response_model=TagResponse, status_code=201, summary="Créer un tag")
def create_tag(data: TagCreate, db: Session = Depends(get_db), _: Principal = Depends(require_managers)):
    return tag_service.create_tag(db, data)


# Déclarée avant /{tag_id} pour ne pas être capturée par le paramètre de chemin
@router.get("/stats", response_model=TagStatsResponse, summary="Statistiques d'utilisation")
def get_stats(
    top: Optional[int] = Query(default=None, ge=1),
    db: Session = Depends(get_db),
    _: Principal = Depends(require_managers),
):
    return tag_service.get_stats(db, top_n=top)


@router.get("/{tag_id}", response_model=TagUsageResponse, summary="Détail d'un tag")
def get_tag(tag_id: uuid.UUID, db: Session = Depends(get_db), _: Principal = Depends(require_authenticated())):
    return tag_service.get_tag(db, tag_id)


@router.put("/{tag_id}", response_model=TagResponse, summary="Modifier un tag")
def update_tag(tag_id: uuid.UUID, data: TagUpdate, db: Session = Depends(get_db), _: Principal = Depends(require_managers)):
    return tag_service.update_tag(db, tag_id, data)


@router.delete("/{tag_id}", status_code=204, summary="Supprimer un tag")
def delete_tag(tag_id: uuid.UUID, db: Session = Depends(get_db), _: Principal = Depends(require_managers)):
    """Refusé (409) tant que le tag est attaché à un élève, une classe, une séance ou un support."""
    tag_service.delete_tag(db, tag_id)
