"""
Router pour les supports de cours.
"""

import uuid
from typing import List, Optional

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.auth.dependencies import require_authenticated, require_role
from academy.auth.principal import Principal
from academy.auth.roles import Role
from academy.database import get_db
from academy.schemas.material import MaterialCreate, MaterialResponse, MaterialUpdate
from academy.services import material_service

router = APIRouter(prefix="/api/v1/materials", tags=["Supports"])


@router.post("", response_model=MaterialResponse, status_code=201, summary="Ajouter un support")
def create_material(
    data: MaterialCreate,
    db: Session = Depends(get_db),
    principal: Principal = Depends(require_role(Role.ASSISTANT)),
):
    return material_service.create_material(db, data, principal)


@router.get("", response_model=List[MaterialResponse], summary="Lister les supports")
def list_materials(
    search: Optional[str] = None,
    file_type: Optional[str] = None,
    tag_id: Optional[uuid.UUID] = None,
    session_id: Optional[uuid.UUID] = None,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_authenticated()),
):
    return material_service.get_materials(db, search=search, file_type=file_type, tag_id=tag_id, session_id=session_id)


@router.get("/{material_id}", response_model=MaterialResponse, summary="Détail d'un support")
def get_material(material_id: uuid.UUID, db: Session = Depends(get_db), _: Principal = Depends(require_authenticated())):
    return material_service.get_material(db, material_id)


@router.put("/{material_id}", response_model=MaterialResponse, summary="Modifier un support")
def update_material(
    material_id: uuid.UUID,
    data: MaterialUpdate,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_role(Role.ASSISTANT)),
):
    return material_service.update_material(db, material_id, data)


@router.delete("/{material_id}", status_code=204, summary="Supprimer un support")
def delete_material(
    material_id: uuid.UUID,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_role(Role.TEACHER)),
):
    material_service.delete_material(db, material_id)
