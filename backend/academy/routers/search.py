"""
Router de recherche multi-tags.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from academy.auth.dependencies import require_role
from academy.auth.principal import Principal
from academy.auth.roles import Role
from academy.database import get_db
from academy.schemas.search import TagSearchRequest, TagSearchResponse
from academy.services import tag_search

router = APIRouter(prefix="/api/v1/search", tags=["Recherche"])


@router.post("/by-tags", response_model=TagSearchResponse, summary="Rechercher par tags")
def search_by_tags(
    data: TagSearchRequest,
    db: Session = Depends(get_db),
    _: Principal = Depends(require_role(Role.TEACHER)),
):
    """
    Retourne les élèves, classes, séances ou supports portant tous les tags (AND)
    ou au moins un des tags (OR).
    """
    return tag_search.search_by_tags(db, data.tag_ids, data.logic, data.target_type)
