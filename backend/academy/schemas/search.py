"""
Schémas Pydantic pour la recherche multi-tags.

Le corps n'est volontairement pas contraint ici : la validation (liste vide,
logique, cible) relève du moteur de filtrage et produit une erreur 400.
"""

import uuid
from typing import List, Union

from pydantic import BaseModel

from academy.schemas.class_session import SessionResponse
from academy.schemas.material import MaterialResponse
from academy.schemas.school_class import ClassResponse
from academy.schemas.student import StudentResponse


class TagSearchRequest(BaseModel):
    tag_ids: List[uuid.UUID] = []
    logic: str = "AND"
    target_type: str


class TagSearchQuery(BaseModel):
    tag_ids: List[uuid.UUID]
    logic: str
    target_type: str


class TagSearchResponse(BaseModel):
    results: List[Union[StudentResponse, ClassResponse, SessionResponse, MaterialResponse]]
    count: int
    query: TagSearchQuery
