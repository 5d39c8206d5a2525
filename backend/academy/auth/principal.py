"""
Principal : l'utilisateur authentifié qui effectue une opération.
"""

import uuid

from pydantic import BaseModel

from academy.auth.roles import Role


class Principal(BaseModel):
    id: uuid.UUID
    email: str
    name: str
    role: Role

    model_config = {"from_attributes": True, "frozen": True}
