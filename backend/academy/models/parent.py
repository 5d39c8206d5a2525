"""
Modèle SQLAlchemy pour les parents (tuteurs) des élèves.
Le compte utilisateur est optionnel : un parent peut exister sans accès au portail.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import UUID

from academy.database import Base


class Parent(Base):
    __tablename__ = "parents"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="SET NULL"), unique=True, nullable=True)
    name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=True)
    relation = Column(String(30), nullable=True)  # Mère, Père, Tuteur...
    created_at = Column(DateTime, server_default=func.now())
