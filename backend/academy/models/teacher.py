"""
Profil enseignant, rattaché à un compte utilisateur du personnel
(ADMIN, SENIOR_TEACHER, TEACHER ou ASSISTANT).
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, func
from sqlalchemy.dialects.postgresql import ARRAY, UUID

from academy.database import Base


class Teacher(Base):
    __tablename__ = "teachers"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    name = Column(String(100), nullable=False)
    phone = Column(String(30), nullable=True)
    specialties = Column(ARRAY(String(50)), default=list)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())
