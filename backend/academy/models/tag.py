"""
Modèles SQLAlchemy pour les tags et leurs associations (N-N) avec
élèves, classes, séances et supports de cours.

Les FK vers tags sont en RESTRICT : un tag référencé ne peut pas être supprimé.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from academy.database import Base


class Tag(Base):
    __tablename__ = "tags"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(50), unique=True, nullable=False)
    color = Column(String(20), nullable=False)  # ex: "#3B82F6"
    category = Column(String(50), nullable=True)
    description = Column(Text, nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class StudentTag(Base):
    __tablename__ = "student_tags"

    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(UUID(as_uuid=True), ForeignKey("tags.id", ondelete="RESTRICT"), primary_key=True)
    created_at = Column(DateTime, server_default=func.now())


class ClassTag(Base):
    __tablename__ = "class_tags"

    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(UUID(as_uuid=True), ForeignKey("tags.id", ondelete="RESTRICT"), primary_key=True)
    created_at = Column(DateTime, server_default=func.now())


class SessionTag(Base):
    __tablename__ = "session_tags"

    session_id = Column(UUID(as_uuid=True), ForeignKey("sessions.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(UUID(as_uuid=True), ForeignKey("tags.id", ondelete="RESTRICT"), primary_key=True)
    created_at = Column(DateTime, server_default=func.now())


class MaterialTag(Base):
    __tablename__ = "material_tags"

    material_id = Column(UUID(as_uuid=True), ForeignKey("materials.id", ondelete="CASCADE"), primary_key=True)
    tag_id = Column(UUID(as_uuid=True), ForeignKey("tags.id", ondelete="RESTRICT"), primary_key=True)
    created_at = Column(DateTime, server_default=func.now())
