"""
Modèles SQLAlchemy pour les classes et leurs associations.
Nommé school_class pour éviter le conflit avec le mot-clé Python 'class'.
"""

import uuid
from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Numeric, String, Text, func
from sqlalchemy.dialects.postgresql import JSONB, UUID

from academy.database import Base


class SchoolClass(Base):
    __tablename__ = "classes"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    name = Column(String(100), nullable=False)
    description = Column(Text, nullable=True)
    cost = Column(Numeric(10, 2), nullable=True)
    main_teacher_id = Column(UUID(as_uuid=True), ForeignKey("teachers.id"), nullable=False)
    recurring_schedules = Column(JSONB, nullable=True)  # [{"weekday": 1, "start": "16:00", "end": "18:00"}]
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class ClassStudent(Base):
    """Association classe ↔ élèves inscrits."""
    __tablename__ = "class_students"

    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), primary_key=True)
    enrolled_at = Column(DateTime, server_default=func.now())


class ClassAssistant(Base):
    """Association classe ↔ enseignants assistants."""
    __tablename__ = "class_assistants"

    class_id = Column(UUID(as_uuid=True), ForeignKey("classes.id", ondelete="CASCADE"), primary_key=True)
    teacher_id = Column(UUID(as_uuid=True), ForeignKey("teachers.id", ondelete="CASCADE"), primary_key=True)
    assigned_at = Column(DateTime, server_default=func.now())
