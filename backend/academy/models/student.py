"""
Modèles SQLAlchemy pour les élèves et leur journal de changements de statut.

Le niveau scolaire n'est PAS stocké : il est recalculé à chaque lecture
à partir de la date de naissance (academy.services.grade).
"""

import uuid
from sqlalchemy import Column, Date, DateTime, ForeignKey, String, Text, func
from sqlalchemy.dialects.postgresql import UUID

from academy.database import Base


class Student(Base):
    __tablename__ = "students"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    user_id = Column(UUID(as_uuid=True), ForeignKey("users.id", ondelete="CASCADE"), unique=True, nullable=False)
    login_id = Column(String(100), unique=True, nullable=False)  # nom + 5 derniers chiffres du téléphone
    name = Column(String(100), nullable=False)
    birth_date = Column(Date, nullable=False)
    gender = Column(String(10), nullable=False)  # MALE, FEMALE
    school = Column(String(100), nullable=True)
    phone = Column(String(30), nullable=False)
    enrollment_status = Column(String(20), nullable=False, default="ENROLLED")  # ENROLLED, WAITING, LEFT
    management_status = Column(String(20), nullable=False, default="NORMAL")  # NORMAL, CAUTION
    parent_id = Column(UUID(as_uuid=True), ForeignKey("parents.id", ondelete="SET NULL"), nullable=True)
    created_at = Column(DateTime, server_default=func.now())
    updated_at = Column(DateTime, server_default=func.now(), onupdate=func.now())


class StatusLog(Base):
    """Journal append-only des changements de statut de suivi (jamais modifié)."""
    __tablename__ = "status_logs"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    # SET NULL : l'historique survit à la suppression définitive d'un élève
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="SET NULL"), nullable=True)
    previous_status = Column(String(20), nullable=False)
    new_status = Column(String(20), nullable=False)
    reason = Column(Text, nullable=False)
    changed_by = Column(UUID(as_uuid=True), ForeignKey("users.id"), nullable=False)
    changed_at = Column(DateTime, server_default=func.now())
