"""
Modèle SQLAlchemy pour les présences aux séances.
Une seule ligne par (séance, élève) : un nouvel appel met à jour la ligne existante.
"""

import uuid
from sqlalchemy import Column, DateTime, ForeignKey, String, Text, UniqueConstraint, func
from sqlalchemy.dialects.postgresql import UUID

from academy.database import Base


class Attendance(Base):
    __tablename__ = "attendances"
    __table_args__ = (UniqueConstraint("session_id", "student_id", name="uq_attendance_session_student"),)

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    session_id = Column(UUID(as_uuid=True), ForeignKey("sessions.id", ondelete="CASCADE"), nullable=False)
    student_id = Column(UUID(as_uuid=True), ForeignKey("students.id", ondelete="CASCADE"), nullable=False)
    status = Column(String(20), nullable=False)  # PRESENT, ABSENT, LATE, EXCUSED
    notes = Column(Text, nullable=True)
    checked_by = Column(UUID(as_uuid=True), ForeignKey("teachers.id"), nullable=True)
    checked_at = Column(DateTime, server_default=func.now())
    created_at = Column(DateTime, server_default=func.now())
