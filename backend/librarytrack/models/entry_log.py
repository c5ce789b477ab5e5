"""
Modèle SQLAlchemy pour le journal des entrées/sorties.

Append-only : une ligne n'est jamais modifiée ni supprimée.
- student_id n'est pas une clé étrangère : l'étudiant peut être supprimé plus tard
- student_name / branch sont une copie de l'étudiant au moment du passage
"""

import uuid

from sqlalchemy import Boolean, Column, DateTime, String, func

from librarytrack.database import Base

ENTRY = "Entry"
EXIT = "Exit"
ENTRY_TYPES = (ENTRY, EXIT)

SOURCE_SCAN = "scan"
SOURCE_MANUAL = "manual"


class EntryLog(Base):
    """Passage d'un étudiant au portique de la bibliothèque."""
    __tablename__ = "entry_logs"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    student_id = Column(String(100), nullable=False, index=True)
    student_name = Column(String(200), nullable=False)
    branch = Column(String(100), nullable=False)

    timestamp = Column(DateTime(timezone=True), nullable=False, index=True)
    type = Column(String(10), nullable=False)           # Entry, Exit
    image_match = Column(Boolean, nullable=True)        # NULL = non comparé ou non concluant
    source = Column(String(10), nullable=True)          # scan, manual

    created_at = Column(DateTime(timezone=True), server_default=func.now())
