"""
Modèle SQLAlchemy pour le référentiel des filières.
Indépendant des étudiants : une filière supprimée reste valable en texte libre.
"""

from sqlalchemy import Column, DateTime, Index, Integer, String, func

from librarytrack.database import Base


class Branch(Base):
    __tablename__ = "branches"

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(100), nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())


Index("ux_branches_name_lower", func.lower(Branch.name), unique=True)
