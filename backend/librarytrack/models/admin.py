"""
Modèle SQLAlchemy pour l'identifiant administrateur.
Une seule ligne : la console n'a qu'un compte.
"""

from sqlalchemy import Column, DateTime, Integer, String, func

from librarytrack.database import Base


class AdminCredential(Base):
    __tablename__ = "admin_credentials"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(100), nullable=False)
    password_hash = Column(String(255), nullable=False)
    last_login = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
